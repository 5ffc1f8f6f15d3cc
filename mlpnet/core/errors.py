"""Exception hierarchy raised by the network engine."""

from __future__ import annotations


class MLPError(Exception):
    """Base class for every error raised by mlpnet."""


class ValidationError(MLPError, ValueError):
    """Invalid construction argument, e.g. a non-positive layer size."""


class InputError(MLPError, ValueError):
    """Input or target vector whose length does not match the topology."""


class FormatError(MLPError, ValueError):
    """Malformed or topology-inconsistent model record."""


class IOFailure(MLPError, OSError):
    """Underlying storage read/write failure."""

    @classmethod
    def wrap(cls, exc: OSError) -> "IOFailure":
        if exc.errno is None:
            return cls(str(exc))
        return cls(exc.errno, exc.strerror or str(exc), exc.filename)


__all__ = ["FormatError", "IOFailure", "InputError", "MLPError", "ValidationError"]
