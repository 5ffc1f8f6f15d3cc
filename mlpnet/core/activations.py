"""Activation and loss primitives for mlpnet."""

from __future__ import annotations

import numpy as np

from .types import Array


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid ``1 / (1 + e^-x)``."""

    # exp overflows to inf for large negative x; the result saturates to 0.
    with np.errstate(over="ignore"):
        return 1.0 / (1.0 + np.exp(-x))


def sigmoid_deriv(s: Array) -> Array:
    """Sigmoid derivative expressed through the sigmoid output ``s``."""

    return s * (1.0 - s)


def half_squared_error(outputs: Array, targets: Array) -> float:
    """Return ``0.5 * sum((targets - outputs) ** 2)``."""

    diff = targets - outputs
    return float(0.5 * np.dot(diff, diff))


__all__ = ["half_squared_error", "sigmoid", "sigmoid_deriv"]
