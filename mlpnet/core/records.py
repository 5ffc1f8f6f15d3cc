"""Conversion between dense arrays and the nested form used by model records."""

from __future__ import annotations

import numbers
from typing import Any, List, Sequence, Tuple

import numpy as np

from .errors import FormatError
from .types import Array, Matrix


def to_nested(matrix: Array) -> Matrix:
    """Return ``matrix`` as a row-major list of lists of Python floats."""

    return [[float(value) for value in row] for row in np.asarray(matrix, dtype=np.float64)]


def to_list(vector: Array) -> List[float]:
    return [float(value) for value in np.asarray(vector, dtype=np.float64)]


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (Sequence, np.ndarray)) and not isinstance(value, (str, bytes))


def _check_number(value: Any, where: str) -> float:
    # bool is an int subclass but never a valid weight.
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise FormatError(f"{where}: expected a number, got {value!r}")
    return float(value)


def from_nested(rows: Any, shape: Tuple[int, int], name: str = "matrix") -> Array:
    """Build a dense ``float64`` matrix of ``shape`` from nested rows.

    Raises :class:`FormatError` when the row or column counts disagree with
    ``shape`` or when an entry is not a real number.
    """

    n_rows, n_cols = shape
    if not _is_sequence(rows):
        raise FormatError(f"{name}: expected a list of rows")
    if len(rows) != n_rows:
        raise FormatError(f"{name}: expected {n_rows} rows, found {len(rows)}")
    out = np.empty(shape, dtype=np.float64)
    for i, row in enumerate(rows):
        if not _is_sequence(row):
            raise FormatError(f"{name}[{i}]: expected a list of numbers")
        if len(row) != n_cols:
            raise FormatError(f"{name}[{i}]: expected {n_cols} columns, found {len(row)}")
        for j, value in enumerate(row):
            out[i, j] = _check_number(value, f"{name}[{i}][{j}]")
    return out


def from_list(values: Any, length: int, name: str = "vector") -> Array:
    """Build a dense ``float64`` vector of ``length`` from a flat list."""

    if not _is_sequence(values):
        raise FormatError(f"{name}: expected a list of numbers")
    if len(values) != length:
        raise FormatError(f"{name}: expected {length} values, found {len(values)}")
    return np.array(
        [_check_number(value, f"{name}[{i}]") for i, value in enumerate(values)],
        dtype=np.float64,
    )


__all__ = ["from_list", "from_nested", "to_list", "to_nested"]
