"""Dataset registry and built-in sample sources."""

from .registry import (
    DatasetSpec,
    available_datasets,
    get,
    get_dataset,
    names,
    register,
    register_dataset,
)

__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get",
    "get_dataset",
    "names",
    "register",
    "register_dataset",
]
