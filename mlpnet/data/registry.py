"""Dataset registry: named sources of (inputs, targets) training samples."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, MutableMapping, Tuple

import numpy as np
import pandas as pd

from ..core.errors import FormatError, IOFailure
from ..core.types import Sample


@dataclass(frozen=True)
class DatasetSpec:
    """A fully materialised dataset.

    Attributes
    ----------
    name:
        Registry identifier the dataset was built from.
    samples:
        Training pairs in presentation order; training never shuffles them.
    input_size, output_size:
        Vector lengths shared by every sample.
    provenance:
        Free-form metadata recorded in run manifests.
    """

    name: str
    samples: Tuple[Sample, ...]
    input_size: int
    output_size: int
    provenance: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.samples)


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory, either directly or as a decorator::

        @register_dataset("xor")
        def make_xor(**options):
            ...
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` registered as ``dataset``."""

    if dataset not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}")
    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


get = get_dataset


def register(name: str, loader: DatasetFactory) -> DatasetFactory:
    """Register ``loader`` under ``name`` and return it unchanged."""

    return register_dataset(name, loader)  # type: ignore[return-value]


def available_datasets() -> Iterable[str]:
    return sorted(_REGISTRY)


names = available_datasets


def _validate_spec(spec: DatasetSpec) -> None:
    if not spec.samples:
        raise ValueError(f"Dataset {spec.name!r} has no samples")
    for idx, sample in enumerate(spec.samples):
        if len(sample.inputs) != spec.input_size or len(sample.targets) != spec.output_size:
            raise ValueError(
                f"Dataset {spec.name!r} sample {idx} does not match "
                f"{spec.input_size} inputs / {spec.output_size} targets"
            )


def samples_from_arrays(inputs: np.ndarray, targets: np.ndarray) -> Tuple[Sample, ...]:
    return tuple(
        Sample(inputs=tuple(float(v) for v in x), targets=tuple(float(v) for v in t))
        for x, t in zip(inputs, targets)
    )


# Built-in datasets -----------------------------------------------------------------------

_PARITY3 = {
    (0, 0, 0): 0,
    (0, 0, 1): 1,
    (0, 1, 0): 1,
    (0, 1, 1): 0,
    (1, 0, 0): 1,
    (1, 0, 1): 0,
    (1, 1, 0): 0,
    (1, 1, 1): 1,
}


@register_dataset("parity3")
def make_parity3() -> DatasetSpec:
    """Odd parity of three bits: output 1 when an odd number of inputs is set."""

    inputs = np.array(list(_PARITY3), dtype=np.float64)
    targets = np.array(list(_PARITY3.values()), dtype=np.float64).reshape(-1, 1)
    return DatasetSpec(
        name="parity3",
        samples=samples_from_arrays(inputs, targets),
        input_size=3,
        output_size=1,
        provenance={"type": "builtin", "name": "parity3", "samples": len(_PARITY3)},
    )


@register_dataset("csv")
def load_csv(
    *,
    path: str | Path,
    n_inputs: int,
    skip_header: bool = False,
) -> DatasetSpec:
    """Load samples from a numeric CSV file.

    Each row holds ``n_inputs`` input columns followed by the target columns.
    A leading header row is ignored when ``skip_header`` is true.
    """

    path = Path(path)
    try:
        frame = pd.read_csv(path, header=0 if skip_header else None)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise FormatError(f"Cannot parse CSV dataset {path}: {exc}") from exc
    except OSError as exc:
        raise IOFailure.wrap(exc) from exc

    try:
        values = frame.to_numpy(dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise FormatError(f"CSV dataset {path} contains non-numeric values") from exc
    if values.shape[0] == 0:
        raise FormatError(f"CSV dataset {path} has no data rows")
    n_inputs = int(n_inputs)
    if not 0 < n_inputs < values.shape[1]:
        raise FormatError(
            f"CSV dataset {path} has {values.shape[1]} columns; "
            f"cannot split into {n_inputs} inputs and at least one target"
        )
    return DatasetSpec(
        name="csv",
        samples=samples_from_arrays(values[:, :n_inputs], values[:, n_inputs:]),
        input_size=n_inputs,
        output_size=int(values.shape[1] - n_inputs),
        provenance={"type": "csv", "path": str(path), "rows": int(values.shape[0])},
    )


__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get",
    "get_dataset",
    "load_csv",
    "make_parity3",
    "names",
    "register",
    "register_dataset",
    "samples_from_arrays",
]
