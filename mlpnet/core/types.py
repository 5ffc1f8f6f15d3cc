"""Core typing contracts for mlpnet."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

import numpy as np

from .errors import FormatError

Array = np.ndarray


@dataclass(frozen=True)
class Topology:
    """Sizes of the four layers: input, hidden-1, hidden-2, output."""

    input_size: int
    hidden1_size: int
    hidden2_size: int
    output_size: int

    @property
    def layer_sizes(self) -> Tuple[int, int, int, int]:
        return (self.input_size, self.hidden1_size, self.hidden2_size, self.output_size)

    @property
    def weight_shapes(self) -> Tuple[Tuple[int, int], ...]:
        sizes = self.layer_sizes
        return tuple(zip(sizes[:-1], sizes[1:]))

    def parameter_count(self) -> int:
        return int(sum(src * dst + dst for src, dst in self.weight_shapes))


@dataclass(frozen=True)
class Hyperparameters:
    """Fixed training coefficients."""

    learning_rate: float
    momentum: float


@dataclass(frozen=True)
class ActivationSnapshot:
    """Per-layer outputs captured by the most recent forward pass."""

    inputs: Array
    hidden1: Array
    hidden2: Array
    outputs: Array

    def layers(self) -> Tuple[Array, Array, Array, Array]:
        return (self.inputs, self.hidden1, self.hidden2, self.outputs)


@dataclass(frozen=True)
class Sample:
    """A single (inputs, targets) training pair."""

    inputs: Sequence[float]
    targets: Sequence[float]


SampleLike = Union[Sample, Tuple[Sequence[float], Sequence[float]]]

Matrix = List[List[float]]


@dataclass(frozen=True)
class ModelRecord:
    """Flat, storage-ready description of a trained network.

    Weight tables are row-major nested lists: ``weights_input_hidden1[i][j]``
    is the weight from input neuron ``i`` to hidden-1 neuron ``j``.
    """

    input_size: int
    hidden1_size: int
    hidden2_size: int
    output_size: int
    learning_rate: float
    momentum: float
    weights_input_hidden1: Matrix
    weights_hidden1_hidden2: Matrix
    weights_hidden2_output: Matrix
    bias_hidden1: List[float]
    bias_hidden2: List[float]
    bias_output: List[float]

    @property
    def topology(self) -> Topology:
        return Topology(self.input_size, self.hidden1_size, self.hidden2_size, self.output_size)

    @property
    def hyperparameters(self) -> Hyperparameters:
        return Hyperparameters(self.learning_rate, self.momentum)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(cls.__dataclass_fields__)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ModelRecord":
        # Shape checks happen in MultiLayerPerceptron.from_record.
        if not isinstance(payload, Mapping):
            raise FormatError(f"Model record must be a mapping, got {type(payload).__name__}")
        missing = [name for name in cls.field_names() if name not in payload]
        if missing:
            raise FormatError(f"Model record is missing fields: {', '.join(missing)}")
        return cls(**{name: payload[name] for name in cls.field_names()})


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`mlpnet.training.pipelines.run_pipeline`."""

    epochs: int
    final_loss: float
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    model_path: str = ""


@dataclass
class TrainingResult:
    """Outcome of :meth:`mlpnet.training.trainer.Trainer.run`."""

    epochs_completed: int
    final_loss: float
    history: List[Tuple[int, float]] = field(default_factory=list)
    stopped: bool = False


__all__ = [
    "ActivationSnapshot",
    "Array",
    "Hyperparameters",
    "ModelRecord",
    "RunResult",
    "Sample",
    "SampleLike",
    "Topology",
    "TrainingResult",
]
