"""Four-layer sigmoid perceptron trained by online backpropagation with momentum."""

from __future__ import annotations

import logging
import numbers
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Sequence, Tuple

import numpy as np

from .activations import half_squared_error, sigmoid, sigmoid_deriv
from .errors import FormatError, InputError, ValidationError
from .records import from_list, from_nested, to_list, to_nested
from .types import (
    ActivationSnapshot,
    Array,
    Hyperparameters,
    ModelRecord,
    SampleLike,
    Topology,
)

logger = logging.getLogger(__name__)

_LAYER_NAMES = ("input_size", "hidden1_size", "hidden2_size", "output_size")
_WEIGHT_FIELDS = ("weights_input_hidden1", "weights_hidden1_hidden2", "weights_hidden2_output")
_BIAS_FIELDS = ("bias_hidden1", "bias_hidden2", "bias_output")

DEFAULT_REPORT_EVERY = 500

Metrics = Mapping[str, float]


def _layer_size(name: str, value: Any, error: type = ValidationError) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise error(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise error(f"{name} must be positive, got {value}")
    return int(value)


def _coefficient(name: str, value: Any, error: type = ValidationError) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise error(f"{name} must be a real number, got {value!r}")
    return float(value)


def _frozen(array: Array) -> Array:
    out = np.array(array, dtype=np.float64, copy=True)
    out.setflags(write=False)
    return out


def emit_epoch(callbacks: Iterable[object], epoch: int, metrics: Metrics) -> None:
    """Deliver ``metrics`` to each callback (``on_epoch`` hook or plain callable)."""

    for callback in callbacks:
        if hasattr(callback, "on_epoch"):
            callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
        elif callable(callback):
            callback(epoch, metrics)


class MultiLayerPerceptron:
    """Fully-connected input/hidden-1/hidden-2/output network.

    Weight matrix ``k`` has shape ``(source_size, dest_size)`` and entry
    ``[i, j]`` connects source neuron ``i`` to destination neuron ``j``.
    Every weight and bias starts uniform in ``[-1, 1)``; momentum velocities
    start at zero.

    Parameters
    ----------
    input_size, hidden1_size, hidden2_size, output_size:
        Positive layer sizes.
    learning_rate, momentum:
        Fixed for the lifetime of the network.
    rng:
        Optional ``numpy.random.Generator`` used for initialisation.
    seed:
        Seed for a fresh generator when ``rng`` is not supplied.
    """

    def __init__(
        self,
        input_size: int,
        hidden1_size: int,
        hidden2_size: int,
        output_size: int,
        learning_rate: float,
        momentum: float,
        *,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ) -> None:
        sizes = (input_size, hidden1_size, hidden2_size, output_size)
        self._topology = Topology(*(_layer_size(n, v) for n, v in zip(_LAYER_NAMES, sizes)))
        self._hyper = Hyperparameters(
            learning_rate=_coefficient("learning_rate", learning_rate),
            momentum=_coefficient("momentum", momentum),
        )
        self._rng = rng if rng is not None else np.random.default_rng(seed)

        shapes = self._topology.weight_shapes
        self._weights: List[Array] = [self._rng.uniform(-1.0, 1.0, size=s) for s in shapes]
        self._biases: List[Array] = [self._rng.uniform(-1.0, 1.0, size=s[1]) for s in shapes]
        self._weight_velocity: List[Array] = [np.zeros(s) for s in shapes]
        self._bias_velocity: List[Array] = [np.zeros(s[1]) for s in shapes]
        self._last_activations: ActivationSnapshot | None = None

    def __repr__(self) -> str:
        layers = "-".join(str(size) for size in self._topology.layer_sizes)
        return (
            f"{type(self).__name__}({layers}, learning_rate={self.learning_rate}, "
            f"momentum={self.momentum})"
        )

    # ------------------------------------------------------------------
    # Introspection

    @property
    def topology(self) -> Topology:
        return self._topology

    @property
    def hyperparameters(self) -> Hyperparameters:
        return self._hyper

    @property
    def input_size(self) -> int:
        return self._topology.input_size

    @property
    def output_size(self) -> int:
        return self._topology.output_size

    @property
    def learning_rate(self) -> float:
        return self._hyper.learning_rate

    @property
    def momentum(self) -> float:
        return self._hyper.momentum

    @property
    def weights(self) -> Tuple[Array, Array, Array]:
        """Read-only copies of the input→h1, h1→h2 and h2→output matrices."""

        return tuple(_frozen(w) for w in self._weights)  # type: ignore[return-value]

    @property
    def biases(self) -> Tuple[Array, Array, Array]:
        """Read-only copies of the hidden-1, hidden-2 and output biases."""

        return tuple(_frozen(b) for b in self._biases)  # type: ignore[return-value]

    @property
    def last_activations(self) -> ActivationSnapshot | None:
        """Snapshot of the latest :meth:`forward` call, ``None`` before the first."""

        return self._last_activations

    def describe(self) -> dict:
        return {
            "layer_sizes": list(self._topology.layer_sizes),
            "learning_rate": self.learning_rate,
            "momentum": self.momentum,
            "parameters": self._topology.parameter_count(),
        }

    # ------------------------------------------------------------------
    # Inference

    def forward(self, inputs: Sequence[float]) -> Array:
        """Return the output layer for ``inputs`` and record the activation snapshot."""

        x = self._vector(inputs, self.input_size, "inputs")
        h1, h2, out = self._propagate(x)
        self._last_activations = ActivationSnapshot(
            inputs=_frozen(x), hidden1=_frozen(h1), hidden2=_frozen(h2), outputs=_frozen(out)
        )
        return out.copy()

    def predict(self, inputs: Sequence[float], threshold: float = 0.5) -> Array:
        """Forward pass thresholded to 0/1 per output neuron."""

        return (self.forward(inputs) > threshold).astype(np.int64)

    def evaluate(self, samples: Iterable[SampleLike]) -> float:
        """Mean per-sample loss over ``samples`` without touching any state."""

        prepared = self.prepare_samples(samples)
        total = 0.0
        for x, t in prepared:
            total += half_squared_error(self._propagate(x)[2], t)
        return total / len(prepared)

    # ------------------------------------------------------------------
    # Training

    def train(
        self,
        samples: Iterable[SampleLike],
        epochs: int,
        *,
        report_every: int = DEFAULT_REPORT_EVERY,
        callbacks: Sequence[object] = (),
    ) -> None:
        """Run ``epochs`` passes of online backpropagation over ``samples``.

        Weights are updated after every sample, in the given order. Every
        ``report_every`` epochs the mean per-sample loss is logged and handed
        to ``callbacks``; ``report_every <= 0`` disables reporting.
        """

        epochs = _layer_size("epochs", epochs)
        prepared = self.prepare_samples(samples)
        logger.info(
            "Training %s for %d epochs on %d samples",
            self,
            epochs,
            len(prepared),
        )
        for epoch in range(1, epochs + 1):
            loss = self.run_epoch(prepared)
            if report_every > 0 and epoch % report_every == 0:
                logger.info("Epoch %5d/%d | mean loss: %.8f", epoch, epochs, loss)
                emit_epoch(callbacks, epoch, {"loss": loss})
        logger.info("Training finished")

    def train_epoch(self, samples: Iterable[SampleLike]) -> float:
        """Run a single epoch and return its mean per-sample loss."""

        return self.run_epoch(self.prepare_samples(samples))

    def run_epoch(self, prepared: Sequence[Tuple[Array, Array]]) -> float:
        """Train one epoch on pairs already returned by :meth:`prepare_samples`."""

        total = 0.0
        for x, t in prepared:
            total += self._step(x, t)
        return total / len(prepared)

    def _step(self, x: Array, t: Array) -> float:
        h1, h2, out = self._propagate(x)
        loss = half_squared_error(out, t)

        # All deltas use the weights as they were for this sample's forward pass.
        delta_out = (t - out) * sigmoid_deriv(out)
        delta_h2 = (self._weights[2] @ delta_out) * sigmoid_deriv(h2)
        delta_h1 = (self._weights[1] @ delta_h2) * sigmoid_deriv(h1)

        lr = self._hyper.learning_rate
        mu = self._hyper.momentum
        for idx, (source, delta) in enumerate(((x, delta_h1), (h1, delta_h2), (h2, delta_out))):
            velocity = self._weight_velocity[idx]
            velocity *= mu
            velocity += lr * np.outer(source, delta)
            self._weights[idx] += velocity

            bias_velocity = self._bias_velocity[idx]
            bias_velocity *= mu
            bias_velocity += lr * delta
            self._biases[idx] += bias_velocity
        return loss

    def _propagate(self, x: Array) -> Tuple[Array, Array, Array]:
        h1 = sigmoid(x @ self._weights[0] + self._biases[0])
        h2 = sigmoid(h1 @ self._weights[1] + self._biases[1])
        out = sigmoid(h2 @ self._weights[2] + self._biases[2])
        return h1, h2, out

    @staticmethod
    def _vector(values: Any, size: int, name: str) -> Array:
        try:
            vec = np.asarray(values, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise InputError(f"{name} must be numeric: {exc}") from exc
        if vec.ndim != 1:
            raise InputError(f"{name} must be one-dimensional, got shape {vec.shape}")
        if vec.shape[0] != size:
            raise InputError(f"{name} has length {vec.shape[0]}, expected {size}")
        return vec

    def prepare_samples(self, samples: Iterable[SampleLike]) -> List[Tuple[Array, Array]]:
        """Convert and validate ``samples`` into float64 (inputs, targets) pairs.

        Raises :class:`InputError` for a wrong length, a non-numeric value or an
        empty collection.
        """

        prepared: List[Tuple[Array, Array]] = []
        for idx, sample in enumerate(samples):
            if hasattr(sample, "inputs") and hasattr(sample, "targets"):
                inputs, targets = sample.inputs, sample.targets  # type: ignore[union-attr]
            else:
                try:
                    inputs, targets = sample  # type: ignore[misc]
                except (TypeError, ValueError) as exc:
                    raise InputError(f"sample {idx} is not an (inputs, targets) pair") from exc
            prepared.append(
                (
                    self._vector(inputs, self.input_size, f"sample {idx} inputs"),
                    self._vector(targets, self.output_size, f"sample {idx} targets"),
                )
            )
        if not prepared:
            raise InputError("at least one training sample is required")
        return prepared

    # ------------------------------------------------------------------
    # Persistence

    def to_record(self) -> ModelRecord:
        topo = self._topology
        return ModelRecord(
            input_size=topo.input_size,
            hidden1_size=topo.hidden1_size,
            hidden2_size=topo.hidden2_size,
            output_size=topo.output_size,
            learning_rate=self.learning_rate,
            momentum=self.momentum,
            weights_input_hidden1=to_nested(self._weights[0]),
            weights_hidden1_hidden2=to_nested(self._weights[1]),
            weights_hidden2_output=to_nested(self._weights[2]),
            bias_hidden1=to_list(self._biases[0]),
            bias_hidden2=to_list(self._biases[1]),
            bias_output=to_list(self._biases[2]),
        )

    @classmethod
    def from_record(
        cls,
        record: ModelRecord | Mapping[str, Any],
        *,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ) -> "MultiLayerPerceptron":
        """Rebuild a network from ``record``.

        Every table is checked against the declared topology before the
        network is constructed; inconsistencies raise :class:`FormatError`.
        Momentum velocities are not part of the record and restart at zero.
        """

        if not isinstance(record, ModelRecord):
            record = ModelRecord.from_dict(record)
        sizes = [_layer_size(name, getattr(record, name), FormatError) for name in _LAYER_NAMES]
        learning_rate = _coefficient("learning_rate", record.learning_rate, FormatError)
        momentum = _coefficient("momentum", record.momentum, FormatError)

        shapes = Topology(*sizes).weight_shapes
        weights = [
            from_nested(getattr(record, name), shape, name)
            for name, shape in zip(_WEIGHT_FIELDS, shapes)
        ]
        biases = [
            from_list(getattr(record, name), shape[1], name)
            for name, shape in zip(_BIAS_FIELDS, shapes)
        ]

        network = cls(*sizes, learning_rate, momentum, rng=rng, seed=seed)
        network._weights = weights
        network._biases = biases
        return network

    def save(self, path: str | Path) -> Path:
        from ..persistence import save_model

        return save_model(self, path)

    @classmethod
    def load(cls, path: str | Path) -> "MultiLayerPerceptron":
        from ..persistence import load_model

        return load_model(path, network_cls=cls)


__all__ = ["DEFAULT_REPORT_EVERY", "MultiLayerPerceptron", "emit_epoch"]
