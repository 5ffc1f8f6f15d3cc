"""mlpnet public API."""

from .core import activations, types  # noqa: F401
from .core.errors import FormatError, InputError, IOFailure, MLPError, ValidationError
from .core.network import MultiLayerPerceptron
from .core.types import ActivationSnapshot, Hyperparameters, ModelRecord, Sample, Topology
from .persistence import load_model, save_model
from .training.background import BackgroundTrainer
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer

__version__ = "0.1.0"

__all__ = [
    "ActivationSnapshot",
    "BackgroundTrainer",
    "FormatError",
    "Hyperparameters",
    "IOFailure",
    "InputError",
    "MLPError",
    "ModelRecord",
    "MultiLayerPerceptron",
    "Sample",
    "Topology",
    "Trainer",
    "ValidationError",
    "activations",
    "load_model",
    "load_preset",
    "presets",
    "run_pipeline",
    "save_model",
    "types",
]
