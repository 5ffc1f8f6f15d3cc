"""Core numerical primitives for mlpnet."""

from . import activations, errors, records, types
from .network import MultiLayerPerceptron

__all__ = ["MultiLayerPerceptron", "activations", "errors", "records", "types"]
