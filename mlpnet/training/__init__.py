"""Training loops and pipeline assembly."""

from .background import BackgroundTrainer
from .pipelines import load_preset, presets, run_pipeline
from .trainer import Trainer

__all__ = ["BackgroundTrainer", "Trainer", "load_preset", "presets", "run_pipeline"]
