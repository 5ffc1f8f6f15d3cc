"""JSON persistence for trained networks.

A saved model is one indented JSON object holding the fields of
:class:`~mlpnet.core.types.ModelRecord`::

    {
      "input_size": 3,
      "hidden1_size": 8,
      ...
      "weights_input_hidden1": [[0.12, -0.4, ...], ...],
      "bias_output": [0.31]
    }

Floats are written with full ``repr`` precision so a save/load pair
reproduces every weight exactly.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .core.errors import FormatError, IOFailure
from .core.network import MultiLayerPerceptron
from .core.types import ModelRecord

logger = logging.getLogger(__name__)


def record_to_json(record: ModelRecord) -> str:
    return json.dumps(record.to_dict(), indent=2)


def record_from_json(text: str) -> ModelRecord:
    try:
        payload: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FormatError(f"Model file is not valid JSON: {exc}") from exc
    return ModelRecord.from_dict(payload)


def write_record(record: ModelRecord, path: str | Path) -> Path:
    """Write ``record`` to ``path``, creating parent directories."""

    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(record_to_json(record) + "\n", encoding="utf-8")
    except OSError as exc:
        raise IOFailure.wrap(exc) from exc
    return path


def read_record(path: str | Path) -> ModelRecord:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise FormatError(f"Model file {path} is not UTF-8 text") from exc
    except OSError as exc:
        raise IOFailure.wrap(exc) from exc
    return record_from_json(text)


def save_model(model: MultiLayerPerceptron | ModelRecord, path: str | Path) -> Path:
    """Persist a network (or an already flattened record) as JSON."""

    record = model if isinstance(model, ModelRecord) else model.to_record()
    out = write_record(record, path)
    logger.info(
        "Saved %d-%d-%d-%d model to %s",
        record.input_size,
        record.hidden1_size,
        record.hidden2_size,
        record.output_size,
        out,
    )
    return out


def load_model(
    path: str | Path,
    *,
    network_cls: type[MultiLayerPerceptron] = MultiLayerPerceptron,
) -> MultiLayerPerceptron:
    """Load a network saved by :func:`save_model`."""

    network = network_cls.from_record(read_record(path))
    logger.info("Loaded %r from %s", network, path)
    return network


__all__ = [
    "load_model",
    "read_record",
    "record_from_json",
    "record_to_json",
    "save_model",
    "write_record",
]
