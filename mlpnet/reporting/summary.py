"""Deterministic run summaries built from JSONL metric logs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Mapping, Sequence

import numpy as np


def compute_auc(points: Sequence[float]) -> float:
    """Trapezoidal area under ``points`` along an implicit unit-step axis."""

    if len(points) < 2:
        return 0.0
    y = np.asarray(points, dtype=np.float64)
    return float(np.sum((y[1:] + y[:-1]) * 0.5))


def read_jsonl(path: str | Path) -> list[Mapping[str, object]]:
    path = Path(path)
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


def _numeric_series(records: Iterable[Mapping[str, object]]) -> Mapping[str, list[float]]:
    series: dict[str, list[float]] = {}
    for record in records:
        for key, value in record.items():
            if key in {"epoch", "seed"} or isinstance(value, bool):
                continue
            if isinstance(value, (int, float)):
                series.setdefault(key, []).append(float(value))
    return series


def build_summary(records: list[Mapping[str, object]], tail: int) -> Mapping[str, object]:
    tail_window = min(tail, len(records))
    metrics: dict[str, Mapping[str, float]] = {}
    for name, values in _numeric_series(records).items():
        arr = np.asarray(values, dtype=np.float64)
        metrics[name] = {
            "min": float(np.min(arr)),
            "max": float(np.max(arr)),
            "mean": float(np.mean(arr)),
            "last": float(arr[-1]),
            "tail_auc": compute_auc(arr[-tail_window:].tolist()) if tail_window else 0.0,
        }
    epochs = [int(r["epoch"]) for r in records if isinstance(r.get("epoch"), int)]
    return {
        "version": 1,
        "records": len(records),
        "last_epoch": epochs[-1] if epochs else 0,
        "tail_window": tail_window,
        "metrics": metrics,
    }


def write_summary(
    metrics_jsonl: str | Path, out_summary_json: str | Path, *, tail: int = 8
) -> str:
    """Write a deterministic summary of ``metrics_jsonl`` to ``out_summary_json``."""

    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = build_summary(read_jsonl(metrics_jsonl), tail)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["build_summary", "compute_auc", "read_jsonl", "write_summary"]
