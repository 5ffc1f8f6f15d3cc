"""Metric sinks receiving periodic epoch reports."""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Mapping

logger = logging.getLogger(__name__)


class LoggingSink:
    """Emit ``Epoch   500/8000 | mean loss: 0.01234567`` lines through :mod:`logging`."""

    def __init__(
        self,
        total_epochs: int | None = None,
        *,
        log: logging.Logger | None = None,
        level: int = logging.INFO,
    ) -> None:
        self.total_epochs = total_epochs
        self.log = log or logger
        self.level = level

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        total = f"/{self.total_epochs}" if self.total_epochs else ""
        self.log.log(
            self.level,
            "Epoch %5d%s | mean loss: %.8f",
            epoch,
            total,
            float(metrics.get("loss", float("nan"))),
        )

    __call__ = on_epoch


class JsonlSink:
    """Append-only JSONL writer for metrics."""

    def __init__(self, path: str | Path, *, split: str = "train", seed: int | None = None) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split
        self.seed = seed

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        record = {"epoch": int(epoch), "split": self.split, "seed": self.seed}
        record.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_epoch


class CsvSink:
    """Write metrics to CSV with a stable schema."""

    def __init__(self, path: str | Path, *, split: str = "train") -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        row = {"epoch": int(epoch), "split": self.split}
        row.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=sorted(row.keys()))
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)


class HistoryCapture:
    """Keep reported metrics in memory."""

    def __init__(self) -> None:
        self.history: list[tuple[int, Mapping[str, float]]] = []

    @property
    def last(self) -> Mapping[str, float]:
        return self.history[-1][1] if self.history else {}

    def losses(self) -> list[float]:
        return [float(metrics["loss"]) for _, metrics in self.history if "loss" in metrics]

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        self.history.append((int(epoch), {k: float(v) for k, v in metrics.items()}))


__all__ = ["CsvSink", "HistoryCapture", "JsonlSink", "LoggingSink"]
