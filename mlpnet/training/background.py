"""Run a training session on a single background worker thread."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable

from ..core.types import SampleLike, TrainingResult
from .trainer import Trainer


class BackgroundTrainer:
    """Submit :meth:`Trainer.run` to a one-worker executor.

    The network must not be read or mutated by anyone else until the
    returned future completes; there is no locking inside the engine.
    """

    def __init__(self, trainer: Trainer) -> None:
        self.trainer = trainer
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mlpnet-train")
        self._stop = threading.Event()
        self._future: Future[TrainingResult] | None = None

    @property
    def running(self) -> bool:
        return self._future is not None and not self._future.done()

    def start(self, samples: Iterable[SampleLike], epochs: int) -> "Future[TrainingResult]":
        if self.running:
            raise RuntimeError("a training session is already running")
        self._stop.clear()
        self._future = self._executor.submit(
            self.trainer.run, list(samples), epochs, stop_event=self._stop
        )
        return self._future

    def stop(self) -> None:
        """Ask the running session to stop after its current epoch."""

        self._stop.set()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "BackgroundTrainer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
        self.shutdown()


__all__ = ["BackgroundTrainer"]
