"""Epoch loop with reporting cadence and cooperative cancellation."""

from __future__ import annotations

import logging
import numbers
import threading
from typing import Iterable, List, Sequence

from ..core.errors import ValidationError
from ..core.network import DEFAULT_REPORT_EVERY, MultiLayerPerceptron, emit_epoch
from ..core.types import SampleLike, TrainingResult

logger = logging.getLogger(__name__)


class Trainer:
    """Drive :meth:`MultiLayerPerceptron.run_epoch` one epoch at a time.

    Between epochs the optional ``stop_event`` passed to :meth:`run` is
    checked; an epoch that has started always runs to completion. Metrics
    are handed to ``callbacks`` every ``report_every`` epochs and once more
    for the last completed epoch.
    """

    def __init__(
        self,
        network: MultiLayerPerceptron,
        callbacks: Sequence[object] | None = None,
        report_every: int = DEFAULT_REPORT_EVERY,
    ) -> None:
        self.network = network
        self.callbacks = list(callbacks or [])
        self.report_every = int(report_every)

    def run(
        self,
        samples: Iterable[SampleLike],
        epochs: int,
        *,
        stop_event: threading.Event | None = None,
    ) -> TrainingResult:
        if isinstance(epochs, bool) or not isinstance(epochs, numbers.Integral) or epochs < 1:
            raise ValidationError(f"epochs must be a positive integer, got {epochs!r}")
        prepared = self.network.prepare_samples(samples)
        logger.info(
            "Training %r for %d epochs on %d samples", self.network, epochs, len(prepared)
        )

        history: List[tuple[int, float]] = []
        completed = 0
        loss = float("nan")
        stopped = False
        for epoch in range(1, epochs + 1):
            if stop_event is not None and stop_event.is_set():
                stopped = True
                break
            loss = self.network.run_epoch(prepared)
            completed = epoch
            if self.report_every > 0 and epoch % self.report_every == 0:
                self._report(epoch, loss, history)

        if completed and (not history or history[-1][0] != completed):
            self._report(completed, loss, history)
        if stopped:
            logger.info("Training stopped after %d/%d epochs", completed, epochs)
        else:
            logger.info("Training finished")
        return TrainingResult(
            epochs_completed=completed,
            final_loss=loss,
            history=history,
            stopped=stopped,
        )

    def _report(self, epoch: int, loss: float, history: List[tuple[int, float]]) -> None:
        history.append((epoch, loss))
        emit_epoch(self.callbacks, epoch, {"loss": loss})


__all__ = ["Trainer"]
