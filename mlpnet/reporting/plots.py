"""Loss curve rendering for training runs (matplotlib, Agg backend)."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Tuple


def describe_run(network: Mapping[str, object] | None) -> str:
    """One-line caption such as ``3-8-6-1 | lr=0.7 | momentum=0.9``."""

    if not network:
        return "mlpnet"
    parts = []
    sizes = network.get("layer_sizes")
    if sizes:
        parts.append("-".join(str(size) for size in sizes))  # type: ignore[union-attr]
    for key, label in (("learning_rate", "lr"), ("momentum", "momentum")):
        if key in network:
            parts.append(f"{label}={network[key]}")
    return " | ".join(parts) or "mlpnet"


class PlotAdapter:
    """Epoch callback that renders reported losses to ``loss.png`` on :meth:`close`.

    The y axis is logarithmic since a converging run drops the loss by several
    orders of magnitude. ``network`` is a :meth:`MultiLayerPerceptron.describe`
    mapping used for the figure title.
    """

    filename = "loss.png"

    def __init__(
        self,
        run_dir: str | Path,
        enable_plots: bool = False,
        *,
        network: Mapping[str, object] | None = None,
    ):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.title = describe_run(network)
        self.points: List[Tuple[int, float]] = []
        if enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if self.enable_plots and "loss" in metrics:
            self.points.append((int(epoch), float(metrics["loss"])))

    __call__ = on_epoch

    def close(self) -> Path | None:
        if not self.enable_plots or not self.points:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt

        epochs = [epoch for epoch, _ in self.points]
        losses = [loss for _, loss in self.points]
        fig, ax = plt.subplots(figsize=(6, 4))
        ax.plot(epochs, losses, marker="o", markersize=3)
        if all(loss > 0 for loss in losses):
            ax.set_yscale("log")
        ax.annotate(
            f"{losses[-1]:.2e}",
            xy=(epochs[-1], losses[-1]),
            xytext=(-40, 10),
            textcoords="offset points",
        )
        ax.set_xlabel("Epoch")
        ax.set_ylabel("Mean loss (0.5 * squared error)")
        ax.set_title(self.title)
        ax.grid(True, alpha=0.3)
        fig.tight_layout()
        path = self.run_dir / self.filename
        fig.savefig(path)
        plt.close(fig)
        return path


__all__ = ["PlotAdapter", "describe_run"]
