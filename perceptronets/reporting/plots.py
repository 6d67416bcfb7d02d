"""Loss curve and decision-boundary figures, rendered headless."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence

import numpy as np

from .metrics import HistorySink


def _pyplot():
    import matplotlib

    matplotlib.use("Agg", force=True)
    import matplotlib.pyplot as plt  # imported lazily for headless safety

    return plt


class PlotAdapter(HistorySink):
    """Epoch callback that can render the collected losses once training ends."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        super().__init__()
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, epoch: int, metrics) -> None:
        if self.enable_plots:
            super().on_epoch(epoch, metrics)

    __call__ = on_epoch

    def close(self) -> Path | None:
        if not self.enable_plots or not self.history:
            return None
        plt = _pyplot()
        epochs, losses = zip(*self.history)
        fig, ax = plt.subplots()
        ax.plot(epochs, losses, marker=".")
        ax.set_xlabel("Epoch")
        ax.set_ylabel("Mean square loss")
        ax.set_title("Training curve")
        plot_path = self.run_dir / "loss.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path

    def decision_boundary(
        self,
        predict: Callable[[Sequence[float]], object],
        data: Sequence[Sequence[float]],
        labels: Sequence[float],
        resolution: int = 60,
    ) -> Path | None:
        """Shade the plane by predicted class and scatter ``data`` on top.

        Only 2-D inputs with scalar predictions can be drawn.
        """

        if not self.enable_plots or not data or len(data[0]) != 2:
            return None
        points = np.asarray(data, dtype=np.float64)
        pad = 0.1 * max(float(np.ptp(points)), 1e-3)
        xs = np.linspace(points[:, 0].min() - pad, points[:, 0].max() + pad, resolution)
        ys = np.linspace(points[:, 1].min() - pad, points[:, 1].max() + pad, resolution)
        grid = np.array([[float(predict([x, y])) for x in xs] for y in ys])

        plt = _pyplot()
        fig, ax = plt.subplots()
        ax.contourf(xs, ys, grid, levels=[-0.5, 0.5, 1.5], alpha=0.3, cmap="coolwarm")
        ax.scatter(points[:, 0], points[:, 1], c=list(labels), cmap="coolwarm", edgecolors="k", s=16)
        ax.set_xlabel("x")
        ax.set_ylabel("y")
        ax.set_title("Decision boundary")
        plot_path = self.run_dir / "boundary.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path


__all__ = ["PlotAdapter"]
