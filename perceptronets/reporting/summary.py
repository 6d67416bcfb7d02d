"""Loss-curve summaries written at the end of a run."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Mapping, Sequence

import numpy as np


def read_losses(metrics_jsonl: str | Path) -> List[float]:
    """Per-epoch ``loss`` values from a JSONL file written by :class:`JsonlSink`."""

    path = Path(metrics_jsonl)
    if not path.exists():
        return []
    losses = []
    for line in path.read_text().splitlines():
        line = line.strip()
        if line:
            losses.append(float(json.loads(line)["loss"]))
    return losses


def summarize(
    losses: Sequence[float], test_metrics: Mapping[str, float] | None = None
) -> Mapping[str, object]:
    """Describe a loss curve.

    ``best_epoch`` is 1-based. ``improvement`` is the relative drop from the
    first to the last epoch and is 0 when the first loss is already 0.
    """

    summary: dict[str, object] = {"version": 1, "epochs": len(losses)}
    if losses:
        curve = np.asarray(losses, dtype=np.float64)
        first, last = float(curve[0]), float(curve[-1])
        summary["loss"] = {
            "first": first,
            "last": last,
            "min": float(curve.min()),
            "mean": float(curve.mean()),
            "best_epoch": int(np.argmin(curve)) + 1,
            "improvement": (first - last) / first if first else 0.0,
        }
    if test_metrics is not None:
        summary["test"] = {k: v for k, v in test_metrics.items()}
    return summary


def write_summary(
    metrics_jsonl: str | Path,
    out_summary_json: str | Path,
    *,
    test_metrics: Mapping[str, float] | None = None,
) -> str:
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = summarize(read_losses(metrics_jsonl), test_metrics)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["read_losses", "summarize", "write_summary"]
