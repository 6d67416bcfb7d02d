"""Binary classification metrics over predicted labels."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Sequence

import numpy as np

DEFAULT_METRICS = ("accuracy", "precision", "recall", "f1")


@dataclass(frozen=True)
class MetricResult:
    name: str
    value: float


def _as_rows(values: Sequence) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    return arr.reshape(arr.shape[0], -1) if arr.size else arr.reshape(0, 1)


def compute_metric(name: str, predictions: Sequence, labels: Sequence) -> MetricResult:
    """Compute ``name`` for 0/1 ``predictions`` against ``labels``.

    Multi-output predictions count as correct only when every output matches;
    precision/recall/f1 are computed over all outputs flattened.
    """

    key = name.lower()
    preds = _as_rows(predictions)
    targs = _as_rows(labels)
    if preds.shape != targs.shape:
        raise ValueError(f"predictions {preds.shape} and labels {targs.shape} differ in shape")
    if key == "accuracy":
        value = float(np.mean(np.all(preds == targs, axis=1))) if preds.size else 0.0
    elif key in {"precision", "recall", "f1"}:
        pred_pos = preds.reshape(-1) == 1
        targ_pos = targs.reshape(-1) == 1
        tp = float(np.sum(pred_pos & targ_pos))
        fp = float(np.sum(pred_pos & ~targ_pos))
        fn = float(np.sum(~pred_pos & targ_pos))
        precision = tp / (tp + fp + 1e-9)
        recall = tp / (tp + fn + 1e-9)
        if key == "precision":
            value = precision
        elif key == "recall":
            value = recall
        else:
            value = 2 * precision * recall / (precision + recall + 1e-9)
    else:
        raise KeyError(f"Unknown metric: {name}")
    return MetricResult(name=key, value=float(value))


def compute_metrics(
    names: Iterable[str], predictions: Sequence, labels: Sequence
) -> Mapping[str, float]:
    results: Dict[str, float] = {}
    for name in names:
        metric = compute_metric(name, predictions, labels)
        results[metric.name] = metric.value
    return results


__all__ = ["DEFAULT_METRICS", "MetricResult", "compute_metric", "compute_metrics"]
