"""Epoch loss sinks passed to training sessions as callbacks.

Each sink accepts ``(epoch, metrics)`` where ``metrics`` carries the mean
per-example square loss (``loss``) and the number of examples visited
(``epoch_items``).
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Dict, List, Mapping, Tuple

EPOCH_FIELDS = ("epoch", "epoch_items", "kind", "loss", "split")


def _epoch_record(epoch: int, metrics: Mapping[str, float], **tags: object) -> Dict[str, object]:
    record: Dict[str, object] = {"epoch": int(epoch)}
    record.update(tags)
    record.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
    return record


class JsonlSink:
    """One JSON object per epoch; the file is truncated when the sink is created."""

    def __init__(
        self,
        path: str | Path,
        *,
        kind: str = "",
        split: str = "train",
        seed: int | None = None,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.kind = kind
        self.split = split
        self.seed = seed

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        record = _epoch_record(epoch, metrics, kind=self.kind, split=self.split, seed=self.seed)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_epoch


class CsvSink:
    """Epoch losses as CSV with the fixed column order of :data:`EPOCH_FIELDS`."""

    def __init__(self, path: str | Path, *, kind: str = "", split: str = "train") -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8", newline="") as handle:
            csv.DictWriter(handle, fieldnames=EPOCH_FIELDS).writeheader()
        self.kind = kind
        self.split = split

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        record = _epoch_record(epoch, metrics, kind=self.kind, split=self.split)
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=EPOCH_FIELDS, extrasaction="ignore")
            writer.writerow(record)

    __call__ = on_epoch


class HistorySink:
    """Keep ``(epoch, loss)`` pairs in memory."""

    def __init__(self) -> None:
        self.history: List[Tuple[int, float]] = []

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        self.history.append((int(epoch), float(metrics.get("loss", 0.0))))

    __call__ = on_epoch

    @property
    def losses(self) -> List[float]:
        return [loss for _, loss in self.history]


__all__ = ["CsvSink", "EPOCH_FIELDS", "HistorySink", "JsonlSink"]
