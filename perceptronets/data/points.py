"""Labelled 2-D point datasets: loading, normalisation, shuffling, splitting."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple

import numpy as np

from ..core.types import Matrix, RngLike, Vector, as_generator


@dataclass(frozen=True)
class Point:
    """A single ``(x, y)`` sample with a colour label."""

    x: float
    y: float
    color: str


def load_points(path: str | Path) -> List[Point]:
    """Read a JSON array of ``{"x", "y", "color"}`` objects."""

    raw = json.loads(Path(path).read_text())
    if not isinstance(raw, list):
        raise TypeError(f"Point file {path} must contain a JSON array")
    return [Point(float(item["x"]), float(item["y"]), str(item["color"])) for item in raw]


def to_arrays(points: Sequence[Point], positive: str = "a") -> Tuple[Matrix, Vector]:
    """Split points into model inputs and 0/1 labels (``positive`` colour → 1)."""

    data = [[p.x, p.y] for p in points]
    labels = [1.0 if p.color == positive else 0.0 for p in points]
    return data, labels


def _scale(values: np.ndarray) -> np.ndarray:
    lo, hi = float(values.min()), float(values.max())
    span = hi - lo
    if span == 0:
        return np.zeros_like(values)
    return (values - lo) / span


def normalize(points: Sequence[Point]) -> List[Point]:
    """Min-max scale both coordinates to ``[0, 1]``; a constant axis maps to 0."""

    if not points:
        return []
    xs = _scale(np.array([p.x for p in points], dtype=np.float64))
    ys = _scale(np.array([p.y for p in points], dtype=np.float64))
    return [Point(float(x), float(y), p.color) for x, y, p in zip(xs, ys, points)]


def shuffle(points: Sequence[Point], rng: RngLike = None) -> List[Point]:
    """Return a shuffled copy; pass a seed for a reproducible order."""

    order = as_generator(rng).permutation(len(points))
    return [points[int(i)] for i in order]


def split(points: Sequence[Point], ratio: float) -> Tuple[List[Point], List[Point]]:
    """First ``floor(len * ratio)`` points train, the remainder test."""

    if not 0 <= ratio <= 1:
        raise ValueError("ratio must be in [0, 1]")
    cut = math.floor(len(points) * ratio)
    return list(points[:cut]), list(points[cut:])


__all__ = ["Point", "load_points", "normalize", "shuffle", "split", "to_arrays"]
