"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, MutableMapping

import numpy as np

from ..core.types import RngLike, as_generator
from .points import Point, load_points


@dataclass(frozen=True)
class DatasetSpec:
    """Labelled points registered under ``name``.

    Attributes
    ----------
    points:
        Raw samples in their original order. Normalisation, shuffling and
        splitting are applied by the caller.
    positive:
        Colour mapped to label ``1`` by :func:`perceptronets.data.to_arrays`.
    provenance:
        Free-form metadata recorded in run manifests.
    """

    name: str
    points: List[Point]
    positive: str = "a"
    provenance: Dict[str, Any] = field(default_factory=dict)


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory, as a decorator or directly::

        @register_dataset("blobs")
        def make_blobs(**options):
            ...

        register_dataset("blobs", make_blobs)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(name: str, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` built by the factory registered as ``name``."""

    if name not in _REGISTRY:
        raise KeyError(f"Unknown dataset: {name}")
    spec = _REGISTRY[name](**options)
    if not spec.points:
        raise ValueError(f"Dataset {name!r} produced no points")
    return spec


def available_datasets() -> Iterable[str]:
    return sorted(_REGISTRY)


@register_dataset("points")
def _points_file(path: str | Path | None = None, positive: str = "a", **_: object) -> DatasetSpec:
    if path is None:
        raise ValueError("The 'points' dataset requires a 'path' option")
    points = load_points(path)
    return DatasetSpec(
        name="points",
        points=points,
        positive=positive,
        provenance={"type": "file", "path": str(path), "count": len(points)},
    )


@register_dataset("and_gate")
def _and_gate(**_: object) -> DatasetSpec:
    truth = [((0, 0), "b"), ((0, 1), "b"), ((1, 0), "b"), ((1, 1), "a")]
    points = [Point(float(x), float(y), color) for (x, y), color in truth]
    return DatasetSpec(name="and_gate", points=points, provenance={"type": "truth-table"})


def make_blobs(n_points: int = 200, spread: float = 0.6, rng: RngLike = 0) -> List[Point]:
    """Two Gaussian clusters centred at ``(-1, -1)`` (colour ``b``) and ``(1, 1)`` (``a``)."""

    gen = as_generator(rng)
    half = n_points // 2
    a = gen.normal(loc=1.0, scale=spread, size=(n_points - half, 2))
    b = gen.normal(loc=-1.0, scale=spread, size=(half, 2))
    coords = np.vstack([a, b])
    colors = ["a"] * (n_points - half) + ["b"] * half
    return [Point(float(x), float(y), c) for (x, y), c in zip(coords, colors)]


@register_dataset("blobs")
def _blobs(n_points: int = 200, spread: float = 0.6, seed: int = 0, **_: object) -> DatasetSpec:
    points = make_blobs(n_points=n_points, spread=spread, rng=seed)
    return DatasetSpec(
        name="blobs",
        points=points,
        provenance={"type": "synthetic", "n_points": n_points, "spread": spread, "seed": seed},
    )


__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "make_blobs",
    "register_dataset",
]
