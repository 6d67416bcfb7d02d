"""Core typing contracts for perceptronets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple, Union

import numpy as np

Vector = List[float]
Matrix = List[List[float]]
RngLike = Union[np.random.Generator, int, None]


def as_generator(rng: RngLike) -> np.random.Generator:
    """Return ``rng`` as a :class:`numpy.random.Generator`."""

    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


@dataclass(frozen=True)
class Evaluated:
    """Inputs and output cached by the most recent forward evaluation."""

    inputs: Tuple[float, ...]
    output: float


@dataclass(frozen=True)
class EvaluatedLayer:
    """Model inputs and the output-layer vector of a multi-output forward pass."""

    inputs: Tuple[float, ...]
    outputs: Tuple[float, ...]


def _zeros(n: int) -> Vector:
    return [0.0] * n


@dataclass
class SLPGradients:
    """Loss gradients shaped like a single-hidden-layer model."""

    output_bias: float
    output_weights: Vector
    hidden_bias: Vector
    hidden_weights: Matrix

    @classmethod
    def zeros(cls, n_inputs: int, hidden_size: int) -> "SLPGradients":
        return cls(
            output_bias=0.0,
            output_weights=_zeros(hidden_size),
            hidden_bias=_zeros(hidden_size),
            hidden_weights=[_zeros(n_inputs) for _ in range(hidden_size)],
        )


@dataclass
class MLPGradients:
    """Loss gradients indexed as ``[layer][unit][input]``."""

    output_bias: Vector
    output_weights: Matrix
    hidden_bias: List[Vector] = field(default_factory=list)
    hidden_weights: List[Matrix] = field(default_factory=list)

    @classmethod
    def zeros(
        cls, hidden_widths: Sequence[Sequence[int]], output_widths: Sequence[int]
    ) -> "MLPGradients":
        """Build an all-zero bundle from per-unit weight counts."""

        return cls(
            output_bias=_zeros(len(output_widths)),
            output_weights=[_zeros(w) for w in output_widths],
            hidden_bias=[_zeros(len(layer)) for layer in hidden_widths],
            hidden_weights=[[_zeros(w) for w in layer] for layer in hidden_widths],
        )


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`perceptronets.training.pipelines.run_pipeline`."""

    epochs: int
    accuracy: float
    metrics_path: str
    manifest_path: str
    model_path: str = ""
    summary_path: str = ""
