"""A single computational node: weighted sum, bias and activation."""

from __future__ import annotations

import math
from typing import Callable, List, Sequence

from .errors import DimensionMismatch, StalePropagation
from .types import Evaluated, RngLike, as_generator


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    """Return the sum of products of two equally long vectors."""

    if len(a) != len(b):
        raise DimensionMismatch(f"dot operands differ in length: {len(a)} != {len(b)}")
    total = 0.0
    for x, y in zip(a, b):
        total += x * y
    return total


class Unit:
    """Perceptron-style unit owning its weights, bias and last evaluation.

    ``state`` is ``None`` until :meth:`evaluate` runs and is cleared again by
    :meth:`apply_update`, so a cached output always matches the current
    parameters.
    """

    def __init__(
        self,
        weights: Sequence[float],
        bias: float,
        activation: Callable[[float], float],
    ) -> None:
        self.weights: List[float] = [float(w) for w in weights]
        self.bias = float(bias)
        self.activation = activation
        self.state: Evaluated | None = None

    def __repr__(self) -> str:
        name = getattr(self.activation, "name", getattr(self.activation, "__name__", "?"))
        return f"<Unit n_inputs={len(self.weights)} activation={name}>"

    @property
    def n_inputs(self) -> int:
        return len(self.weights)

    @property
    def last_inputs(self) -> tuple[float, ...] | None:
        return None if self.state is None else self.state.inputs

    @property
    def last_output(self) -> float | None:
        return None if self.state is None else self.state.output

    @classmethod
    def random(
        cls, n: int, activation: Callable[[float], float], rng: RngLike = None
    ) -> "Unit":
        """Weights and bias drawn uniformly from ``[0, 1)``."""

        gen = as_generator(rng)
        weights = gen.random(n).tolist()
        bias = float(gen.random())
        return cls(weights, bias, activation)

    @classmethod
    def xavier(
        cls,
        n_in: int,
        n_out: int,
        activation: Callable[[float], float],
        rng: RngLike = None,
    ) -> "Unit":
        """Weights uniform in ``[-L, L]`` with ``L = sqrt(6 / (n_in + n_out))``, zero bias."""

        gen = as_generator(rng)
        limit = math.sqrt(6.0 / (n_in + n_out))
        weights = gen.uniform(-limit, limit, size=n_in).tolist()
        return cls(weights, 0.0, activation)

    def evaluate(self, inputs: Sequence[float]) -> "Unit":
        if len(inputs) != len(self.weights):
            raise DimensionMismatch(
                f"Unit expects {len(self.weights)} inputs, received {len(inputs)}"
            )
        z = dot(inputs, self.weights) + self.bias
        self.state = Evaluated(inputs=tuple(inputs), output=self.activation(z))
        return self

    def require_evaluation(self) -> Evaluated:
        if self.state is None:
            raise StalePropagation("Unit has not been evaluated since its last update")
        return self.state

    def apply_update(self, weight_deltas: Sequence[float], bias_delta: float) -> None:
        """Add deltas to the parameters in place and drop the cached evaluation."""

        if len(weight_deltas) != len(self.weights):
            raise DimensionMismatch(
                f"Update has {len(weight_deltas)} weight deltas for {len(self.weights)} weights"
            )
        for j, delta in enumerate(weight_deltas):
            self.weights[j] += delta
        self.bias += bias_delta
        self.state = None


__all__ = ["Unit", "dot"]
