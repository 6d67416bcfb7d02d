"""Scalar loss registry used by the training sessions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable

LossFn = Callable[[float, float], tuple[float, float]]


def square_loss(output: float, expected: float) -> float:
    return (expected - output) ** 2


def square_loss_derivative(output: float, expected: float) -> float:
    """dL/dy of :func:`square_loss` with respect to ``output``."""

    return 2 * (output - expected)


@dataclass(frozen=True)
class Loss:
    """Loss wrapper returning both the scalar loss and dL/dy."""

    name: str
    fn: LossFn

    def __call__(self, output: float, expected: float) -> tuple[float, float]:
        return self.fn(output, expected)


class LossRegistry:
    """Central registry for loss functions."""

    def __init__(self) -> None:
        self._registry: Dict[str, Loss] = {}

    def register(self, name: str, fn: LossFn) -> None:
        self._registry[name] = Loss(name, fn)

    def get(self, name: str) -> Loss:
        if name not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown loss {name!r}. Available losses: {available}")
        return self._registry[name]

    def names(self) -> Iterable[str]:
        return sorted(self._registry)


REGISTRY = LossRegistry()


def _square(output: float, expected: float) -> tuple[float, float]:
    return square_loss(output, expected), square_loss_derivative(output, expected)


REGISTRY.register("square", _square)
# Alias for parity with common naming
REGISTRY.register("mse", _square)

__all__ = ["Loss", "LossRegistry", "REGISTRY", "square_loss", "square_loss_derivative"]
