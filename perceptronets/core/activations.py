"""Scalar activation functions and their derivatives.

Derivatives are expressed in terms of the activation *output*: for example
``sigmoid_derivative(y) == y * (1 - y)`` where ``y = sigmoid(x)``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Iterable

ScalarFn = Callable[[float], float]


def step(x: float) -> float:
    """Heaviside step used by the classic perceptron."""

    return 1 if x > 0 else 0


def sigmoid(x: float) -> float:
    """Return the logistic sigmoid of ``x``."""

    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    # exp(-x) would overflow for very negative inputs
    e = math.exp(x)
    return e / (1.0 + e)


def sigmoid_derivative(y: float) -> float:
    return y * (1.0 - y)


def relu(x: float) -> float:
    return max(0.0, x)


def relu_derivative(y: float) -> float:
    return 1.0 if y > 0 else 0.0


@dataclass(frozen=True)
class Activation:
    """An activation function paired with its output-space derivative."""

    name: str
    fn: ScalarFn
    derivative: ScalarFn | None = None

    def __call__(self, x: float) -> float:
        return self.fn(x)


STEP = Activation("step", step)
SIGMOID = Activation("sigmoid", sigmoid, sigmoid_derivative)
RELU = Activation("relu", relu, relu_derivative)


def is_sigmoid(fn: ScalarFn) -> bool:
    """Return ``True`` when ``fn`` is the sigmoid, wrapped or bare."""

    if isinstance(fn, Activation):
        return fn.fn is sigmoid
    return fn is sigmoid


def derivative_of(fn: ScalarFn) -> ScalarFn | None:
    """Look up the output-space derivative of ``fn`` if one is known."""

    if isinstance(fn, Activation):
        return fn.derivative
    for activation in REGISTRY.values():
        if activation.fn is fn:
            return activation.derivative
    return None


class ActivationRegistry:
    """Name lookup for activations used by configs and the CLI."""

    def __init__(self) -> None:
        self._registry: Dict[str, Activation] = {}

    def register(self, activation: Activation) -> None:
        self._registry[activation.name] = activation

    def get(self, name: str) -> Activation:
        key = name.lower()
        if key not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown activation {name!r}. Available activations: {available}")
        return self._registry[key]

    def names(self) -> Iterable[str]:
        return sorted(self._registry)

    def values(self) -> Iterable[Activation]:
        return list(self._registry.values())


REGISTRY = ActivationRegistry()
REGISTRY.register(STEP)
REGISTRY.register(SIGMOID)
REGISTRY.register(RELU)

__all__ = [
    "Activation",
    "REGISTRY",
    "RELU",
    "SIGMOID",
    "STEP",
    "derivative_of",
    "is_sigmoid",
    "relu",
    "relu_derivative",
    "sigmoid",
    "sigmoid_derivative",
    "step",
]
