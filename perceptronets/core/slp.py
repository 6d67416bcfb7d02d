"""Single-hidden-layer perceptron with a closed-form backward pass."""

from __future__ import annotations

import warnings
from typing import Callable, List, Sequence, Tuple

from ..training.losses import square_loss_derivative
from .activations import is_sigmoid, sigmoid_derivative
from .errors import (
    DimensionMismatch,
    EmptyLayer,
    InconsistentInputWidth,
    OutputWidthMismatch,
    StalePropagation,
)
from .types import Evaluated, RngLike, SLPGradients, as_generator
from .unit import Unit


class SLP:
    """One hidden layer of Units feeding a single output Unit.

    Every hidden Unit sees the same model inputs; their outputs, in layer
    order, form the input vector of the output Unit.
    """

    def __init__(self, hidden_layer: Sequence[Unit], output_layer: Unit) -> None:
        hidden = list(hidden_layer)
        if not hidden:
            raise EmptyLayer("Hidden layer must have at least one unit")
        n_inputs = len(hidden[0].weights)
        for idx, unit in enumerate(hidden):
            if len(unit.weights) != n_inputs:
                raise InconsistentInputWidth(
                    f"Hidden unit {idx} has {len(unit.weights)} weights, expected {n_inputs}"
                )
        if len(output_layer.weights) != len(hidden):
            raise OutputWidthMismatch(
                f"Output unit has {len(output_layer.weights)} weights "
                f"for a hidden layer of {len(hidden)} units"
            )
        self.n_inputs = n_inputs
        self.hidden_layer: List[Unit] = hidden
        self.output_layer = output_layer
        self.state: Evaluated | None = None

    def __repr__(self) -> str:
        return f"<SLP n_inputs={self.n_inputs} hidden={len(self.hidden_layer)}>"

    @classmethod
    def random(
        cls,
        n_inputs: int,
        hidden_size: int,
        activation: Callable[[float], float],
        rng: RngLike = None,
    ) -> "SLP":
        gen = as_generator(rng)
        hidden = [Unit.random(n_inputs, activation, gen) for _ in range(hidden_size)]
        output = Unit.random(hidden_size, activation, gen)
        return cls(hidden, output)

    @property
    def hidden_size(self) -> int:
        return len(self.hidden_layer)

    @property
    def last_inputs(self) -> tuple[float, ...] | None:
        return None if self.state is None else self.state.inputs

    @property
    def last_output(self) -> float | None:
        return None if self.state is None else self.state.output

    def init_gradients(self) -> SLPGradients:
        return SLPGradients.zeros(self.n_inputs, self.hidden_size)

    def forward(self, inputs: Sequence[float]) -> "SLP":
        if len(inputs) != self.n_inputs:
            raise DimensionMismatch(
                f"SLP expects {self.n_inputs} inputs, received {len(inputs)}"
            )
        hidden_outputs = [unit.evaluate(inputs).state.output for unit in self.hidden_layer]
        output = self.output_layer.evaluate(hidden_outputs).state.output
        self.state = Evaluated(inputs=tuple(inputs), output=output)
        return self

    def backward(self, expected: float) -> Tuple["SLP", SLPGradients]:
        """Gradients of ``(expected - output)**2`` for every weight and bias.

        The sigmoid derivative is used for both layers regardless of the
        activation the Units carry. Parameters are left untouched.
        """

        if self.state is None:
            raise StalePropagation("backward called before forward")
        hidden_states = [unit.require_evaluation() for unit in self.hidden_layer]
        self.output_layer.require_evaluation()
        self._warn_if_not_sigmoid()

        inputs = self.state.inputs
        output = self.state.output
        grads = self.init_gradients()

        output_delta = square_loss_derivative(output, expected) * sigmoid_derivative(output)
        grads.output_bias = output_delta
        for i, state in enumerate(hidden_states):
            grads.output_weights[i] = output_delta * state.output

        for i, state in enumerate(hidden_states):
            hidden_delta = (
                output_delta
                * sigmoid_derivative(state.output)
                * self.output_layer.weights[i]
            )
            grads.hidden_bias[i] = hidden_delta
            for j, x in enumerate(inputs):
                grads.hidden_weights[i][j] = hidden_delta * x
        return self, grads

    def apply_gradients(
        self, grads: SLPGradients, learning_rate: float, hidden_factor: float = 1.0
    ) -> None:
        """Gradient-descent step in place; hidden gradients scaled by ``hidden_factor``."""

        n = -learning_rate
        self.output_layer.apply_update(
            [n * g for g in grads.output_weights], n * grads.output_bias
        )
        for i, unit in enumerate(self.hidden_layer):
            unit.apply_update(
                [n * g * hidden_factor for g in grads.hidden_weights[i]],
                n * grads.hidden_bias[i] * hidden_factor,
            )
        self.state = None

    def _warn_if_not_sigmoid(self) -> None:
        units = [*self.hidden_layer, self.output_layer]
        if not all(is_sigmoid(unit.activation) for unit in units):
            warnings.warn(
                "SLP.backward uses the sigmoid derivative; gradients for other "
                "activations are not exact",
                RuntimeWarning,
                stacklevel=3,
            )


__all__ = ["SLP"]
