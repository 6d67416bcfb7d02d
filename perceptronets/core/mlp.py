"""Multi-layer perceptron built from stacked layers of Units."""

from __future__ import annotations

from typing import Callable, List, Sequence, Tuple

from ..training.losses import square_loss_derivative
from .activations import derivative_of
from .errors import (
    DimensionMismatch,
    EmptyLayer,
    InconsistentInputWidth,
    LayerWidthMismatch,
    NoHiddenLayers,
    NonDifferentiableActivation,
    OutputWidthMismatch,
    StalePropagation,
)
from .types import EvaluatedLayer, MLPGradients, RngLike, Vector, as_generator
from .unit import Unit

Layer = List[Unit]


class MLP:
    """Arbitrary stack of hidden layers feeding an output layer of Units."""

    def __init__(self, hidden_layers: Sequence[Sequence[Unit]], output_layer: Sequence[Unit]) -> None:
        layers = [list(layer) for layer in hidden_layers]
        outputs = list(output_layer)
        if not layers:
            raise NoHiddenLayers("MLP must have at least one hidden layer")
        for idx, layer in enumerate(layers):
            if not layer:
                raise EmptyLayer(f"Hidden layer {idx} must have at least one unit")
            if idx == 0:
                width = len(layer[0].weights)
                if any(len(unit.weights) != width for unit in layer):
                    raise InconsistentInputWidth(
                        "All units in the first hidden layer must share an input width"
                    )
                continue
            expected = len(layers[idx - 1])
            for unit in layer:
                if len(unit.weights) != expected:
                    raise LayerWidthMismatch(
                        f"Layer {idx} unit has {len(unit.weights)} weights, "
                        f"previous layer has {expected} units"
                    )
        if not outputs:
            raise EmptyLayer("Output layer must have at least one unit")
        last_width = len(layers[-1])
        for unit in outputs:
            if len(unit.weights) != last_width:
                raise OutputWidthMismatch(
                    f"Output unit has {len(unit.weights)} weights, "
                    f"last hidden layer has {last_width} units"
                )

        self.hidden_layers: List[Layer] = layers
        self.output_layer: Layer = outputs
        self.n_inputs = len(layers[0][0].weights)
        self.n_outputs = len(outputs)
        self.n_hidden = len(layers)
        self.state: EvaluatedLayer | None = None

    def __repr__(self) -> str:
        dims = [self.n_inputs, *(len(layer) for layer in self.hidden_layers), self.n_outputs]
        return f"<MLP dims={dims}>"

    @property
    def last_inputs(self) -> tuple[float, ...] | None:
        return None if self.state is None else self.state.inputs

    @property
    def last_outputs(self) -> List[float] | None:
        return None if self.state is None else list(self.state.outputs)

    @classmethod
    def random(
        cls,
        n_inputs: int,
        n_outputs: int,
        hidden_dimensions: Sequence[int],
        hidden_activation: Callable[[float], float],
        output_activation: Callable[[float], float],
        rng: RngLike = None,
        init: str = "uniform",
    ) -> "MLP":
        """Random model; ``init`` is ``"uniform"`` or ``"xavier"``."""

        if init not in {"uniform", "xavier"}:
            raise ValueError(f"Unknown init scheme: {init}")
        gen = as_generator(rng)
        dims = list(hidden_dimensions)
        fan_ins = [n_inputs, *dims]
        fan_outs = [*dims[1:], n_outputs]

        def make(n_in: int, n_out: int, activation) -> Unit:
            if init == "xavier":
                return Unit.xavier(n_in, n_out, activation, gen)
            return Unit.random(n_in, activation, gen)

        hidden_layers = [
            [make(fan_ins[k], fan_outs[k], hidden_activation) for _ in range(width)]
            for k, width in enumerate(dims)
        ]
        last = dims[-1] if dims else n_inputs
        output_layer = [make(last, n_outputs, output_activation) for _ in range(n_outputs)]
        return cls(hidden_layers, output_layer)

    def layer_dims(self) -> List[int]:
        return [self.n_inputs, *(len(layer) for layer in self.hidden_layers), self.n_outputs]

    def init_gradients(self) -> MLPGradients:
        return MLPGradients.zeros(
            [[len(unit.weights) for unit in layer] for layer in self.hidden_layers],
            [len(unit.weights) for unit in self.output_layer],
        )

    def forward(self, inputs: Sequence[float]) -> "MLP":
        if len(inputs) != self.n_inputs:
            raise DimensionMismatch(
                f"MLP expects {self.n_inputs} inputs, received {len(inputs)}"
            )
        signal: Sequence[float] = inputs
        for layer in self.hidden_layers:
            signal = [unit.evaluate(signal).state.output for unit in layer]
        outputs = [unit.evaluate(signal).state.output for unit in self.output_layer]
        self.state = EvaluatedLayer(inputs=tuple(inputs), outputs=tuple(outputs))
        return self

    def backward(self, expected: Sequence[float]) -> Tuple["MLP", MLPGradients]:
        """Gradients of the summed squared error, propagated output layer first."""

        if self.state is None:
            raise StalePropagation("backward called before forward")
        if len(expected) != self.n_outputs:
            raise DimensionMismatch(
                f"Expected {self.n_outputs} target values, received {len(expected)}"
            )
        grads = self.init_gradients()

        deltas: Vector = []
        for k, unit in enumerate(self.output_layer):
            state = unit.require_evaluation()
            deltas.append(
                square_loss_derivative(state.output, expected[k])
                * _derivative(unit)(state.output)
            )
            grads.output_bias[k] = deltas[k]
            grads.output_weights[k] = [deltas[k] * x for x in state.inputs]

        downstream = self.output_layer
        for layer_idx in reversed(range(self.n_hidden)):
            layer = self.hidden_layers[layer_idx]
            layer_deltas: Vector = []
            for i, unit in enumerate(layer):
                state = unit.require_evaluation()
                upstream = 0.0
                for k, down in enumerate(downstream):
                    upstream += deltas[k] * down.weights[i]
                delta = upstream * _derivative(unit)(state.output)
                layer_deltas.append(delta)
                grads.hidden_bias[layer_idx][i] = delta
                grads.hidden_weights[layer_idx][i] = [delta * x for x in state.inputs]
            deltas = layer_deltas
            downstream = layer
        return self, grads

    def apply_gradients(
        self, grads: MLPGradients, learning_rate: float, hidden_factor: float = 1.0
    ) -> None:
        n = -learning_rate
        for k, unit in enumerate(self.output_layer):
            unit.apply_update([n * g for g in grads.output_weights[k]], n * grads.output_bias[k])
        for layer_idx, layer in enumerate(self.hidden_layers):
            for i, unit in enumerate(layer):
                unit.apply_update(
                    [n * g * hidden_factor for g in grads.hidden_weights[layer_idx][i]],
                    n * grads.hidden_bias[layer_idx][i] * hidden_factor,
                )
        self.state = None


def _derivative(unit: Unit) -> Callable[[float], float]:
    derivative = derivative_of(unit.activation)
    if derivative is None:
        raise NonDifferentiableActivation(
            f"Activation of {unit!r} has no derivative for backpropagation"
        )
    return derivative


__all__ = ["MLP"]
