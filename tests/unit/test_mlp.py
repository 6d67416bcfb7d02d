import math

import pytest

from perceptronets.core.activations import RELU, SIGMOID, STEP, sigmoid
from perceptronets.core.errors import (
    DimensionMismatch,
    EmptyLayer,
    LayerWidthMismatch,
    NoHiddenLayers,
    NonDifferentiableActivation,
    OutputWidthMismatch,
    StalePropagation,
)
from perceptronets.core.mlp import MLP
from perceptronets.core.slp import SLP
from perceptronets.core.types import EvaluatedLayer
from perceptronets.core.unit import Unit


def _copy_units(units):
    return [Unit(u.weights, u.bias, u.activation) for u in units]


def test_init_derives_dimensions():
    mlp = MLP(
        [[Unit.random(3, sigmoid, 0), Unit.random(3, sigmoid, 1)], [Unit.random(2, sigmoid, 2)]],
        [Unit.random(1, sigmoid, 3)],
    )
    assert (mlp.n_inputs, mlp.n_outputs, mlp.n_hidden) == (3, 1, 2)
    assert mlp.layer_dims() == [3, 2, 1, 1]


def test_init_requires_hidden_layers():
    with pytest.raises(NoHiddenLayers):
        MLP([], [Unit.random(1, sigmoid, 0)])


def test_init_rejects_empty_hidden_layer():
    with pytest.raises(EmptyLayer):
        MLP([[]], [Unit.random(1, sigmoid, 0)])


def test_init_rejects_width_mismatch_between_layers():
    with pytest.raises(LayerWidthMismatch):
        MLP([[Unit.random(3, sigmoid, 0)], [Unit.random(4, sigmoid, 1)]], [Unit.random(1, sigmoid, 2)])


def test_init_rejects_output_width_mismatch():
    with pytest.raises(OutputWidthMismatch):
        MLP([[Unit.random(3, sigmoid, 0)], [Unit.random(1, sigmoid, 1)]], [Unit.random(3, sigmoid, 2)])


def test_random_builds_width_matched_layers():
    mlp = MLP.random(4, 2, [5, 3], SIGMOID, SIGMOID, rng=0)
    assert [len(layer) for layer in mlp.hidden_layers] == [5, 3]
    assert all(len(u.weights) == 4 for u in mlp.hidden_layers[0])
    assert all(len(u.weights) == 5 for u in mlp.hidden_layers[1])
    assert len(mlp.output_layer) == 2
    assert all(len(u.weights) == 3 for u in mlp.output_layer)


def test_random_xavier_init():
    mlp = MLP.random(4, 2, [6], RELU, SIGMOID, rng=0, init="xavier")
    hidden_limit = math.sqrt(6 / (4 + 2))
    assert all(u.bias == 0.0 for u in mlp.hidden_layers[0] + mlp.output_layer)
    assert all(abs(w) <= hidden_limit for u in mlp.hidden_layers[0] for w in u.weights)
    with pytest.raises(ValueError):
        MLP.random(4, 2, [6], RELU, SIGMOID, init="gaussian")


def test_random_with_no_hidden_dimensions_fails():
    with pytest.raises(NoHiddenLayers):
        MLP.random(2, 1, [], SIGMOID, SIGMOID, rng=0)


def test_init_gradients_mirror_shape():
    grads = MLP.random(3, 2, [4, 2], SIGMOID, SIGMOID, rng=0).init_gradients()
    assert grads.output_bias == [0.0, 0.0]
    assert grads.output_weights == [[0.0, 0.0], [0.0, 0.0]]
    assert grads.hidden_bias == [[0.0] * 4, [0.0] * 2]
    assert [len(row) for row in grads.hidden_weights[0]] == [3, 3, 3, 3]
    assert [len(row) for row in grads.hidden_weights[1]] == [4, 4]


def test_forward_chains_layers():
    mlp = MLP.random(2, 2, [3, 2], SIGMOID, SIGMOID, rng=4).forward([0.2, 0.8])
    first = [u.last_output for u in mlp.hidden_layers[0]]
    second = [u.last_output for u in mlp.hidden_layers[1]]
    assert all(u.last_inputs == (0.2, 0.8) for u in mlp.hidden_layers[0])
    assert all(u.last_inputs == tuple(first) for u in mlp.hidden_layers[1])
    assert all(u.last_inputs == tuple(second) for u in mlp.output_layer)
    assert mlp.last_outputs == [u.last_output for u in mlp.output_layer]
    assert mlp.last_inputs == (0.2, 0.8)


def test_forward_rejects_wrong_width():
    mlp = MLP.random(2, 1, [2], SIGMOID, SIGMOID, rng=0)
    with pytest.raises(DimensionMismatch):
        mlp.forward([1.0, 2.0, 3.0])


def test_single_hidden_layer_matches_slp_gradients():
    slp = SLP.random(2, 3, SIGMOID, rng=11)
    mlp = MLP([_copy_units(slp.hidden_layer)], _copy_units([slp.output_layer]))

    _, slp_grads = slp.forward([0.5, 1.0]).backward(1.0)
    _, mlp_grads = mlp.forward([0.5, 1.0]).backward([1.0])

    assert mlp.last_outputs[0] == slp.last_output
    assert mlp_grads.output_bias[0] == pytest.approx(slp_grads.output_bias)
    assert mlp_grads.output_weights[0] == pytest.approx(slp_grads.output_weights)
    assert mlp_grads.hidden_bias[0] == pytest.approx(slp_grads.hidden_bias)
    for got, want in zip(mlp_grads.hidden_weights[0], slp_grads.hidden_weights):
        assert got == pytest.approx(want)


def test_deep_backward_agrees_with_finite_differences():
    inputs, targets, eps = [0.4, -0.3], [1.0, 0.0], 1e-6
    mlp = MLP.random(2, 2, [3, 2], SIGMOID, SIGMOID, rng=2, init="xavier")
    _, grads = mlp.forward(inputs).backward(targets)

    def loss() -> float:
        outputs = mlp.forward(inputs).last_outputs
        return sum((e - y) ** 2 for y, e in zip(outputs, targets))

    unit = mlp.hidden_layers[0][1]
    for j in range(2):
        original = unit.weights[j]
        unit.weights[j] = original + eps
        plus = loss()
        unit.weights[j] = original - eps
        minus = loss()
        unit.weights[j] = original
        assert grads.hidden_weights[0][1][j] == pytest.approx((plus - minus) / (2 * eps), rel=1e-4, abs=1e-9)

    original = unit.bias
    unit.bias = original + eps
    plus = loss()
    unit.bias = original - eps
    minus = loss()
    unit.bias = original
    assert grads.hidden_bias[0][1] == pytest.approx((plus - minus) / (2 * eps), rel=1e-4, abs=1e-9)


def test_backward_requires_forward_and_matching_targets():
    mlp = MLP.random(2, 2, [2], SIGMOID, SIGMOID, rng=0)
    with pytest.raises(StalePropagation):
        mlp.backward([0.0, 1.0])
    mlp.forward([0.1, 0.2])
    with pytest.raises(DimensionMismatch):
        mlp.backward([1.0])


def test_backward_rejects_step_activation():
    mlp = MLP.random(2, 1, [2], STEP, SIGMOID, rng=0).forward([0.1, 0.2])
    with pytest.raises(NonDifferentiableActivation):
        mlp.backward([1.0])


def test_apply_gradients_reduces_loss_and_clears_caches():
    mlp = MLP.random(2, 1, [3, 3], SIGMOID, SIGMOID, rng=9)
    before = (1.0 - mlp.forward([0.5, 0.5]).last_outputs[0]) ** 2
    _, grads = mlp.backward([1.0])
    mlp.apply_gradients(grads, 0.5)
    assert mlp.last_outputs is None
    assert all(u.state is None for layer in mlp.hidden_layers for u in layer)
    after = (1.0 - mlp.forward([0.5, 0.5]).last_outputs[0]) ** 2
    assert after < before


def test_state_tracks_forward_and_clears_after_update():
    mlp = MLP.random(2, 2, [3], SIGMOID, SIGMOID, rng=4)
    assert mlp.state is None
    assert mlp.last_inputs is None and mlp.last_outputs is None
    _, grads = mlp.forward([0.2, -0.7]).backward([1.0, 0.0])
    assert isinstance(mlp.state, EvaluatedLayer)
    assert mlp.state.inputs == (0.2, -0.7)
    assert mlp.state.outputs == tuple(mlp.last_outputs)
    mlp.apply_gradients(grads, 0.1)
    assert mlp.state is None
    with pytest.raises(StalePropagation):
        mlp.backward([1.0, 0.0])
