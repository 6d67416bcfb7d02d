import logging

import pytest

from perceptronets import MLPSession, PerceptronSession, SLPSession
from perceptronets.core.activations import RELU, SIGMOID, STEP
from perceptronets.core.errors import (
    DimensionMismatch,
    EmptyDataset,
    LabelMismatch,
    LearningRateOutOfRange,
    ParameterOutOfRange,
)
from perceptronets.core.mlp import MLP
from perceptronets.core.slp import SLP
from perceptronets.core.unit import Unit
from perceptronets.data import get_dataset, normalize, to_arrays

AND_DATA = [[0, 0], [0, 1], [1, 0], [1, 1]]
AND_LABELS = [0, 0, 0, 1]


def _blobs():
    spec = get_dataset("blobs", n_points=100, seed=0)
    return to_arrays(normalize(spec.points), spec.positive)


def _loss_history(session, epochs, **options):
    history = []
    session.callbacks.append(lambda epoch, metrics: history.append(metrics["loss"]))
    session.train(epochs, **options)
    return history


def test_perceptron_first_epoch_updates_only_on_errors():
    session = PerceptronSession(AND_DATA, AND_LABELS, Unit([0.0, 0.0], 0.0, STEP), 0.5)
    session.train(1)
    # only (1, 1) is misclassified by an all-zero unit
    assert session.model.weights == [0.5, 0.5]
    assert session.model.bias == 0.5
    assert session.epochs_trained == 1


def test_perceptron_single_pass_moves_random_parameters():
    session = PerceptronSession.from_data(AND_DATA, AND_LABELS, 0.1, rng=0)
    weights, bias = list(session.model.weights), session.model.bias
    session.train()
    assert session.model.weights[0] != weights[0]
    assert session.model.weights[1] != weights[1]
    assert session.model.bias != bias


def test_perceptron_learns_and_gate():
    session = PerceptronSession(AND_DATA, AND_LABELS, Unit([0.0, 0.0], 0.0, STEP), 0.5)
    session.train(100)
    assert session.test(AND_DATA, AND_LABELS) == 1.0


def test_perceptron_from_seeded_data_learns_and_gate():
    session = PerceptronSession.from_data(AND_DATA, AND_LABELS, 0.5, rng=0)
    assert session.item_count == 4
    session.train(100)
    assert [session.predict(item) for item in AND_DATA] == AND_LABELS


def test_accuracy_counts_matches():
    session = PerceptronSession(AND_DATA, AND_LABELS, Unit([1.0, 1.0], -1.5, STEP), 0.1)
    assert session.test(AND_DATA, AND_LABELS) == 1.0
    assert session.test(AND_DATA, [0, 0, 0, 0]) == 0.75


def test_training_data_validation():
    with pytest.raises(EmptyDataset):
        PerceptronSession.from_data([], [], 0.1)
    with pytest.raises(LabelMismatch):
        PerceptronSession.from_data(AND_DATA, [0, 1], 0.1)
    with pytest.raises(LearningRateOutOfRange):
        SLPSession.from_data(AND_DATA, AND_LABELS, 2, 0.0)
    with pytest.raises(LearningRateOutOfRange):
        MLPSession.from_data(AND_DATA, AND_LABELS, [2], 1.5)
    with pytest.raises(DimensionMismatch):
        PerceptronSession.from_data([[0, 0], [1]], [0, 1], 0.1)


def test_test_validation_and_negative_epochs():
    session = PerceptronSession.from_data(AND_DATA, AND_LABELS, 0.1, rng=1)
    with pytest.raises(LabelMismatch):
        session.test(AND_DATA, [0])
    with pytest.raises(EmptyDataset):
        session.test([], [])
    with pytest.raises(ParameterOutOfRange):
        session.train(-1)


def test_session_keeps_data_order():
    data, labels = _blobs()
    session = SLPSession.from_data(data, labels, 3, 0.5, rng=0)
    assert session.data == data
    assert session.labels == labels


def test_callbacks_receive_epoch_metrics():
    class Recorder:
        def __init__(self):
            self.epochs = []

        def on_epoch(self, epoch, metrics):
            self.epochs.append((epoch, dict(metrics)))

    recorder = Recorder()
    session = PerceptronSession.from_data(AND_DATA, AND_LABELS, 0.1, rng=2, callbacks=[recorder])
    session.train(3)
    assert [epoch for epoch, _ in recorder.epochs] == [1, 2, 3]
    assert all(m["epoch_items"] == 4.0 for _, m in recorder.epochs)
    session.train(0)
    assert session.epochs_trained == 3


def test_slp_training_reduces_loss():
    data, labels = _blobs()
    session = SLPSession.from_data(data, labels, 4, 0.5, rng=0)
    history = _loss_history(session, 30)
    assert history[-1] < history[0]
    assert session.test(data, labels) >= 0.75


def test_slp_hidden_factor_zero_freezes_hidden_layer():
    data, labels = _blobs()
    session = SLPSession.from_data(data, labels, 2, 0.5, rng=3)
    before = [list(u.weights) for u in session.model.hidden_layer]
    output_before = list(session.model.output_layer.weights)
    session.train(1, hidden_factor=0.0)
    assert [u.weights for u in session.model.hidden_layer] == before
    assert session.model.output_layer.weights != output_before


def test_slp_predict_threshold():
    def session_with_bias(bias):
        slp = SLP([Unit([0.0, 0.0], 0.0, SIGMOID)], Unit([0.0], bias, SIGMOID))
        return SLPSession([], [], slp, 0.1)

    assert session_with_bias(0.0).predict([1.0, 1.0]) == 1
    assert session_with_bias(-0.1).predict([1.0, 1.0]) == 0


def test_mlp_training_reduces_loss():
    data, labels = _blobs()
    session = MLPSession.from_data(data, labels, [4, 3], 0.5, rng=7, init="xavier")
    history = _loss_history(session, 20)
    assert history[-1] < history[0]
    assert session.predict(data[0]) in (0, 1)


def test_mlp_multi_output_labels():
    labels = [[1, 0], [0, 1], [0, 1], [1, 0]]
    session = MLPSession.from_data(AND_DATA, labels, [3], 0.5, rng=0)
    assert session.model.n_outputs == 2
    session.train(2)
    prediction = session.predict([0, 1])
    assert isinstance(prediction, list) and len(prediction) == 2
    assert 0.0 <= session.test(AND_DATA, labels) <= 1.0
    with pytest.raises(DimensionMismatch):
        MLPSession.from_data(AND_DATA, [[1, 0], [0], [0, 1], [1, 0]], [3], 0.5)


def test_sessions_export_and_import(tmp_path):
    data, labels = _blobs()
    trained = SLPSession.from_data(data, labels, 3, 0.5, rng=0).train(2)
    path = trained.save(tmp_path / "slp.json")

    restored = SLPSession.load(path)
    assert restored.learning_rate == 0.0
    assert restored.item_count == 0
    assert [restored.predict(item) for item in data] == [trained.predict(item) for item in data]

    perceptron = PerceptronSession.from_params({"weights": [1.0, 1.0], "bias": -1.5})
    assert perceptron.test(AND_DATA, AND_LABELS) == 1.0

    mlp = MLPSession.from_data(data, labels, [2, 2], 0.5, rng=1)
    mlp_path = mlp.save(tmp_path / "mlp.json")
    assert MLPSession.load(mlp_path).predict(data[5]) == mlp.predict(data[5])


def test_evaluate_reports_requested_metrics():
    session = PerceptronSession.from_params({"weights": [1.0, 1.0], "bias": -1.5})
    metrics = session.evaluate(AND_DATA, AND_LABELS, ["accuracy", "f1"])
    assert metrics["accuracy"] == 1.0
    assert metrics["f1"] == pytest.approx(1.0, abs=1e-6)
    with pytest.raises(EmptyDataset):
        session.evaluate([], [])


def test_mlp_session_load_uses_supplied_activations(tmp_path):
    mlp = MLP.random(2, 1, [3], RELU, SIGMOID, rng=0)
    path = MLPSession([], [], mlp, 0.0).save(tmp_path / "relu.json")
    restored = MLPSession.load(path, hidden_activation=RELU, output_activation=SIGMOID)
    item = [0.9, -2.0]
    assert restored.model.forward(item).last_outputs == mlp.forward(item).last_outputs
    assert all(u.activation is RELU for u in restored.model.hidden_layers[0])


def test_training_traces_are_logged_at_debug(caplog):
    session = PerceptronSession(AND_DATA, AND_LABELS, Unit([0.0, 0.0], 0.0, STEP), 0.5)
    with caplog.at_level(logging.DEBUG, logger="perceptronets.training.trainer"):
        session.train(1)
    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("item 4/4 inputs=[1, 1]") for message in messages)
    assert any("perceptron epoch 1" in message for message in messages)
