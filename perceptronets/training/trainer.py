"""Online supervised training sessions for perceptrons, SLPs and MLPs.

A session owns its model and its training data. Examples are visited in the
order given and every example updates the parameters immediately, so the
next forward pass in the same epoch already sees the new weights.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, List, Mapping, Sequence

import numpy as np

from .. import persistence
from ..core.activations import SIGMOID, STEP
from ..core.errors import (
    DimensionMismatch,
    EmptyDataset,
    LabelMismatch,
    LearningRateOutOfRange,
    ParameterOutOfRange,
)
from ..core.mlp import MLP
from ..core.slp import SLP
from ..core.types import RngLike, as_generator
from ..core.unit import Unit
from .losses import REGISTRY as LOSS_REGISTRY
from .metrics import DEFAULT_METRICS, compute_metrics

logger = logging.getLogger(__name__)

_SQUARE = LOSS_REGISTRY.get("square")


def _validate_training_data(
    data: Sequence[Sequence[float]], labels: Sequence[Any], learning_rate: float
) -> int:
    if len(data) == 0:
        raise EmptyDataset("Data cannot be empty")
    if len(data) != len(labels):
        raise LabelMismatch(f"Data has {len(data)} items but {len(labels)} labels were given")
    if not 0 < learning_rate <= 1:
        raise LearningRateOutOfRange(f"Learning rate must be in (0, 1], got {learning_rate}")
    width = len(data[0])
    for idx, row in enumerate(data):
        if len(row) != width:
            raise DimensionMismatch(f"Row {idx} has {len(row)} values, expected {width}")
    return width


class _Session:
    """Shared bookkeeping: epochs, callbacks, evaluation."""

    kind = ""

    def __init__(
        self,
        data: Sequence[Sequence[float]],
        labels: Sequence[Any],
        model: Any,
        learning_rate: float,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.data: List[List[float]] = [list(row) for row in data]
        self.labels = list(labels)
        self.model = model
        self.learning_rate = float(learning_rate)
        self.item_count = len(self.data)
        self.epochs_trained = 0
        self.callbacks = list(callbacks or [])

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} items={self.item_count} "
            f"lr={self.learning_rate} epochs_trained={self.epochs_trained}>"
        )

    # ------------------------------------------------------------------
    # Training

    def train(self, epochs: int = 1, **options: float) -> "_Session":
        if epochs < 0:
            raise ParameterOutOfRange(f"epochs must be non-negative, got {epochs}")
        for _ in range(epochs):
            total = 0.0
            for idx in range(self.item_count):
                total += self._train_item(idx, self.data[idx], self.labels[idx], **options)
            self.epochs_trained += 1
            metrics = {
                "loss": total / self.item_count if self.item_count else 0.0,
                "epoch_items": float(self.item_count),
            }
            logger.info(
                "%s epoch %d: loss=%.6f", self.kind, self.epochs_trained, metrics["loss"]
            )
            self._emit_epoch(self.epochs_trained, metrics)
        return self

    def _train_item(self, idx: int, inputs: Sequence[float], label: Any, **options: float) -> float:
        raise NotImplementedError

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)

    # ------------------------------------------------------------------
    # Inference

    def predict(self, item: Sequence[float]) -> Any:
        raise NotImplementedError

    def _matches(self, prediction: Any, label: Any) -> bool:
        return prediction == label

    def test(self, data: Sequence[Sequence[float]], labels: Sequence[Any]) -> float:
        """Fraction of ``data`` whose prediction equals its label."""

        if len(data) != len(labels):
            raise LabelMismatch(f"Data has {len(data)} items but {len(labels)} labels were given")
        if len(data) == 0:
            raise EmptyDataset("Cannot test on an empty dataset")
        score = 0
        for idx, item in enumerate(data):
            prediction = self.predict(item)
            if self._matches(prediction, labels[idx]):
                score += 1
            else:
                logger.debug(
                    "wrong prediction for %s: expected %s, got %s", item, labels[idx], prediction
                )
        accuracy = score / len(data)
        logger.info("%s accuracy %d/%d = %.4f", self.kind, score, len(data), accuracy)
        return accuracy

    def evaluate(
        self,
        data: Sequence[Sequence[float]],
        labels: Sequence[Any],
        metric_names: Sequence[str] = DEFAULT_METRICS,
    ) -> Mapping[str, float]:
        if len(data) != len(labels):
            raise LabelMismatch(f"Data has {len(data)} items but {len(labels)} labels were given")
        if len(data) == 0:
            raise EmptyDataset("Cannot evaluate on an empty dataset")
        predictions = [self.predict(item) for item in data]
        return compute_metrics(metric_names, predictions, labels)

    # ------------------------------------------------------------------
    # Persistence

    def export_params(self) -> Mapping[str, Any]:
        raise NotImplementedError

    def save(self, path: str | Path) -> str:
        written = persistence.save_params(path, self.export_params())
        logger.info("Model exported to %s", written)
        return written


class PerceptronSession(_Session):
    """Single step-activated Unit trained with the perceptron delta rule."""

    kind = "perceptron"

    @classmethod
    def from_data(
        cls,
        data: Sequence[Sequence[float]],
        labels: Sequence[float],
        learning_rate: float,
        rng: RngLike = None,
        callbacks: Sequence[object] | None = None,
    ) -> "PerceptronSession":
        width = _validate_training_data(data, labels, learning_rate)
        unit = Unit.random(width, STEP, as_generator(rng))
        return cls(data, labels, unit, learning_rate, callbacks)

    @classmethod
    def from_params(
        cls, params: Mapping[str, Any], activation: Callable[[float], float] = STEP
    ) -> "PerceptronSession":
        return cls([], [], persistence.import_unit(params, activation), 0.0)

    @classmethod
    def load(cls, path: str | Path, activation: Callable[[float], float] = STEP) -> "PerceptronSession":
        session = cls.from_params(persistence.load_params(path), activation)
        logger.info("Model imported from %s", path)
        return session

    def _train_item(self, idx: int, inputs: Sequence[float], label: float, **options: float) -> float:
        unit: Unit = self.model
        output = unit.evaluate(inputs).state.output
        error = label - output
        # The step function has no useful derivative, so none is applied.
        unit.apply_update([self.learning_rate * error * x for x in inputs], self.learning_rate * error)
        logger.debug(
            "item %d/%d inputs=%s expected=%s output=%s error=%s weights=%s bias=%s",
            idx + 1, self.item_count, inputs, label, output, error, unit.weights, unit.bias,
        )
        return _SQUARE(output, label)[0]

    def predict(self, item: Sequence[float]) -> float:
        return self.model.evaluate(item).state.output

    def export_params(self) -> Mapping[str, Any]:
        return persistence.export_unit(self.model)


class SLPSession(_Session):
    """Sigmoid SLP trained with online gradient descent on the square loss."""

    kind = "slp"

    @classmethod
    def from_data(
        cls,
        data: Sequence[Sequence[float]],
        labels: Sequence[float],
        hidden_size: int,
        learning_rate: float,
        rng: RngLike = None,
        callbacks: Sequence[object] | None = None,
    ) -> "SLPSession":
        width = _validate_training_data(data, labels, learning_rate)
        slp = SLP.random(width, hidden_size, SIGMOID, as_generator(rng))
        return cls(data, labels, slp, learning_rate, callbacks)

    @classmethod
    def from_params(
        cls, params: Mapping[str, Any], activation: Callable[[float], float] = SIGMOID
    ) -> "SLPSession":
        return cls([], [], persistence.import_slp(params, activation), 0.0)

    @classmethod
    def load(cls, path: str | Path, activation: Callable[[float], float] = SIGMOID) -> "SLPSession":
        session = cls.from_params(persistence.load_params(path), activation)
        logger.info("Model imported from %s", path)
        return session

    def train(self, epochs: int = 1, hidden_factor: float = 1.0) -> "SLPSession":
        """Run ``epochs`` online passes; hidden gradients are scaled by ``hidden_factor``."""

        return super().train(epochs, hidden_factor=hidden_factor)

    def _train_item(
        self, idx: int, inputs: Sequence[float], label: float, hidden_factor: float = 1.0
    ) -> float:
        slp: SLP = self.model
        output = slp.forward(inputs).last_output
        loss, loss_grad = _SQUARE(output, label)
        _, grads = slp.backward(label)
        logger.debug(
            "item %d/%d inputs=%s expected=%s output=%s loss=%s dL/dy=%s",
            idx + 1, self.item_count, inputs, label, output, loss, loss_grad,
        )
        slp.apply_gradients(grads, self.learning_rate, hidden_factor)
        return loss

    def predict(self, item: Sequence[float]) -> int:
        output = self.model.forward(item).last_output
        return 0 if output < 0.5 else 1

    def export_params(self) -> Mapping[str, Any]:
        return persistence.export_slp(self.model)


def _as_targets(label: Any) -> List[float]:
    if np.isscalar(label):
        return [float(label)]
    return [float(v) for v in label]


class MLPSession(_Session):
    """Sigmoid MLP trained with online gradient descent on the summed square loss.

    Labels may be scalars (single-output models) or sequences with one value
    per output Unit.
    """

    kind = "mlp"

    @classmethod
    def from_data(
        cls,
        data: Sequence[Sequence[float]],
        labels: Sequence[Any],
        hidden_dimensions: Sequence[int],
        learning_rate: float,
        rng: RngLike = None,
        init: str = "uniform",
        callbacks: Sequence[object] | None = None,
    ) -> "MLPSession":
        width = _validate_training_data(data, labels, learning_rate)
        n_outputs = len(_as_targets(labels[0]))
        for idx, label in enumerate(labels):
            if len(_as_targets(label)) != n_outputs:
                raise DimensionMismatch(f"Label {idx} has a different width than label 0")
        mlp = MLP.random(
            width, n_outputs, hidden_dimensions, SIGMOID, SIGMOID, as_generator(rng), init=init
        )
        return cls(data, labels, mlp, learning_rate, callbacks)

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, Any],
        hidden_activation: Callable[[float], float] = SIGMOID,
        output_activation: Callable[[float], float] = SIGMOID,
    ) -> "MLPSession":
        mlp = persistence.import_mlp(params, hidden_activation, output_activation)
        return cls([], [], mlp, 0.0)

    @classmethod
    def load(
        cls,
        path: str | Path,
        hidden_activation: Callable[[float], float] = SIGMOID,
        output_activation: Callable[[float], float] = SIGMOID,
    ) -> "MLPSession":
        session = cls.from_params(persistence.load_params(path), hidden_activation, output_activation)
        logger.info("Model imported from %s", path)
        return session

    def train(self, epochs: int = 1, hidden_factor: float = 1.0) -> "MLPSession":
        return super().train(epochs, hidden_factor=hidden_factor)

    def _train_item(
        self, idx: int, inputs: Sequence[float], label: Any, hidden_factor: float = 1.0
    ) -> float:
        mlp: MLP = self.model
        targets = _as_targets(label)
        outputs = mlp.forward(inputs).last_outputs
        loss = sum(_SQUARE(y, e)[0] for y, e in zip(outputs, targets))
        _, grads = mlp.backward(targets)
        logger.debug(
            "item %d/%d inputs=%s expected=%s outputs=%s loss=%s",
            idx + 1, self.item_count, inputs, targets, outputs, loss,
        )
        mlp.apply_gradients(grads, self.learning_rate, hidden_factor)
        return loss

    def predict(self, item: Sequence[float]) -> Any:
        outputs = self.model.forward(item).last_outputs
        labels = [0 if y < 0.5 else 1 for y in outputs]
        return labels[0] if len(labels) == 1 else labels

    def _matches(self, prediction: Any, label: Any) -> bool:
        return _as_targets(prediction) == _as_targets(label)

    def export_params(self) -> Mapping[str, Any]:
        return persistence.export_mlp(self.model)


SESSIONS = {
    PerceptronSession.kind: PerceptronSession,
    SLPSession.kind: SLPSession,
    MLPSession.kind: MLPSession,
}

__all__ = ["MLPSession", "PerceptronSession", "SESSIONS", "SLPSession"]
