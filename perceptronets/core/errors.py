"""Exception taxonomy for model construction, propagation and training.

Every error derives from :class:`NetworkError` and from the builtin type the
failure would naturally raise, so callers can catch either.
"""

from __future__ import annotations


class NetworkError(Exception):
    """Base class for all perceptronets failures."""


class DimensionMismatch(NetworkError, ValueError):
    """A vector-length contract was violated (weights vs inputs, dot operands)."""


class StructuralInvalidity(NetworkError, ValueError):
    """Model construction invariants were violated."""


class EmptyLayer(StructuralInvalidity):
    pass


class InconsistentInputWidth(StructuralInvalidity):
    pass


class OutputWidthMismatch(StructuralInvalidity):
    pass


class NoHiddenLayers(StructuralInvalidity):
    pass


class LayerWidthMismatch(StructuralInvalidity):
    pass


class NonDifferentiableActivation(StructuralInvalidity):
    """Backpropagation reached a Unit whose activation has no derivative."""


class DatasetInvalidity(NetworkError, ValueError):
    """Training or evaluation data is unusable."""


class EmptyDataset(DatasetInvalidity):
    pass


class LabelMismatch(DatasetInvalidity):
    pass


class ParameterOutOfRange(NetworkError, ValueError):
    """A hyper-parameter is outside its admissible range."""


class LearningRateOutOfRange(ParameterOutOfRange):
    pass


class StalePropagation(NetworkError, RuntimeError):
    """Backward propagation requested without a preceding forward pass."""


__all__ = [
    "DatasetInvalidity",
    "DimensionMismatch",
    "EmptyDataset",
    "EmptyLayer",
    "InconsistentInputWidth",
    "LabelMismatch",
    "LayerWidthMismatch",
    "LearningRateOutOfRange",
    "NetworkError",
    "NoHiddenLayers",
    "NonDifferentiableActivation",
    "OutputWidthMismatch",
    "ParameterOutOfRange",
    "StalePropagation",
    "StructuralInvalidity",
]
