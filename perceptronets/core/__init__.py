"""Core numerical primitives for perceptronets."""

from . import activations, errors, mlp, slp, types, unit

__all__ = ["activations", "errors", "mlp", "slp", "types", "unit"]
