"""perceptronets public API."""

from .core import activations  # noqa: F401
from .core import errors  # noqa: F401
from .core.mlp import MLP
from .core.slp import SLP
from .core.unit import Unit, dot
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import MLPSession, PerceptronSession, SLPSession

__version__ = "0.1.0"

__all__ = [
    "MLP",
    "MLPSession",
    "PerceptronSession",
    "SLP",
    "SLPSession",
    "Unit",
    "activations",
    "dot",
    "errors",
    "load_preset",
    "presets",
    "run_pipeline",
]
