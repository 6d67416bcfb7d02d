"""Parameter export/import for Units, SLPs and MLPs.

Only weights and biases are persisted. Activation functions are not part of
the payload and must be supplied again when a model is imported. The SLP and
MLP key names are kept in camelCase so existing model files stay readable.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Sequence

from .core.activations import SIGMOID, STEP
from .core.errors import DimensionMismatch
from .core.mlp import MLP
from .core.slp import SLP
from .core.unit import Unit

Params = Dict[str, Any]
ActivationFn = Callable[[float], float]


def _require(params: Mapping[str, Any], *keys: str) -> None:
    for key in keys:
        if key not in params:
            raise KeyError(f"Missing {key!r} in model parameters")


def _check_rows(bias_key: str, biases: Sequence[Any], weights_key: str, weights: Sequence[Any]) -> None:
    if len(biases) != len(weights):
        raise DimensionMismatch(
            f"{bias_key} has {len(biases)} entries but {weights_key} has {len(weights)} rows"
        )


def export_unit(unit: Unit) -> Params:
    return {"weights": list(unit.weights), "bias": unit.bias}


def import_unit(params: Mapping[str, Any], activation: ActivationFn = STEP) -> Unit:
    _require(params, "weights", "bias")
    return Unit(params["weights"], params["bias"], activation)


def export_slp(slp: SLP) -> Params:
    return {
        "outputLayerBias": slp.output_layer.bias,
        "outputLayerWeights": list(slp.output_layer.weights),
        "hiddenLayerBias": [unit.bias for unit in slp.hidden_layer],
        "hiddenLayerWeights": [list(unit.weights) for unit in slp.hidden_layer],
    }


def import_slp(params: Mapping[str, Any], activation: ActivationFn = SIGMOID) -> SLP:
    _require(params, "outputLayerBias", "outputLayerWeights", "hiddenLayerBias", "hiddenLayerWeights")
    _check_rows(
        "hiddenLayerBias", params["hiddenLayerBias"], "hiddenLayerWeights", params["hiddenLayerWeights"]
    )
    output = Unit(params["outputLayerWeights"], params["outputLayerBias"], activation)
    hidden = [
        Unit(weights, params["hiddenLayerBias"][i], activation)
        for i, weights in enumerate(params["hiddenLayerWeights"])
    ]
    return SLP(hidden, output)


def export_mlp(mlp: MLP) -> Params:
    return {
        "outputLayerBias": [unit.bias for unit in mlp.output_layer],
        "outputLayerWeights": [list(unit.weights) for unit in mlp.output_layer],
        "hiddenLayersBias": [[unit.bias for unit in layer] for layer in mlp.hidden_layers],
        "hiddenLayersWeights": [
            [list(unit.weights) for unit in layer] for layer in mlp.hidden_layers
        ],
    }


def import_mlp(
    params: Mapping[str, Any],
    hidden_activation: ActivationFn = SIGMOID,
    output_activation: ActivationFn = SIGMOID,
) -> MLP:
    _require(params, "outputLayerBias", "outputLayerWeights", "hiddenLayersBias", "hiddenLayersWeights")
    biases, weights = params["hiddenLayersBias"], params["hiddenLayersWeights"]
    _check_rows("hiddenLayersBias", biases, "hiddenLayersWeights", weights)
    for layer_idx, layer in enumerate(weights):
        _check_rows(f"hiddenLayersBias[{layer_idx}]", biases[layer_idx], f"hiddenLayersWeights[{layer_idx}]", layer)
    _check_rows("outputLayerBias", params["outputLayerBias"], "outputLayerWeights", params["outputLayerWeights"])
    hidden_layers = [
        [
            Unit(weights, params["hiddenLayersBias"][layer_idx][i], hidden_activation)
            for i, weights in enumerate(layer)
        ]
        for layer_idx, layer in enumerate(params["hiddenLayersWeights"])
    ]
    output_layer = [
        Unit(weights, params["outputLayerBias"][k], output_activation)
        for k, weights in enumerate(params["outputLayerWeights"])
    ]
    return MLP(hidden_layers, output_layer)


def save_params(path: str | Path, params: Mapping[str, Any]) -> str:
    """Write ``params`` as indented JSON and return the path written."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(params, indent=2))
    return str(path)


def load_params(path: str | Path) -> Params:
    data = json.loads(Path(path).read_text())
    if not isinstance(data, dict):
        raise TypeError(f"Model file {path} must decode to a mapping")
    return data


__all__ = [
    "export_mlp",
    "export_slp",
    "export_unit",
    "import_mlp",
    "import_slp",
    "import_unit",
    "load_params",
    "save_params",
]
