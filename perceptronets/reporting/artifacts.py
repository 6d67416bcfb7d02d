"""Run manifest: what was trained, on which points, with which environment."""

from __future__ import annotations

import json
import platform
import time
from pathlib import Path
from typing import Mapping, Sequence

import numpy as np


def parameter_count(model_dims: Sequence[int]) -> int:
    """Weights plus biases of a fully connected stack with ``model_dims`` widths."""

    return sum((n_in + 1) * n_out for n_in, n_out in zip(model_dims, model_dims[1:]))


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    dataset_provenance: Mapping[str, object],
    kind: str,
    model_dims: Sequence[int],
) -> str:
    from .. import __version__

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": config,
        "dataset": dict(dataset_provenance),
        "model": {
            "kind": kind,
            "dims": list(model_dims),
            "parameters": parameter_count(model_dims),
        },
        "environment": {
            "perceptronets": __version__,
            "python": platform.python_version(),
            "numpy": np.__version__,
        },
    }
    path.write_text(json.dumps(manifest, indent=2))
    return str(path)


__all__ = ["parameter_count", "write_manifest"]
