"""Config-driven end-to-end runs: dataset → split → train → test → artifacts."""

from __future__ import annotations

import json
import logging
import time
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from ..core.types import RunResult
from ..data import normalize, registry, shuffle, split, to_arrays
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .metrics import DEFAULT_METRICS
from .trainer import SESSIONS, MLPSession, PerceptronSession, SLPSession

logger = logging.getLogger(__name__)

_PRESETS: Dict[str, Mapping[str, object]] = {
    "perceptron-and": {
        "data": {"name": "and_gate", "options": {}},
        "model": {"kind": "perceptron"},
        "train": {
            "epochs": 20,
            "lr": 0.1,
            "seed": 0,
            "split": 1.0,
            "shuffle": False,
            "normalize": False,
            "run_dir": "runs/perceptron-and",
            "enable_plots": False,
        },
    },
    "slp-blobs": {
        "data": {"name": "blobs", "options": {"n_points": 200, "spread": 0.6, "seed": 0}},
        "model": {"kind": "slp", "hidden": 4},
        "train": {
            "epochs": 30,
            "lr": 0.5,
            "hidden_factor": 1.0,
            "seed": 123,
            "split": 0.8,
            "shuffle": True,
            "normalize": True,
            "run_dir": "runs/slp-blobs",
            "enable_plots": False,
        },
    },
    "mlp-blobs": {
        "data": {"name": "blobs", "options": {"n_points": 200, "spread": 0.6, "seed": 0}},
        "model": {"kind": "mlp", "hidden": [4, 3], "init": "xavier"},
        "train": {
            "epochs": 30,
            "lr": 0.5,
            "hidden_factor": 1.0,
            "seed": 7,
            "split": 0.8,
            "shuffle": True,
            "normalize": True,
            "run_dir": "runs/mlp-blobs",
            "enable_plots": False,
        },
    },
}


def presets() -> Mapping[str, Mapping[str, object]]:
    return {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}


def load_preset(name: str) -> Dict[str, Any]:
    try:
        return deepcopy(_PRESETS[name])  # type: ignore[return-value]
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def _prepare_data(config: Mapping[str, Any]) -> Tuple[registry.DatasetSpec, list, list]:
    data_cfg = dict(config["data"])
    train_cfg = dict(config.get("train", {}))
    dataset = registry.get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    points = list(dataset.points)
    if train_cfg.get("normalize", False):
        points = normalize(points)
    if train_cfg.get("shuffle", False):
        points = shuffle(points, int(train_cfg.get("seed", 0)))
    train_points, test_points = split(points, float(train_cfg.get("split", 0.8)))
    return dataset, train_points, test_points


def _build_session(
    model_cfg: Mapping[str, Any],
    data: Sequence[Sequence[float]],
    labels: Sequence[float],
    lr: float,
    seed: int,
    callbacks: Sequence[object],
):
    kind = str(model_cfg.get("kind", "slp"))
    if kind == "perceptron":
        return PerceptronSession.from_data(data, labels, lr, rng=seed, callbacks=callbacks)
    if kind == "slp":
        hidden = model_cfg.get("hidden", 4)
        if isinstance(hidden, (list, tuple)):
            if len(hidden) != 1:
                raise ValueError("An SLP has exactly one hidden layer; use kind 'mlp' for more")
            hidden = hidden[0]
        return SLPSession.from_data(data, labels, int(hidden), lr, rng=seed, callbacks=callbacks)
    if kind == "mlp":
        hidden = model_cfg.get("hidden", [4])
        dims = [int(h) for h in (hidden if isinstance(hidden, (list, tuple)) else [hidden])]
        return MLPSession.from_data(
            data,
            labels,
            dims,
            lr,
            rng=seed,
            init=str(model_cfg.get("init", "uniform")),
            callbacks=callbacks,
        )
    raise ValueError(f"Unknown model kind: {kind!r}. Available kinds: {', '.join(sorted(SESSIONS))}")


def _model_dims(session) -> List[int]:
    model = session.model
    if isinstance(session, PerceptronSession):
        return [model.n_inputs, 1]
    if isinstance(session, SLPSession):
        return [model.n_inputs, model.hidden_size, 1]
    return model.layer_dims()


def run_pipeline(config: Mapping[str, Any]) -> RunResult:
    """Train and evaluate the model described by ``config``."""

    for section in ("data", "model", "train"):
        if section not in config:
            raise KeyError(f"Config is missing required section {section!r}")
    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])

    dataset, train_points, test_points = _prepare_data(config)
    train_data, train_labels = to_arrays(train_points, dataset.positive)
    test_source = "test"
    if not test_points:
        # no held-out split requested; report accuracy on the training points
        test_points = train_points
        test_source = "train"
    test_data, test_labels = to_arrays(test_points, dataset.positive)

    seed = int(train_cfg.get("seed", 0))
    lr = float(train_cfg.get("lr", 0.1))
    epochs = int(train_cfg.get("epochs", 1))
    kind = str(model_cfg.get("kind", "slp"))
    run_dir = _resolve_run_dir(train_cfg, dataset.name, kind)
    run_dir.mkdir(parents=True, exist_ok=True)

    jsonl = JsonlSink(run_dir / "metrics.jsonl", kind=kind, split="train", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", kind=kind, split="train")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))

    session = _build_session(model_cfg, train_data, train_labels, lr, seed, [jsonl, csv_sink, plots])
    logger.info(
        "dataset=%s kind=%s dims=%s train=%d %s=%d epochs=%d lr=%s",
        dataset.name,
        session.kind,
        _model_dims(session),
        len(train_data),
        test_source,
        len(test_data),
        epochs,
        lr,
    )

    if isinstance(session, PerceptronSession):
        session.train(epochs)
    else:
        session.train(epochs, hidden_factor=float(train_cfg.get("hidden_factor", 1.0)))
    plots.close()
    if not (isinstance(session, MLPSession) and session.model.n_outputs > 1):
        plots.decision_boundary(session.predict, test_data, test_labels)

    metric_names = list(train_cfg.get("metrics", DEFAULT_METRICS))
    if "accuracy" not in metric_names:
        metric_names.insert(0, "accuracy")
    test_metrics = dict(session.evaluate(test_data, test_labels, metric_names))
    (run_dir / "metrics_test.json").write_text(
        json.dumps({**test_metrics, "source": test_source}, indent=2)
    )

    model_path = session.save(run_dir / "model.json")
    safe_config = json.loads(json.dumps(config, default=str))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset.provenance,
        kind=session.kind,
        model_dims=_model_dims(session),
    )
    summary_path = write_summary(jsonl.path, run_dir / "summary.json", test_metrics=test_metrics)
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    return RunResult(
        epochs=session.epochs_trained,
        accuracy=float(test_metrics["accuracy"]),
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        model_path=model_path,
        summary_path=summary_path,
    )


def evaluate_saved(model_path: str | Path, config: Mapping[str, Any]) -> float:
    """Accuracy of a previously exported model on the test split of ``config``."""

    kind = str(config.get("model", {}).get("kind", "slp"))
    if kind not in SESSIONS:
        raise ValueError(f"Unknown model kind: {kind!r}")
    session = SESSIONS[kind].load(model_path)
    dataset, train_points, test_points = _prepare_data(config)
    points = test_points or train_points
    data, labels = to_arrays(points, dataset.positive)
    return session.test(data, labels)


def _resolve_run_dir(train_cfg: Mapping[str, Any], dataset: str, kind: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(train_cfg["run_dir"])
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset / kind


__all__ = ["evaluate_saved", "load_preset", "presets", "run_pipeline"]
