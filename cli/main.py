"""Command line entry point for perceptronets training runs."""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
from typing import Iterable

from perceptronets.training import pipelines


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "accuracy": result.accuracy,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "model": result.model_path,
        "summary": result.summary_path,
    }
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="slp-blobs",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--enable-plots", action="store_true", help="Write loss.png and, for 2-D inputs, boundary.png")
    parser.add_argument("--seed", type=int, help="Seed used for shuffling and initialisation")
    parser.add_argument("--epochs", type=int, help="Override the number of training epochs")
    parser.add_argument("--run-dir", help="Directory receiving metrics, manifest and model")
    parser.add_argument(
        "--import-model",
        type=Path,
        help="Evaluate a previously exported model instead of training",
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("PERCEPTRONETS_LOG_LEVEL", "WARNING"),
        help="Logging level (DEBUG shows per-example training traces)",
    )
    return parser.parse_args(argv)


def configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        import yaml

        return yaml.safe_load(text) or {}
    return json.loads(text)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = pipelines.load_preset(args.preset)
    if args.config:
        override = _load_override(args.config)
        if not isinstance(override, dict):
            raise TypeError(f"Config {args.config} must decode to a mapping")
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = _merge(config, override)

    train_cfg = config.setdefault("train", {})
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    if args.seed is not None:
        train_cfg["seed"] = int(args.seed)
    if args.epochs is not None:
        train_cfg["epochs"] = int(args.epochs)
    if args.run_dir:
        train_cfg["run_dir"] = args.run_dir

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    if args.import_model:
        accuracy = pipelines.evaluate_saved(args.import_model, config)
        print(json.dumps({"model": str(args.import_model), "accuracy": accuracy}, sort_keys=True))
        return

    result = pipelines.run_pipeline(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()
