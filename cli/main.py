"""Command line entry point for mlpnet: train, predict and inspect networks."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable

from mlpnet.core.errors import MLPError
from mlpnet.persistence import load_model
from mlpnet.training import pipelines


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "final_loss": result.final_loss,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
    }
    if result.summary_path:
        payload["summary"] = result.summary_path
    if result.model_path:
        payload["model"] = result.model_path
    return json.dumps(payload, sort_keys=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mlpnet", description=__doc__)
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log training progress (INFO level)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Explicit logging level; takes precedence over --verbose",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    train = commands.add_parser("train", help="Train a network from a preset or config")
    train.add_argument("--preset", default="parity3", help="Preset configuration to execute")
    train.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    train.add_argument("--epochs", type=int, help="Override the number of epochs")
    train.add_argument("--report-every", type=int, help="Override the reporting cadence")
    train.add_argument("--seed", type=int, help="Seed used for weight initialisation")
    train.add_argument("--run-dir", type=Path, help="Directory receiving run artefacts")
    train.add_argument(
        "--enable-plots", action="store_true", help="Save a loss curve (needs matplotlib)"
    )
    train.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    train.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )

    predict = commands.add_parser("predict", help="Run a saved model on one input vector")
    predict.add_argument("model", type=Path, help="Path to a saved model.json")
    predict.add_argument("inputs", type=float, nargs="+", help="Input values")
    predict.add_argument(
        "--threshold", type=float, default=0.5, help="Classification threshold"
    )

    inspect = commands.add_parser("inspect", help="Describe a saved model")
    inspect.add_argument("model", type=Path, help="Path to a saved model.json")
    return parser


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(None if argv is None else list(argv))


def log_level(args: argparse.Namespace) -> int:
    if args.log_level:
        return getattr(logging, args.log_level)
    return logging.INFO if args.verbose else logging.WARNING


def _resolve_train_config(args: argparse.Namespace) -> dict:
    config = pipelines.load_preset(args.preset)
    if args.config:
        override = pipelines.load_config_file(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = pipelines.merge_config(config, override)
    train_cfg = config.setdefault("train", {})
    if args.epochs is not None:
        train_cfg["epochs"] = int(args.epochs)
    if args.report_every is not None:
        train_cfg["report_every"] = int(args.report_every)
    if args.seed is not None:
        train_cfg["seed"] = int(args.seed)
    if args.run_dir is not None:
        train_cfg["run_dir"] = str(args.run_dir)
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    return config


def _train(args: argparse.Namespace) -> int:
    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        return 0
    config = _resolve_train_config(args)
    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))
    result = pipelines.run_pipeline(config)
    print(_format_result(result))
    return 0


def _predict(args: argparse.Namespace) -> int:
    network = load_model(args.model)
    outputs = network.forward(args.inputs)
    payload = {
        "inputs": list(args.inputs),
        "outputs": [float(v) for v in outputs],
        "classes": [int(v > args.threshold) for v in outputs],
    }
    snapshot = network.last_activations
    if snapshot is not None:
        payload["activations"] = {
            "hidden1": snapshot.hidden1.tolist(),
            "hidden2": snapshot.hidden2.tolist(),
        }
    print(json.dumps(payload, sort_keys=True))
    return 0


def _inspect(args: argparse.Namespace) -> int:
    network = load_model(args.model)
    payload = network.describe()
    payload["weight_shapes"] = [list(w.shape) for w in network.weights]
    payload["bias_lengths"] = [int(b.shape[0]) for b in network.biases]
    print(json.dumps(payload, sort_keys=True))
    return 0


_COMMANDS = {"train": _train, "predict": _predict, "inspect": _inspect}


def main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=log_level(args),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return _COMMANDS[args.command](args)
    except MLPError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
