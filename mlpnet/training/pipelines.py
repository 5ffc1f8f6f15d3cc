"""Pipeline assembly: config presets, dataset + network wiring, run artefacts."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Mapping

import numpy as np

from ..core.errors import ValidationError
from ..core.network import DEFAULT_REPORT_EVERY, MultiLayerPerceptron
from ..core.types import RunResult
from ..data import registry
from ..persistence import save_model
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, HistoryCapture, JsonlSink, LoggingSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .trainer import Trainer

_PRESETS: Dict[str, Mapping[str, object]] = {
    "parity3": {
        "data": {"name": "parity3", "options": {}},
        "model": {
            "input_size": 3,
            "hidden1_size": 8,
            "hidden2_size": 6,
            "output_size": 1,
            "learning_rate": 0.7,
            "momentum": 0.9,
        },
        "train": {
            "epochs": 8000,
            "report_every": 500,
            "seed": 0,
            "run_dir": "runs/parity3",
            "save_model": True,
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None

_REQUIRED_SECTIONS = {"data", "model", "train"}


def load_config_file(path: str | Path) -> Mapping[str, Any]:
    """Read a JSON or YAML config mapping from ``path``."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def merge_config(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into ``base`` and return ``base``."""

    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            base[key] = merge_config(dict(base[key]), value)
        else:
            base[key] = deepcopy(value)
    return base


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = load_config_file(file)
                missing = _REQUIRED_SECTIONS - set(data)
                if missing:
                    raise KeyError(
                        f"Preset {file.name} is missing required sections: "
                        f"{', '.join(sorted(missing))}"
                    )
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {
        name: deepcopy(cfg) for name, cfg in _PRESETS.items()
    }
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Dict[str, Any]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return dict(file_overrides[name])
    try:
        return deepcopy(dict(_PRESETS[name]))
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def build_network(
    model_cfg: Mapping[str, Any], dataset: registry.DatasetSpec, seed: int | None
) -> MultiLayerPerceptron:
    input_size = model_cfg.get("input_size", dataset.input_size)
    output_size = model_cfg.get("output_size", dataset.output_size)
    if input_size != dataset.input_size:
        raise ValidationError(
            f"Configured input_size={input_size} but dataset {dataset.name!r} "
            f"has {dataset.input_size} inputs"
        )
    if output_size != dataset.output_size:
        raise ValidationError(
            f"Configured output_size={output_size} but dataset {dataset.name!r} "
            f"has {dataset.output_size} targets"
        )
    return MultiLayerPerceptron(
        input_size,
        model_cfg.get("hidden1_size", 8),
        model_cfg.get("hidden2_size", 6),
        output_size,
        model_cfg.get("learning_rate", 0.7),
        model_cfg.get("momentum", 0.9),
        rng=np.random.default_rng(seed),
    )


def run_pipeline(config: Mapping[str, Any]) -> RunResult:
    """Train a network as described by ``config`` and write run artefacts.

    The run directory receives ``metrics.jsonl``, ``metrics.csv``,
    ``summary.json``, ``manifest.json``, ``config.json`` and, unless
    ``train.save_model`` is false, ``model.json``.
    """

    data_cfg = dict(config["data"])
    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])

    dataset = registry.get(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    seed = train_cfg.get("seed")
    seed = int(seed) if seed is not None else None
    epochs = train_cfg.get("epochs", 1)
    report_every = int(train_cfg.get("report_every", DEFAULT_REPORT_EVERY))

    network = build_network(model_cfg, dataset, seed)
    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        samples=len(dataset),
        network=network,
        epochs=epochs,
        report_every=report_every,
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", split="train", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", split="train")
    capture = HistoryCapture()
    plots = PlotAdapter(
        run_dir,
        enable_plots=bool(train_cfg.get("enable_plots", False)),
        network=network.describe(),
    )
    trainer = Trainer(
        network,
        callbacks=[LoggingSink(epochs), jsonl, csv_sink, capture, plots],
        report_every=report_every,
    )
    result = trainer.run(dataset.samples, epochs)
    plots.close()

    model_path = ""
    if bool(train_cfg.get("save_model", True)):
        model_path = str(save_model(network, run_dir / "model.json"))

    safe_config = json.loads(json.dumps(config))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset.provenance,
        network=network.describe(),
        training={
            "epochs_completed": result.epochs_completed,
            "final_loss": float(result.final_loss),
            "stopped": result.stopped,
            "seed": seed,
        },
    )
    summary_path = write_summary(
        jsonl.path, run_dir / "summary.json", tail=int(train_cfg.get("summary_tail", 8))
    )
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    return RunResult(
        epochs=result.epochs_completed,
        final_loss=float(result.final_loss),
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
        model_path=model_path,
    )


def _resolve_run_dir(train_cfg: Mapping[str, Any], dataset: str) -> Path:
    if train_cfg.get("run_dir"):
        return Path(train_cfg["run_dir"])
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _print_startup_summary(
    *,
    dataset_name: str,
    samples: int,
    network: MultiLayerPerceptron,
    epochs: int,
    report_every: int,
) -> None:
    info = network.describe()
    print("=== mlpnet run ===")
    print(f"Dataset       : {dataset_name} ({samples} samples)")
    print(f"Layers        : {'-'.join(str(s) for s in info['layer_sizes'])}")
    print(f"Learning rate : {info['learning_rate']}")
    print(f"Momentum      : {info['momentum']}")
    print(f"Epochs        : {epochs} (report every {report_every})")
    print(f"Parameters    : {info['parameters']}")
    print("==================")


__all__ = [
    "build_network",
    "load_config_file",
    "load_preset",
    "merge_config",
    "presets",
    "run_pipeline",
]
