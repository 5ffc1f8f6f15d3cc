import json
from pathlib import Path

import pytest

from mlpnet.core.errors import ValidationError
from mlpnet.data import registry
from mlpnet.persistence import load_model
from mlpnet.training import pipelines


def _config(tmp_path, name="run", **train):
    config = pipelines.load_preset("parity3")
    config["train"].update({"epochs": 60, "report_every": 20, "run_dir": str(tmp_path / name)})
    config["train"].update(train)
    return config


def test_parity3_preset_matches_reference_setup():
    config = pipelines.load_preset("parity3")
    assert config["model"] == {
        "input_size": 3,
        "hidden1_size": 8,
        "hidden2_size": 6,
        "output_size": 1,
        "learning_rate": 0.7,
        "momentum": 0.9,
    }
    assert config["train"]["epochs"] == 8000
    assert config["train"]["report_every"] == 500


def test_load_preset_returns_a_copy():
    first = pipelines.load_preset("parity3")
    first["model"]["hidden1_size"] = 99
    assert pipelines.load_preset("parity3")["model"]["hidden1_size"] == 8


def test_unknown_preset():
    with pytest.raises(KeyError):
        pipelines.load_preset("nope")


def test_file_preset_is_available():
    config = pipelines.presets()["parity3-quick"]
    assert config["train"]["epochs"] == 200


def test_merge_config():
    merged = pipelines.merge_config({"a": {"b": 1, "c": 2}, "d": 3}, {"a": {"c": 5}, "e": 6})
    assert merged == {"a": {"b": 1, "c": 5}, "d": 3, "e": 6}


def test_yaml_config_file(tmp_path):
    pytest.importorskip("yaml")
    path = tmp_path / "cfg.yaml"
    path.write_text("train:\n  epochs: 12\n")
    assert pipelines.load_config_file(path) == {"train": {"epochs": 12}}


def test_run_pipeline_artifacts(tmp_path, capsys):
    result = pipelines.run_pipeline(_config(tmp_path))
    run_dir = tmp_path / "run"
    assert result.epochs == 60
    assert Path(result.metrics_path) == run_dir / "metrics.jsonl"
    for name in ("metrics.csv", "summary.json", "manifest.json", "config.json", "model.json"):
        assert (run_dir / name).exists(), name

    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert [r["epoch"] for r in records] == [20, 40, 60]
    assert records[-1]["loss"] == pytest.approx(result.final_loss)

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["dataset"]["name"] == "parity3"
    assert manifest["network"]["layer_sizes"] == [3, 8, 6, 1]
    assert manifest["training"]["epochs_completed"] == result.epochs

    network = load_model(result.model_path)
    assert network.topology.layer_sizes == (3, 8, 6, 1)
    assert "=== mlpnet run ===" in capsys.readouterr().out


def test_run_pipeline_is_deterministic(tmp_path):
    first = pipelines.run_pipeline(_config(tmp_path, "one", seed=9))
    second = pipelines.run_pipeline(_config(tmp_path, "two", seed=9))
    assert Path(first.metrics_path).read_text() == Path(second.metrics_path).read_text()
    assert Path(first.model_path).read_text() == Path(second.model_path).read_text()


def test_run_pipeline_rejects_mismatched_model(tmp_path):
    config = _config(tmp_path)
    config["model"]["input_size"] = 4
    with pytest.raises(ValidationError):
        pipelines.run_pipeline(config)


@pytest.mark.parametrize(
    "key, value",
    [
        ("hidden1_size", 2.5),
        ("hidden2_size", "six"),
        ("learning_rate", "fast"),
        ("momentum", None),
    ],
)
def test_build_network_leaves_validation_to_the_engine(key, value):
    model_cfg = dict(pipelines.load_preset("parity3")["model"])
    model_cfg[key] = value
    with pytest.raises(ValidationError, match=key):
        pipelines.build_network(model_cfg, registry.get("parity3"), seed=0)


def test_run_pipeline_on_csv_dataset(tmp_path):
    data = tmp_path / "and.csv"
    data.write_text("0,0,0\n0,1,0\n1,0,0\n1,1,1\n")
    config = {
        "data": {"name": "csv", "options": {"path": str(data), "n_inputs": 2}},
        "model": {"hidden1_size": 4, "hidden2_size": 3, "learning_rate": 0.5, "momentum": 0.5},
        "train": {"epochs": 30, "report_every": 10, "seed": 0, "run_dir": str(tmp_path / "csv")},
    }
    result = pipelines.run_pipeline(config)
    network = load_model(result.model_path)
    assert network.topology.layer_sizes == (2, 4, 3, 1)
