import json
import logging
from pathlib import Path

from cli.main import log_level, main, parse_args


def _last_json(text: str) -> dict:
    return json.loads(text.strip().splitlines()[-1])


def _train(tmp_path, capsys, *extra):
    run_dir = tmp_path / "run"
    code = main(
        [
            "--log-level",
            "WARNING",
            "train",
            "--preset",
            "parity3",
            "--epochs",
            "40",
            "--report-every",
            "10",
            "--seed",
            "2",
            "--run-dir",
            str(run_dir),
            *extra,
        ]
    )
    assert code == 0
    return run_dir, _last_json(capsys.readouterr().out)


def test_cli_train_writes_artifacts(tmp_path, capsys):
    run_dir, payload = _train(tmp_path, capsys)
    assert payload["epochs"] == 40
    assert Path(payload["model"]) == run_dir / "model.json"
    assert (run_dir / "metrics.jsonl").exists()
    assert (run_dir / "manifest.json").exists()
    assert (run_dir / "summary.json").exists()
    epochs = [
        json.loads(line)["epoch"]
        for line in (run_dir / "metrics.jsonl").read_text().splitlines()
    ]
    assert epochs == [10, 20, 30, 40]


def test_cli_predict_and_inspect(tmp_path, capsys):
    run_dir, _ = _train(tmp_path, capsys)
    model = str(run_dir / "model.json")

    assert main(["predict", model, "0", "0", "1"]) == 0
    prediction = _last_json(capsys.readouterr().out)
    assert len(prediction["outputs"]) == 1
    assert prediction["classes"] == [int(prediction["outputs"][0] > 0.5)]
    assert len(prediction["activations"]["hidden1"]) == 8
    assert len(prediction["activations"]["hidden2"]) == 6

    assert main(["inspect", model]) == 0
    info = _last_json(capsys.readouterr().out)
    assert info["layer_sizes"] == [3, 8, 6, 1]
    assert info["weight_shapes"] == [[3, 8], [8, 6], [6, 1]]
    assert info["bias_lengths"] == [8, 6, 1]


def test_cli_predict_reports_input_errors(tmp_path, capsys):
    run_dir, _ = _train(tmp_path, capsys)
    code = main(["predict", str(run_dir / "model.json"), "1", "0"])
    assert code == 2
    assert "error:" in capsys.readouterr().err


def test_cli_predict_missing_model(tmp_path, capsys):
    code = main(["predict", str(tmp_path / "nope.json"), "1", "0", "1"])
    assert code == 2
    assert "error:" in capsys.readouterr().err


def test_cli_config_override_and_dump(tmp_path, capsys):
    override = tmp_path / "override.json"
    override.write_text(json.dumps({"model": {"hidden1_size": 5}, "train": {"save_model": False}}))
    dumped = tmp_path / "resolved.json"
    _, payload = _train(tmp_path, capsys, "--config", str(override), "--dump-config", str(dumped))
    config = json.loads(dumped.read_text())
    assert config["model"]["hidden1_size"] == 5
    assert config["model"]["hidden2_size"] == 6
    assert config["train"]["epochs"] == 40
    assert "model" not in payload


def test_cli_list_presets(capsys):
    assert main(["train", "--list-presets"]) == 0
    names = capsys.readouterr().out.split()
    assert "parity3" in names
    assert "parity3-quick" in names


def test_cli_verbosity_flags():
    assert log_level(parse_args(["train", "--list-presets"])) == logging.WARNING
    assert log_level(parse_args(["-v", "train", "--list-presets"])) == logging.INFO
    assert log_level(parse_args(["--verbose", "inspect", "m.json"])) == logging.INFO
    assert log_level(parse_args(["-v", "--log-level", "ERROR", "inspect", "m.json"])) == logging.ERROR


def test_cli_verbose_train_lists_presets(capsys):
    assert main(["-v", "train", "--list-presets"]) == 0
    assert "parity3" in capsys.readouterr().out.split()


def test_cli_rejects_non_integer_layer_size(tmp_path, capsys):
    override = tmp_path / "override.json"
    override.write_text(json.dumps({"model": {"hidden1_size": "wide"}}))
    code = main(
        ["train", "--config", str(override), "--epochs", "5", "--run-dir", str(tmp_path / "run")]
    )
    assert code == 2
    assert "hidden1_size" in capsys.readouterr().err
