"""Run manifests: what was trained, on which data, with which outcome."""

from __future__ import annotations

import json
import platform
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping

import numpy as np
import pandas as pd

MANIFEST_VERSION = 1


def git_revision(cwd: str | Path | None = None) -> str:
    """Commit hash of the checkout at ``cwd`` or ``"unknown"`` outside git."""

    try:
        proc = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return "unknown"
    return proc.stdout.strip() or "unknown"


def environment() -> dict:
    return {
        "python": platform.python_version(),
        "platform": platform.platform(),
        "numpy": np.__version__,
        "pandas": pd.__version__,
    }


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    dataset_provenance: Mapping[str, object],
    network: Mapping[str, object] | None = None,
    training: Mapping[str, object] | None = None,
) -> str:
    """Write ``manifest.json`` for a run and return its path.

    ``network`` is the engine description (layer sizes, coefficients,
    parameter count) and ``training`` the outcome of the run, such as
    completed epochs and final loss.
    """

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "version": MANIFEST_VERSION,
        "created": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "git_sha": git_revision(path.parent),
        "config": dict(config),
        "dataset": dict(dataset_provenance),
        "network": dict(network or {}),
        "training": dict(training or {}),
        "environment": environment(),
    }
    path.write_text(json.dumps(manifest, indent=2, sort_keys=True))
    return str(path)


__all__ = ["MANIFEST_VERSION", "environment", "git_revision", "write_manifest"]
