from __future__ import annotations

import os
from pathlib import Path

import pytest

from snapfit import _config


def pytest_configure():
    os.environ.setdefault("PYVISTA_OFF_SCREEN", "true")


@pytest.fixture(autouse=True)
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep ~/.snapfit untouched by pointing the config layer at a temp dir."""
    config_dir = tmp_path / ".snapfit"
    monkeypatch.setattr(_config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(_config, "CONFIG_FILE", config_dir / "snapfit.cfg")
    return config_dir / "snapfit.cfg"
