from __future__ import annotations

from pathlib import Path

import pytest

from lakach.backend.handlers.config_handler import ConfigHandler


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"
    monkeypatch.setenv("LAKACH_CONFIG_DIR", config_dir.as_posix())
    monkeypatch.setenv("LAKACH_DATA_DIR", data_dir.as_posix())
    ConfigHandler.reset_instance()
    yield tmp_path
    ConfigHandler.reset_instance()
