from __future__ import annotations

from pathlib import Path

import pytest

from shipkit import config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch):
    """Point the config layer at an empty file so a developer's own settings never leak in."""
    monkeypatch.setenv(config.CONFIG_ENV_VAR, str(tmp_path / "shipkit-config.json"))
    for key in (
        "BUMP_REPEAT_IDENTIFIER",
        "BUMP_EXHAUSTED_IDENTIFIER",
        "BUMP_CHANGELOG_FILE",
        "LAUNCHGEN_DEFAULT_PORT",
        "LAUNCHGEN_DEFAULT_CONSOLE",
        "DRY_RUN",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    config.reload_config()
    yield tmp_path / "shipkit-config.json"
    config.reload_config()
