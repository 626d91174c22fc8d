from __future__ import annotations

import pytest

from runcmd.config import CONCURRENCY_ENV_VAR, CONFIG_ENV_VAR


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep user configuration and environment out of every test."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.delenv(CONCURRENCY_ENV_VAR, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    yield
