"""Pytest configuration and shared fixtures."""

import pytest

from coldsync.core.config import get_settings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep tests independent of the host environment and of each other."""
    for var in (
        "COLDSYNC_LOG_LEVEL",
        "COLDSYNC_LOG_DIR",
        "COLDSYNC_LOG_TO_FILE",
        "COLDSYNC_LOG_DECISIONS",
        "COLDSYNC_APP_NAME",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("COLDSYNC_LOG_TO_CONSOLE", "false")
    monkeypatch.chdir(tmp_path)  # no stray .env file
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def unknown_inputs():
    """Values that are not roles, resources, routes or tabs."""
    return [None, "", "superuser", "owner", "Owner ", "DROP TABLE", 42, ["OWNER"]]
