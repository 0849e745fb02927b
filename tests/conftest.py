# Shared fixtures: isolated config dir and fresh settings per test.
# Created: 2026-10-07

import pytest

from clientlib import container
from clientlib.config import get_settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("CLIENTLIB_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.delenv("CLIENTLIB_DEBUG", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    container.reset()


@pytest.fixture
def debug_build(monkeypatch):
    monkeypatch.setenv("CLIENTLIB_DEBUG", "true")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
