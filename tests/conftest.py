"""Root conftest for all tests."""

import pytest

from capgains.system import config as config_module


@pytest.fixture(autouse=True)
def no_config_from_environment(monkeypatch):
    """Keep a developer's CAPGAINS_CONFIG from leaking into tests."""
    monkeypatch.delenv("CAPGAINS_CONFIG", raising=False)


@pytest.fixture(autouse=True)
def fresh_system_config(monkeypatch):
    """Start every test without a cached SystemConfig."""
    monkeypatch.setattr(config_module, "_system_config", None)
