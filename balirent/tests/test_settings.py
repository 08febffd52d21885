"""Tests for environment-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from balirent.exceptions import ConfigError
from balirent.settings import DEFAULT_USER_AGENT, Settings


def test_defaults_without_environment():
    settings = Settings.from_env({})

    assert settings.log_level == "INFO"
    assert settings.store_path == Path("output/listings.json")
    assert settings.idr_per_usd == 15000
    assert settings.source_delay == 2.0
    assert settings.user_agent == DEFAULT_USER_AGENT


def test_environment_overrides():
    settings = Settings.from_env(
        {
            "LOG_LEVEL": "debug",
            "BALIRENT_STORE_PATH": "/tmp/bali.json",
            "BALIRENT_IDR_PER_USD": "16250",
            "BALIRENT_SOURCE_DELAY": "0",
            "BALIRENT_FETCH_TIMEOUT": "30",
        }
    )

    assert settings.log_level == "DEBUG"
    assert settings.store_path == Path("/tmp/bali.json")
    assert settings.idr_per_usd == 16250.0
    assert settings.source_delay == 0.0
    assert settings.fetch_timeout == 30.0


@pytest.mark.parametrize(
    "env",
    [
        {"BALIRENT_IDR_PER_USD": "lots"},
        {"BALIRENT_IDR_PER_USD": "0"},
        {"BALIRENT_FETCH_TIMEOUT": "-1"},
        {"BALIRENT_SOURCE_DELAY": "-2"},
    ],
)
def test_invalid_values_raise_config_error(env):
    with pytest.raises(ConfigError):
        Settings.from_env(env)


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("BALIRENT_SOURCE_DELAY", "0.5")
    assert Settings.from_env().source_delay == 0.5
