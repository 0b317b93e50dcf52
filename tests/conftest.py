"""Shared fixtures for sensorcfg-cli tests."""

import pytest
from click.testing import CliRunner

from sensorcfg_cli.utils import Config

DEFAULT_URL = "http://localhost:3000/sensor/config"
STATUS_URL = "http://localhost:3000/sensor/status"


@pytest.fixture(autouse=True)
def no_user_config(tmp_path, monkeypatch):
    """Keep a real ~/.sensorcfg.toml out of the tests."""
    missing = tmp_path / "absent.toml"
    monkeypatch.setattr("sensorcfg_cli.utils.DEFAULT_CONFIG_PATH", missing)
    return missing


@pytest.fixture
def cfg() -> Config:
    return Config()


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    """Write a TOML config file and return its path."""
    def _write(text: str):
        path = tmp_path / "sensorcfg.toml"
        path.write_text(text, encoding="utf-8")
        return path
    return _write
