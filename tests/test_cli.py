from pathlib import Path

import pytest

from flyweight.cli import load_config, main
from flyweight.config import Config, PoolSizeZeroError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "server_config.toml"
    path.write_text("[server]\npool_size = 3\n", encoding="utf-8")
    return path


def test_defaults_without_any_source(tmp_path):
    config = load_config([], {}, tmp_path / "missing.toml")
    assert config == Config(("127.0.0.1", 4221), 10, Path("."))


def test_cli_overrides_file_and_env(config_file):
    config = load_config(["-s", "7"], {"POOL_SIZE": "5"}, config_file)
    assert config.pool_size == 7


def test_file_overrides_env(config_file):
    config = load_config([], {"POOL_SIZE": "5"}, config_file)
    assert config.pool_size == 3


def test_env_used_when_nothing_else(tmp_path):
    config = load_config([], {"POOL_SIZE": "5", "ADDRESS": "0.0.0.0:8080"}, tmp_path / "missing.toml")
    assert config.pool_size == 5
    assert config.server_addr == ("0.0.0.0", 8080)


def test_load_config_propagates_errors(tmp_path):
    with pytest.raises(PoolSizeZeroError):
        load_config([], {"POOL_SIZE": "0"}, tmp_path / "missing.toml")


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("ADDRESS", "POOL_SIZE", "DATA_DIR"):
        monkeypatch.delenv(name, raising=False)


def test_main_unknown_flag_fails(clean_env, capsys):
    assert main(["--bogus"]) == 1
    assert "Unknown CLI argument flag: --bogus" in capsys.readouterr().err


def test_main_missing_value_fails(clean_env, capsys):
    assert main(["--pool-size"]) == 1
    assert "--pool-size" in capsys.readouterr().err