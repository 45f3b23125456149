from __future__ import annotations

import pytest

from dvtx.config import (
    DEFAULT_DATABASE_URL,
    DEFAULT_MAX_BATCH_SIZE,
    DEFAULT_TABLE_NAME,
    BatchConfig,
    PlatformConfig,
)
from dvtx.errors import ConfigError


def test_batch_config_defaults() -> None:
    assert BatchConfig().max_batch_size == DEFAULT_MAX_BATCH_SIZE == 1000


@pytest.mark.parametrize("size", [0, -1, "10", 1.5])
def test_batch_config_rejects_invalid_size(size) -> None:
    with pytest.raises(ConfigError, match="max_batch_size"):
        BatchConfig(max_batch_size=size)


def test_platform_config_defaults() -> None:
    config = PlatformConfig()
    assert config.database_url == DEFAULT_DATABASE_URL
    assert config.table_name == DEFAULT_TABLE_NAME
    assert config.echo is False


@pytest.mark.parametrize("table_name", ["", "bad-name", "x; DROP TABLE y", "a" * 65])
def test_platform_config_rejects_unsafe_table_name(table_name) -> None:
    with pytest.raises(ConfigError):
        PlatformConfig(table_name=table_name)


def test_platform_config_requires_url() -> None:
    with pytest.raises(ConfigError, match="database_url"):
        PlatformConfig(database_url="")


def test_from_env(monkeypatch) -> None:
    monkeypatch.setenv("DVTX_DATABASE_URL", "sqlite+pysqlite:///records.db")
    monkeypatch.setenv("DVTX_TABLE_NAME", "records")
    monkeypatch.setenv("DVTX_ECHO", "true")

    config = PlatformConfig.from_env()

    assert config.database_url == "sqlite+pysqlite:///records.db"
    assert config.table_name == "records"
    assert config.echo is True


def test_from_env_falls_back_to_defaults(monkeypatch) -> None:
    for name in ("DVTX_DATABASE_URL", "DVTX_TABLE_NAME", "DVTX_ECHO"):
        monkeypatch.delenv(name, raising=False)

    config = PlatformConfig.from_env()

    assert config.database_url == DEFAULT_DATABASE_URL
    assert config.table_name == DEFAULT_TABLE_NAME
    assert config.echo is False
