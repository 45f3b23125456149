from __future__ import annotations

import os
from dataclasses import dataclass

from .errors import ConfigError
from .helpers import _validate_identifier

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///:memory:"
DEFAULT_TABLE_NAME = "dvtx_records"

# ExecuteTransaction accepts at most 1000 requests per call.
DEFAULT_MAX_BATCH_SIZE = 1000


@dataclass
class BatchConfig:
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not isinstance(self.max_batch_size, int) or self.max_batch_size <= 0:
            raise ConfigError("max_batch_size must be a positive integer (> 0)")


@dataclass
class PlatformConfig:
    database_url: str = DEFAULT_DATABASE_URL
    table_name: str = DEFAULT_TABLE_NAME
    echo: bool = False

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not self.database_url:
            raise ConfigError("database_url cannot be empty")
        try:
            _validate_identifier(self.table_name, "table_name")
        except (TypeError, ValueError) as exc:
            raise ConfigError(str(exc)) from exc

    @classmethod
    def from_env(cls) -> "PlatformConfig":
        """
        Build a config from DVTX_DATABASE_URL / DVTX_TABLE_NAME / DVTX_ECHO.

        Unset variables fall back to an in-memory SQLite database.
        """
        return cls(
            database_url=os.environ.get("DVTX_DATABASE_URL", DEFAULT_DATABASE_URL),
            table_name=os.environ.get("DVTX_TABLE_NAME", DEFAULT_TABLE_NAME),
            echo=os.environ.get("DVTX_ECHO", "").lower() in ("1", "true", "yes"),
        )
