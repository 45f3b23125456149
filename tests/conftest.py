from __future__ import annotations

import os
import re
import uuid
from collections.abc import Callable, Iterator
from typing import Sequence
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.engine import Engine

from dvtx.batch.executor import BatchExecutor
from dvtx.batch.models import Operation, OperationResult, OperationType
from dvtx.config import DEFAULT_DATABASE_URL, PlatformConfig
from dvtx.platform.base import DataPlatform
from dvtx.platform.sql import SqlPlatform, make_engine


@pytest.fixture(scope="session")
def db_url() -> str:
    """
    Database URL for SQL-backed tests.

    Set DVTX_TEST_DB_URL to run against a real server; defaults to an
    in-memory SQLite database.
    """
    return os.environ.get("DVTX_TEST_DB_URL", DEFAULT_DATABASE_URL)


@pytest.fixture
def engine(db_url: str) -> Iterator[Engine]:
    eng = make_engine(PlatformConfig(database_url=db_url))
    try:
        with eng.connect() as conn:
            conn.exec_driver_sql("SELECT 1")
    except Exception as exc:  # pragma: no cover
        pytest.fail(
            "Test database is not reachable.\n"
            f"- DVTX_TEST_DB_URL={db_url!r}\n"
            f"- Underlying error: {exc}",
            pytrace=False,
        )

    yield eng
    eng.dispose()


def _sanitize_table_name(name: str) -> str:
    name = re.sub(r"[^a-zA-Z0-9_]+", "_", name).strip("_").lower()
    if not name:
        name = "t"
    return name[:48]


def _unique_table(request: pytest.FixtureRequest) -> str:
    return f"{_sanitize_table_name(f't_{request.node.name}')}_{uuid.uuid4().hex[:10]}"


@pytest.fixture
def table_factory(engine: Engine, request: pytest.FixtureRequest) -> Iterator[Callable[[str], str]]:
    """
    Factory fixture creating per-test tables.

    Usage:
        table = table_factory("id INTEGER PRIMARY KEY, value INTEGER NOT NULL")
    """
    created: list[str] = []

    def _create(schema_sql: str) -> str:
        table = _unique_table(request)
        with engine.begin() as conn:
            conn.exec_driver_sql(f"DROP TABLE IF EXISTS {table}")
            conn.exec_driver_sql(f"CREATE TABLE {table} ({schema_sql})")
        created.append(table)
        return table

    yield _create

    with engine.begin() as conn:
        for table in created:
            conn.exec_driver_sql(f"DROP TABLE IF EXISTS {table}")


@pytest.fixture
def fresh_table(table_factory: Callable[[str], str]) -> str:
    return table_factory(
        "id INTEGER NOT NULL PRIMARY KEY, value INTEGER NOT NULL DEFAULT 0, name VARCHAR(255) NULL"
    )


@pytest.fixture
def platform(engine: Engine, request: pytest.FixtureRequest) -> Iterator[SqlPlatform]:
    """SqlPlatform over a per-test records table."""
    p = SqlPlatform(engine, table_name=_unique_table(request))
    p.create_schema()
    yield p
    p.drop_schema()


@pytest.fixture
def sql_executor(platform: SqlPlatform) -> BatchExecutor:
    return BatchExecutor(platform)


def echo_results(operations: Sequence[Operation]) -> list[OperationResult]:
    """Platform stand-in: one well-formed result per operation, fresh ids for creates."""
    results = []
    for op in operations:
        if op.op_type == OperationType.CREATE:
            results.append(OperationResult.created(uuid.uuid4()))
        elif op.op_type == OperationType.UPDATE:
            results.append(OperationResult.updated())
        else:
            results.append(OperationResult.deleted())
    return results


@pytest.fixture
def mock_platform() -> AsyncMock:
    """AsyncMock DataPlatform whose execute_batch answers every operation successfully."""
    mock = AsyncMock(spec=DataPlatform)
    mock.execute_batch.side_effect = echo_results
    return mock


@pytest.fixture
def executor(mock_platform: AsyncMock) -> BatchExecutor:
    return BatchExecutor(mock_platform)
