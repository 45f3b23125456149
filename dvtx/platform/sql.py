from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from contextlib import nullcontext
from datetime import datetime, timezone
from typing import Any, ContextManager, Mapping, Optional, Sequence
from uuid import UUID

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, delete, insert, select, update
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from ..batch.models import BatchResult, Operation, OperationResult, OperationType, Record
from ..config import DEFAULT_TABLE_NAME, PlatformConfig
from ..errors import InvalidArgumentError, NotFoundError, RemoteOperationFailed
from ..helpers import _validate_logical_name
from ..query import QueryExpression
from .codec import decode_attributes, encode_attributes
from .session import DbSession

logger = logging.getLogger(__name__)

# Stamped by the platform on every write; caller-supplied values are overwritten.
CREATED_ON = "createdon"
MODIFIED_ON = "modifiedon"


def make_engine(config: PlatformConfig) -> Engine:
    """
    Create an Engine for the configured URL.

    In-memory SQLite gets a single shared connection so that every worker
    thread sees the same database.
    """
    url = make_url(config.database_url)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        return create_engine(
            url,
            echo=config.echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=config.echo, pool_pre_ping=True)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SqlPlatform:
    """
    DataPlatform implementation backed by a SQLAlchemy Engine.

    All records live in one table keyed by (logical_name, id) with the
    attribute bag stored as encoded JSON. Each execute_batch() call runs
    inside one DbSession, so a failing operation rolls back the whole batch.

    Blocking database work runs in a worker thread (asyncio.to_thread), so
    awaiting any method never blocks the event loop. When the engine hands
    every session the same DBAPI connection (StaticPool, used for in-memory
    SQLite), sessions are serialized with a lock so each batch commits or rolls
    back on its own.

    Usage:
        platform = SqlPlatform(engine)
        platform.create_schema()
        executor = BatchExecutor(platform)
    """

    def __init__(self, engine: Engine, table_name: str = DEFAULT_TABLE_NAME) -> None:
        self.engine = engine
        self.metadata = MetaData()
        self.table = Table(
            table_name,
            self.metadata,
            Column("logical_name", String(64), primary_key=True),
            Column("id", String(36), primary_key=True),
            Column("attributes", Text, nullable=False),
        )
        self._lock = threading.Lock()
        self._shared_connection = isinstance(engine.pool, StaticPool)

    @classmethod
    def from_config(cls, config: PlatformConfig) -> "SqlPlatform":
        return cls(make_engine(config), table_name=config.table_name)

    def create_schema(self) -> None:
        self.metadata.create_all(self.engine)

    def drop_schema(self) -> None:
        self.metadata.drop_all(self.engine)

    # --- synchronous primitives (run against an active DbSession) ---

    def _load(self, session: DbSession, logical_name: str, record_id: UUID) -> Optional[dict[str, Any]]:
        stmt = select(self.table.c.attributes).where(
            self.table.c.logical_name == logical_name,
            self.table.c.id == str(record_id),
        )
        row = session.fetch_one(stmt)
        if row is None:
            return None
        return decode_attributes(row["attributes"])

    def _insert(self, session: DbSession, logical_name: str, attributes: Mapping[str, Any]) -> UUID:
        _validate_logical_name(logical_name)
        record_id = uuid.uuid4()
        now = _now()
        stored = dict(attributes)
        stored[CREATED_ON] = now
        stored[MODIFIED_ON] = now
        session.execute(
            insert(self.table).values(
                logical_name=logical_name,
                id=str(record_id),
                attributes=encode_attributes(stored),
            )
        )
        return record_id

    def _update(self, session: DbSession, logical_name: str, record_id: UUID, attributes: Mapping[str, Any]) -> None:
        current = self._load(session, logical_name, record_id)
        if current is None:
            raise NotFoundError(logical_name, record_id)
        created_on = current.get(CREATED_ON)
        current.update(attributes)
        current[CREATED_ON] = created_on
        current[MODIFIED_ON] = _now()
        session.execute(
            update(self.table)
            .where(
                self.table.c.logical_name == logical_name,
                self.table.c.id == str(record_id),
            )
            .values(attributes=encode_attributes(current))
        )

    def _delete(self, session: DbSession, logical_name: str, record_id: UUID) -> None:
        rc = session.execute(
            delete(self.table).where(
                self.table.c.logical_name == logical_name,
                self.table.c.id == str(record_id),
            )
        )
        if rc == 0:
            raise NotFoundError(logical_name, record_id)

    def _apply(self, session: DbSession, op: Operation) -> OperationResult:
        target = op.target
        if op.op_type == OperationType.CREATE:
            return OperationResult.created(self._insert(session, target.logical_name, target.attributes))
        if op.op_type == OperationType.UPDATE:
            self._update(session, target.logical_name, target.id, target.attributes)
            return OperationResult.updated()
        if op.op_type == OperationType.DELETE:
            self._delete(session, target.logical_name, target.id)
            return OperationResult.deleted()
        raise InvalidArgumentError(f"Unsupported operation type: {op.op_type}")

    # --- blocking entry points ---

    def _guard(self) -> ContextManager:
        """Lock held around a DbSession when all sessions share one connection."""
        return self._lock if self._shared_connection else nullcontext()

    def _create_sync(self, logical_name: str, attributes: Mapping[str, Any]) -> UUID:
        try:
            with self._guard(), DbSession(self.engine) as session:
                return self._insert(session, logical_name, attributes)
        except SQLAlchemyError as exc:
            raise RemoteOperationFailed(f"create {logical_name} failed: {exc}") from exc

    def _retrieve_sync(self, logical_name: str, record_id: UUID, columns: Optional[Sequence[str]]) -> Record:
        try:
            with self._guard(), DbSession(self.engine) as session:
                attributes = self._load(session, logical_name, record_id)
        except SQLAlchemyError as exc:
            raise RemoteOperationFailed(f"retrieve {logical_name} failed: {exc}") from exc
        if attributes is None:
            raise NotFoundError(logical_name, record_id)
        if columns is not None:
            attributes = {k: v for k, v in attributes.items() if k in columns}
        return Record(logical_name, attributes, record_id)

    def _update_sync(self, logical_name: str, record_id: UUID, attributes: Mapping[str, Any]) -> None:
        try:
            with self._guard(), DbSession(self.engine) as session:
                self._update(session, logical_name, record_id, attributes)
        except SQLAlchemyError as exc:
            raise RemoteOperationFailed(f"update {logical_name} failed: {exc}") from exc

    def _delete_sync(self, logical_name: str, record_id: UUID) -> None:
        try:
            with self._guard(), DbSession(self.engine) as session:
                self._delete(session, logical_name, record_id)
        except SQLAlchemyError as exc:
            raise RemoteOperationFailed(f"delete {logical_name} failed: {exc}") from exc

    def _execute_batch_sync(self, operations: Sequence[Operation]) -> BatchResult:
        results: BatchResult = []
        try:
            with self._guard(), DbSession(self.engine) as session:
                for index, op in enumerate(operations):
                    try:
                        results.append(self._apply(session, op))
                    except (NotFoundError, InvalidArgumentError, SQLAlchemyError, TypeError, ValueError) as exc:
                        # Raising inside the session rolls back every earlier operation.
                        raise RemoteOperationFailed(
                            f"Operation {index} ({op.op_type.value} {op.logical_name}) failed: {exc}",
                            operation_index=index,
                        ) from exc
        except SQLAlchemyError as exc:
            # connect, begin or commit failed; nothing was committed
            raise RemoteOperationFailed(f"batch of {len(operations)} operations failed: {exc}") from exc
        logger.debug("Committed batch of %d operations", len(results))
        return results

    def _query_sync(self, query: QueryExpression) -> list[Record]:
        stmt = select(self.table.c.id, self.table.c.attributes).where(
            self.table.c.logical_name == query.logical_name
        )
        try:
            with self._guard(), DbSession(self.engine) as session:
                rows = session.fetch_all(stmt)
        except SQLAlchemyError as exc:
            raise RemoteOperationFailed(f"query {query.logical_name} failed: {exc}") from exc
        records = [
            Record(query.logical_name, decode_attributes(row["attributes"]), UUID(row["id"]))
            for row in rows
        ]
        return query.apply(records)

    # --- DataPlatform ---

    async def create(self, logical_name: str, attributes: Mapping[str, Any]) -> UUID:
        return await asyncio.to_thread(self._create_sync, logical_name, dict(attributes))

    async def retrieve(
        self,
        logical_name: str,
        record_id: UUID,
        columns: Optional[Sequence[str]] = None,
    ) -> Record:
        return await asyncio.to_thread(self._retrieve_sync, logical_name, record_id, columns)

    async def update(self, logical_name: str, record_id: UUID, attributes: Mapping[str, Any]) -> None:
        await asyncio.to_thread(self._update_sync, logical_name, record_id, dict(attributes))

    async def delete(self, logical_name: str, record_id: UUID) -> None:
        await asyncio.to_thread(self._delete_sync, logical_name, record_id)

    async def execute_batch(self, operations: Sequence[Operation]) -> BatchResult:
        return await asyncio.to_thread(self._execute_batch_sync, list(operations))

    async def query(self, query: QueryExpression) -> list[Record]:
        return await asyncio.to_thread(self._query_sync, query)
