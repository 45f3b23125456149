from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence, runtime_checkable
from uuid import UUID

from ..batch.models import BatchResult, Operation, Record
from ..query import QueryExpression


@runtime_checkable
class DataPlatform(Protocol):
    """
    Protocol for the remote record platform.

    This is the only external boundary of dvtx. BatchExecutor uses
    execute_batch(); Repository uses the single-record methods and query().

    Implementations own transport, authentication, and thread/task safety.
    They must return batch results in submission order.
    """

    async def create(self, logical_name: str, attributes: Mapping[str, Any]) -> UUID:
        """Create one record and return its platform-assigned id."""
        ...

    async def retrieve(
        self,
        logical_name: str,
        record_id: UUID,
        columns: Optional[Sequence[str]] = None,
    ) -> Record:
        """Retrieve one record. Raises NotFoundError if it does not exist."""
        ...

    async def update(
        self,
        logical_name: str,
        record_id: UUID,
        attributes: Mapping[str, Any],
    ) -> None:
        """Set the given attributes on one record. Raises NotFoundError if missing."""
        ...

    async def delete(self, logical_name: str, record_id: UUID) -> None:
        """Delete one record. Raises NotFoundError if missing."""
        ...

    async def execute_batch(self, operations: Sequence[Operation]) -> BatchResult:
        """Execute all operations atomically; results are in submission order."""
        ...

    async def query(self, query: QueryExpression) -> list[Record]:
        """Return the records matching the query."""
        ...
