from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Iterable, Optional

from ..config import BatchConfig
from ..errors import InvalidArgumentError, RemoteOperationFailed
from .metrics import observe_batch
from .models import BatchResult, Operation, OperationResult, Record, RecordRef

if TYPE_CHECKING:
    from ..platform.base import DataPlatform

logger = logging.getLogger(__name__)


def _materialize(items: Optional[Iterable], what: str) -> list:
    if items is None:
        raise InvalidArgumentError(f"At least one {what} is required")
    if isinstance(items, (str, bytes)):
        raise InvalidArgumentError(f"{what} collection must not be a string")
    materialized = list(items)
    if not materialized:
        raise InvalidArgumentError(f"At least one {what} is required")
    return materialized


class BatchExecutor:
    """
    Submits an ordered set of create/update/delete operations as one atomic
    platform transaction.

    Rules:
    - Exactly one remote call per batch
    - All validation happens before that call (no partial submission)
    - Results are returned in submission order, one per operation
    - Platform errors propagate unchanged; nothing is retried

    The executor holds no per-call state. Concurrent calls against the same
    platform are allowed; their relative ordering is up to the platform.

    Usage:
        executor = BatchExecutor(platform)
        results = await executor.execute_batch([
            Operation.create(Record("account", {"name": "Contoso"})),
            Operation.delete(RecordRef("contact", contact_id)),
        ])
    """

    def __init__(self, platform: "DataPlatform", config: Optional[BatchConfig] = None) -> None:
        if platform is None:
            raise InvalidArgumentError("platform is required")
        self.platform = platform
        self.config = config or BatchConfig()

    async def execute_batch(self, operations: Optional[Iterable[Operation]]) -> BatchResult:
        """
        Execute all operations in a single atomic transaction.

        Args:
            operations: Non-empty ordered operations, no None elements

        Returns:
            One OperationResult per operation, in the same order

        Raises:
            InvalidArgumentError: If the batch is empty, contains None, exceeds
                max_batch_size, or an operation breaks its structural rules
            RemoteOperationFailed: If the platform returns a result list that
                does not line up with the batch
            Any exception raised by the platform is propagated unchanged
        """
        batch = _materialize(operations, "request")

        for index, op in enumerate(batch):
            if op is None:
                raise InvalidArgumentError(f"Request cannot be null (index {index})")
            if not isinstance(op, Operation):
                raise InvalidArgumentError(
                    f"Request at index {index} must be an Operation, got {type(op).__name__}"
                )
            op.check()

        if len(batch) > self.config.max_batch_size:
            raise InvalidArgumentError(
                f"Batch of {len(batch)} operations exceeds max_batch_size={self.config.max_batch_size}"
            )

        start_time = time.monotonic()
        status = "success"
        try:
            results = await self.platform.execute_batch(batch)
            results = list(results)
            if len(results) != len(batch):
                raise RemoteOperationFailed(
                    f"Platform returned {len(results)} results for {len(batch)} operations"
                )
            for index, (op, result) in enumerate(zip(batch, results)):
                if not isinstance(result, OperationResult):
                    raise RemoteOperationFailed(
                        f"Result {index} is a {type(result).__name__}, not an OperationResult",
                        operation_index=index,
                    )
                if result.op_type != op.op_type:
                    raise RemoteOperationFailed(
                        f"Result {index} is a {result.op_type.value} result "
                        f"for a {op.op_type.value} operation",
                        operation_index=index,
                    )
        except Exception:
            status = "error"
            logger.warning("Atomic batch of %d operations failed", len(batch))
            raise
        finally:
            observe_batch(batch, status, time.monotonic() - start_time)

        logger.info("Atomic batch of %d operations committed", len(batch))
        return results

    async def create_many(self, records: Optional[Iterable[Record]]) -> BatchResult:
        """Create all records in one atomic batch."""
        items = _materialize(records, "entity")
        ops = []
        for record in items:
            if record is None:
                raise InvalidArgumentError("Entity cannot be null")
            ops.append(Operation.create(record))
        return await self.execute_batch(ops)

    async def update_many(self, records: Optional[Iterable[Record]]) -> BatchResult:
        """Update all records in one atomic batch. Every record must carry an id."""
        items = _materialize(records, "entity")
        ops = []
        for record in items:
            if record is None:
                raise InvalidArgumentError("Entity cannot be null")
            ops.append(Operation.update(record))
        return await self.execute_batch(ops)

    async def delete_many(self, refs: Optional[Iterable[RecordRef]]) -> BatchResult:
        """Delete all referenced records in one atomic batch."""
        items = _materialize(refs, "entity reference")
        ops = []
        for ref in items:
            if ref is None:
                raise InvalidArgumentError("Entity reference cannot be null")
            ops.append(Operation.delete(ref))
        return await self.execute_batch(ops)

