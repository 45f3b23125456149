"""
Atomic multi-entity operations over typed entities.

TransactionalService turns typed entities into batch operations, submits
them through a BatchExecutor, and correlates results back to the caller's
objects by position.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence, Tuple, Union
from uuid import UUID

from .batch.executor import BatchExecutor
from .batch.models import Operation, Record, RecordRef
from .entities.account import Account
from .entities.base import Entity
from .entities.contact import Contact
from .errors import InvalidArgumentError, PartialCompletionError

logger = logging.getLogger(__name__)

RefLike = Union[RecordRef, Tuple[str, UUID]]


def _require_entities(entities: Optional[Sequence[Entity]], what: str = "entity") -> list[Entity]:
    if not entities:
        raise InvalidArgumentError(f"At least one {what} is required")
    items = list(entities)
    for entity in items:
        if entity is None:
            raise InvalidArgumentError(f"{what.capitalize()} cannot be null")
        if not isinstance(entity, Entity):
            raise InvalidArgumentError(
                f"{what.capitalize()} must be an Entity, got {type(entity).__name__}"
            )
    return items


def _as_ref(item: RefLike) -> RecordRef:
    if isinstance(item, RecordRef):
        return item
    if isinstance(item, Entity):
        return item.to_ref()
    if isinstance(item, tuple) and len(item) == 2:
        return RecordRef(item[0], item[1])
    raise InvalidArgumentError(f"Cannot use {item!r} as an entity reference")


class TransactionalService:
    """
    Multi-entity create/update/delete in single platform transactions.

    Each method validates every input before the first remote call and
    issues exactly one atomic batch, except create_related_group(), which
    issues two (see its docstring for the consistency gap between them).
    """

    def __init__(self, executor: BatchExecutor) -> None:
        if executor is None:
            raise InvalidArgumentError("executor is required")
        self.executor = executor

    async def create_multiple(self, *entities: Entity) -> dict[Entity, UUID]:
        """
        Create all entities in one transaction.

        Each entity's ``id`` is set to its new identifier. The returned dict is
        keyed by the entity objects themselves (identity, not value) and keeps
        the input order.
        """
        items = _require_entities(entities)
        records = [entity.to_record() for entity in items]

        results = await self.executor.create_many(records)

        created: dict[Entity, UUID] = {}
        for entity, result in zip(items, results):
            entity.id = result.created_id
            created[entity] = entity.id
        return created

    async def update_multiple(self, *entities: Entity) -> None:
        """Update all entities in one transaction. Every entity must carry an id."""
        items = _require_entities(entities)
        await self.executor.update_many([entity.to_record() for entity in items])

    async def delete_multiple(self, *refs: RefLike) -> None:
        """
        Delete all referenced records in one transaction.

        Accepts RecordRefs, (logical_name, id) tuples, or entities with an id.
        """
        if not refs:
            raise InvalidArgumentError("At least one entity reference is required")
        records = []
        for item in refs:
            if item is None:
                raise InvalidArgumentError("Entity reference cannot be null")
            records.append(_as_ref(item))
        await self.executor.delete_many(records)

    async def create_related_group(
        self,
        primary: Entity,
        dependents: Iterable[Entity],
        link_field: str,
    ) -> tuple[UUID, list[UUID]]:
        """
        Create a primary record and dependents that reference it.

        Phase 1 creates the primary followed by every dependent in one atomic
        batch. Phase 2 sets each dependent's ``link_field`` lookup to the
        primary in a second atomic batch.

        The two phases are NOT atomic together. If phase 2 fails, the records
        from phase 1 stay created and unlinked; this raises
        PartialCompletionError carrying their references so the caller can
        compensate. A phase 1 failure propagates unchanged and leaves nothing
        behind.

        Returns:
            (primary_id, dependent_ids) with dependent_ids in input order

        Raises:
            InvalidArgumentError: Before any remote call, for a missing primary,
                no dependents, a null dependent, or a failed required-field rule
            PartialCompletionError: If phase 2 fails
        """
        if primary is None:
            raise InvalidArgumentError("Primary entity cannot be null")
        if not isinstance(primary, Entity):
            raise InvalidArgumentError(
                f"Primary must be an Entity, got {type(primary).__name__}"
            )
        primary.check_minimal()

        items = _require_entities(list(dependents) if dependents is not None else None, "dependent")
        wire_attributes = []
        for dependent in items:
            dependent.check_minimal()
            wire_attributes.append(type(dependent).lookup_attribute(link_field))

        # Phase 1: create everything.
        records = [primary.to_record()] + [d.to_record() for d in items]
        results = await self.executor.create_many(records)

        primary_id = results[0].created_id
        dependent_ids = [result.created_id for result in results[1:]]
        primary.id = primary_id
        for dependent, dependent_id in zip(items, dependent_ids):
            dependent.id = dependent_id
        logger.info(
            "Created %s %s with %d dependents; linking",
            primary.logical_name, primary_id, len(dependent_ids),
        )

        # Phase 2: link dependents to the primary.
        primary_ref = RecordRef(primary.logical_name, primary_id)
        link_ops = [
            Operation.update(Record(dependent.logical_name, {wire: primary_ref}, dependent.id))
            for dependent, wire in zip(items, wire_attributes)
        ]
        try:
            await self.executor.execute_batch(link_ops)
        except Exception as exc:
            dependent_refs = [dependent.to_ref() for dependent in items]
            logger.error(
                "Linking dependents to %s %s failed; created records left unlinked: %s",
                primary.logical_name,
                primary_id,
                ", ".join(str(ref.id) for ref in dependent_refs),
            )
            raise PartialCompletionError(
                f"Created {primary.logical_name} {primary_id} and {len(dependent_refs)} "
                f"dependents but failed to link them: {exc}",
                primary_ref=primary_ref,
                dependent_refs=dependent_refs,
                failed_step="link",
            ) from exc

        for dependent in items:
            setattr(dependent, link_field, primary_id)

        return primary_id, dependent_ids

    async def create_account_with_contacts(
        self,
        account: Account,
        *contacts: Contact,
    ) -> tuple[UUID, list[UUID]]:
        """Create an account and its contacts, then set each contact's parent customer."""
        if account is None:
            raise InvalidArgumentError("Account cannot be null")
        if not contacts:
            raise InvalidArgumentError("At least one contact is required")
        return await self.create_related_group(account, contacts, link_field="parent_customer_id")
