from __future__ import annotations

import logging
from typing import Any, Generic, Optional, Sequence, Type, TypeVar
from uuid import UUID

from .batch.models import is_empty_id
from .entities.base import Entity
from .errors import InvalidArgumentError, NotFoundError
from .platform.base import DataPlatform
from .query import ConditionOperator, QueryExpression

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Entity)


class Repository(Generic[T]):
    """
    Single-record CRUD and queries for one entity type.

    Usage:
        accounts = Repository(platform, Account)
        account_id = await accounts.create(Account(name="Contoso"))
        account = await accounts.retrieve(account_id, ["name"])
    """

    def __init__(self, platform: DataPlatform, entity_cls: Type[T]) -> None:
        if platform is None:
            raise InvalidArgumentError("platform is required")
        self.platform = platform
        self.entity_cls = entity_cls
        self.logical_name = entity_cls.logical_name

    async def create(self, entity: T) -> UUID:
        if entity is None:
            raise InvalidArgumentError("entity cannot be null")
        record = entity.to_record()
        return await self.platform.create(self.logical_name, record.attributes)

    async def retrieve(self, record_id: UUID, columns: Optional[Sequence[str]] = None) -> Optional[T]:
        """
        Retrieve one entity, or None if it does not exist.

        Args:
            record_id: Identifier of the record
            columns: Attributes to fetch; None fetches all
        """
        if is_empty_id(record_id):
            raise InvalidArgumentError("ID cannot be empty")
        try:
            record = await self.platform.retrieve(self.logical_name, record_id, columns)
        except NotFoundError:
            return None
        return self.entity_cls.from_record(record)

    async def update(self, entity: T) -> None:
        if entity is None:
            raise InvalidArgumentError("entity cannot be null")
        if is_empty_id(entity.id):
            raise InvalidArgumentError("Entity ID cannot be empty for update operation")
        record = entity.to_record()
        await self.platform.update(self.logical_name, entity.id, record.attributes)

    async def delete(self, record_id: UUID) -> None:
        if is_empty_id(record_id):
            raise InvalidArgumentError("ID cannot be empty")
        await self.platform.delete(self.logical_name, record_id)

    async def retrieve_multiple(self, query: QueryExpression) -> list[T]:
        if query is None:
            raise InvalidArgumentError("query cannot be null")
        if query.logical_name != self.logical_name:
            raise InvalidArgumentError(
                f"Query entity name '{query.logical_name}' does not match repository entity '{self.logical_name}'"
            )
        records = await self.platform.query(query)
        return [self.entity_cls.from_record(record) for record in records]

    async def search(
        self,
        attribute: str,
        operator: ConditionOperator,
        value: Any,
        columns: Optional[Sequence[str]] = None,
    ) -> list[T]:
        if not attribute:
            raise InvalidArgumentError("Attribute name cannot be null or empty")
        query = QueryExpression(self.logical_name, columns=columns)
        query.criteria.add_condition(attribute, operator, value)
        return await self.retrieve_multiple(query)

    async def exists(self, record_id: UUID) -> bool:
        if is_empty_id(record_id):
            return False
        try:
            await self.platform.retrieve(self.logical_name, record_id, [])
        except NotFoundError:
            return False
        return True
