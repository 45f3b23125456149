from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Generic, Optional, TypeVar
from uuid import UUID

from .batch.models import is_empty_id
from .entities.account import Account
from .entities.base import Entity
from .entities.contact import Contact
from .errors import InvalidArgumentError, NotFoundError
from .query import ConditionOperator, FilterExpression, LogicalOperator, QueryExpression
from .repository import Repository

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Entity)


class EntityService(Generic[T]):
    """
    Validating CRUD layer over a Repository.

    Entities are validated (``Entity.validate()``) before every create and
    update; nothing reaches the platform if validation fails.
    """

    def __init__(self, repository: Repository[T]) -> None:
        if repository is None:
            raise InvalidArgumentError("repository is required")
        self.repository = repository

    async def create(self, entity: T) -> T:
        if entity is None:
            raise InvalidArgumentError("entity cannot be null")
        entity.validate()
        entity.id = await self.repository.create(entity)
        logger.info("Created %s %s", entity.logical_name, entity.id)
        return entity

    async def get_by_id(self, record_id: UUID, *columns: str) -> Optional[T]:
        if is_empty_id(record_id):
            raise InvalidArgumentError("ID cannot be empty")
        return await self.repository.retrieve(record_id, list(columns) if columns else None)

    async def update(self, entity: T) -> T:
        """
        Raises:
            InvalidArgumentError: If the entity has no id or fails validation
            NotFoundError: If the record does not exist
        """
        if entity is None:
            raise InvalidArgumentError("entity cannot be null")
        if is_empty_id(entity.id):
            raise InvalidArgumentError("Entity ID cannot be empty for update operation")
        entity.validate()

        if not await self.repository.exists(entity.id):
            raise NotFoundError(entity.logical_name, entity.id)

        await self.repository.update(entity)
        return entity

    async def delete(self, record_id: UUID) -> bool:
        """Delete a record. Returns False if it did not exist."""
        if is_empty_id(record_id):
            raise InvalidArgumentError("ID cannot be empty")
        if not await self.repository.exists(record_id):
            return False
        await self.repository.delete(record_id)
        return True

    async def search(
        self,
        attribute: str,
        value: Any,
        operator: ConditionOperator = ConditionOperator.EQUAL,
        *columns: str,
    ) -> list[T]:
        if not attribute:
            raise InvalidArgumentError("Attribute name cannot be null or empty")
        if value is None:
            raise InvalidArgumentError("Search value cannot be null")
        return await self.repository.search(attribute, operator, value, list(columns) if columns else None)

    async def get_all(self, query: Optional[QueryExpression] = None) -> list[T]:
        if query is None:
            query = QueryExpression(self.repository.logical_name)
        return await self.repository.retrieve_multiple(query)

    async def exists(self, record_id: UUID) -> bool:
        return await self.repository.exists(record_id)


class AccountService(EntityService[Account]):
    async def search_by_name(self, name: str, exact_match: bool = False) -> list[Account]:
        if not name:
            raise InvalidArgumentError("Name cannot be null or empty")
        operator = ConditionOperator.EQUAL if exact_match else ConditionOperator.BEGINS_WITH
        return await self.search(
            "name", name, operator, "name", "accountnumber", "telephone1", "websiteurl"
        )

    async def get_high_revenue_accounts(self, min_revenue: Decimal) -> list[Account]:
        """Accounts with revenue above ``min_revenue``, highest first."""
        query = QueryExpression("account", columns=["name", "revenue", "numberofemployees"])
        query.criteria.add_condition("revenue", ConditionOperator.GREATER_THAN, Decimal(str(min_revenue)))
        query.add_order("revenue", descending=True)
        return await self.repository.retrieve_multiple(query)


class ContactService(EntityService[Contact]):
    async def get_by_email(self, email: str) -> Optional[Contact]:
        if not email:
            raise InvalidArgumentError("Email cannot be null or empty")
        results = await self.search("emailaddress1", email, ConditionOperator.EQUAL)
        return results[0] if results else None

    async def get_contacts_by_account(self, account_id: UUID) -> list[Contact]:
        if is_empty_id(account_id):
            raise InvalidArgumentError("Account ID cannot be empty")
        return await self.search(
            "parentcustomerid",
            account_id,
            ConditionOperator.EQUAL,
            "firstname", "lastname", "emailaddress1", "telephone1", "jobtitle", "parentcustomerid",
        )

    async def search_by_name(self, search_term: str) -> list[Contact]:
        """Contacts whose first or last name begins with the term, ordered by last, first."""
        if not search_term:
            raise InvalidArgumentError("Search term cannot be null or empty")

        query = QueryExpression(
            "contact",
            columns=["firstname", "lastname", "fullname", "emailaddress1", "telephone1"],
        )
        names = FilterExpression(LogicalOperator.OR)
        names.add_condition("firstname", ConditionOperator.BEGINS_WITH, search_term)
        names.add_condition("lastname", ConditionOperator.BEGINS_WITH, search_term)
        query.criteria.add_filter(names)
        query.add_order("lastname")
        query.add_order("firstname")

        return await self.repository.retrieve_multiple(query)
