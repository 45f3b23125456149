from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar, Dict, Mapping, Optional

from ..errors import InvalidArgumentError
from .base import Entity, _is_blank, _put

MAX_NAME_LENGTH = 160


def _as_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(eq=False)
class Account(Entity):
    logical_name: ClassVar[str] = "account"

    name: Optional[str] = None
    account_number: Optional[str] = None
    telephone1: Optional[str] = None
    website_url: Optional[str] = None
    description: Optional[str] = None
    number_of_employees: Optional[int] = None
    revenue: Optional[Decimal] = None
    # set by the platform
    created_on: Optional[datetime] = None
    modified_on: Optional[datetime] = None

    def _to_attributes(self, attributes: Dict[str, Any]) -> None:
        _put(attributes, "name", self.name)
        _put(attributes, "accountnumber", self.account_number)
        _put(attributes, "telephone1", self.telephone1)
        _put(attributes, "websiteurl", self.website_url)
        _put(attributes, "description", self.description)
        _put(attributes, "numberofemployees", self.number_of_employees)
        _put(attributes, "revenue", _as_decimal(self.revenue))

    def _from_attributes(self, attributes: Mapping[str, Any]) -> None:
        self.name = attributes.get("name")
        self.account_number = attributes.get("accountnumber")
        self.telephone1 = attributes.get("telephone1")
        self.website_url = attributes.get("websiteurl")
        self.description = attributes.get("description")
        self.number_of_employees = attributes.get("numberofemployees")
        self.revenue = _as_decimal(attributes.get("revenue"))
        self.created_on = attributes.get("createdon")
        self.modified_on = attributes.get("modifiedon")

    def check_minimal(self) -> None:
        if _is_blank(self.name):
            raise InvalidArgumentError("Account name is required")

    def validate(self) -> None:
        self.check_minimal()

        if len(self.name) > MAX_NAME_LENGTH:
            raise InvalidArgumentError(f"Account name cannot exceed {MAX_NAME_LENGTH} characters")

        if self.revenue is not None and self.revenue < 0:
            raise InvalidArgumentError("Revenue cannot be negative")

        if self.number_of_employees is not None and self.number_of_employees < 0:
            raise InvalidArgumentError("Number of employees cannot be negative")
