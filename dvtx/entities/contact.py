from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Dict, Mapping, Optional
from uuid import UUID

from ..batch.models import RecordRef
from ..errors import InvalidArgumentError
from .base import Entity, _is_blank, _put

MAX_NAME_LENGTH = 50

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s.]+$")


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


@dataclass(eq=False)
class Contact(Entity):
    logical_name: ClassVar[str] = "contact"
    lookups: ClassVar[Dict[str, str]] = {"parent_customer_id": "parentcustomerid"}

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email_address1: Optional[str] = None
    telephone1: Optional[str] = None
    mobile_phone: Optional[str] = None
    job_title: Optional[str] = None
    parent_customer_id: Optional[UUID] = None
    # set by the platform
    full_name: Optional[str] = None
    created_on: Optional[datetime] = None
    modified_on: Optional[datetime] = None

    def _to_attributes(self, attributes: Dict[str, Any]) -> None:
        _put(attributes, "firstname", self.first_name)
        _put(attributes, "lastname", self.last_name)
        _put(attributes, "emailaddress1", self.email_address1)
        _put(attributes, "telephone1", self.telephone1)
        _put(attributes, "mobilephone", self.mobile_phone)
        _put(attributes, "jobtitle", self.job_title)
        if self.parent_customer_id is not None:
            attributes["parentcustomerid"] = RecordRef("account", self.parent_customer_id)

    def _from_attributes(self, attributes: Mapping[str, Any]) -> None:
        self.first_name = attributes.get("firstname")
        self.last_name = attributes.get("lastname")
        self.full_name = attributes.get("fullname")
        self.email_address1 = attributes.get("emailaddress1")
        self.telephone1 = attributes.get("telephone1")
        self.mobile_phone = attributes.get("mobilephone")
        self.job_title = attributes.get("jobtitle")
        parent = attributes.get("parentcustomerid")
        self.parent_customer_id = parent.id if isinstance(parent, RecordRef) else parent
        self.created_on = attributes.get("createdon")
        self.modified_on = attributes.get("modifiedon")

    def check_minimal(self) -> None:
        if _is_blank(self.first_name) and _is_blank(self.last_name):
            raise InvalidArgumentError("Contact must have at least first name or last name")

    def validate(self) -> None:
        if _is_blank(self.last_name):
            raise InvalidArgumentError("Contact last name is required")

        if len(self.last_name) > MAX_NAME_LENGTH:
            raise InvalidArgumentError(f"Last name cannot exceed {MAX_NAME_LENGTH} characters")

        if self.first_name and len(self.first_name) > MAX_NAME_LENGTH:
            raise InvalidArgumentError(f"First name cannot exceed {MAX_NAME_LENGTH} characters")

        if self.email_address1 and not is_valid_email(self.email_address1):
            raise InvalidArgumentError("Invalid email address format")
