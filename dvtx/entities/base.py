from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Mapping, Optional, Type, TypeVar
from uuid import UUID

from ..batch.models import Record, RecordRef, is_empty_id
from ..errors import InvalidArgumentError

E = TypeVar("E", bound="Entity")


@dataclass(eq=False)
class Entity:
    """
    Base class for early-bound (typed) platform entities.

    Subclasses set ``logical_name`` and implement the explicit attribute
    mapping in ``_to_attributes`` / ``_from_attributes``. Only attributes
    that are set (not None) are written, so an unset field stays absent on
    the wire and comes back unset.

    Entities compare and hash by identity: two instances with identical
    field values are distinct keys in a dict.
    """

    logical_name: ClassVar[str] = ""

    # entity field -> wire attribute, for lookup (foreign-reference) fields
    lookups: ClassVar[Dict[str, str]] = {}

    id: Optional[UUID] = None

    def to_record(self) -> Record:
        """Convert to the attribute bag used by platform operations."""
        attributes: Dict[str, Any] = {}
        self._to_attributes(attributes)
        record_id = None if is_empty_id(self.id) else self.id
        return Record(self.logical_name, attributes, record_id)

    @classmethod
    def from_record(cls: Type[E], record: Record) -> E:
        """
        Build an entity from an attribute bag.

        Raises:
            InvalidArgumentError: If record is None or is of another logical type
        """
        if record is None:
            raise InvalidArgumentError("record cannot be null")
        if record.logical_name != cls.logical_name:
            raise InvalidArgumentError(
                f"Entity logical name '{record.logical_name}' does not match expected '{cls.logical_name}'"
            )
        entity = cls()
        entity.id = record.id
        entity._from_attributes(record.attributes)
        return entity

    def to_ref(self) -> RecordRef:
        if is_empty_id(self.id):
            raise InvalidArgumentError(f"{self.logical_name} entity has no id")
        return RecordRef(self.logical_name, self.id)

    @classmethod
    def lookup_attribute(cls, field_name: str) -> str:
        """Wire attribute name of a lookup field (e.g. parent_customer_id -> parentcustomerid)."""
        try:
            return cls.lookups[field_name]
        except KeyError:
            raise InvalidArgumentError(
                f"{cls.__name__} has no lookup field {field_name!r}"
            ) from None

    def validate(self) -> None:
        """
        Full structural validation before create/update. Fails on the first
        violation with InvalidArgumentError.
        """

    def check_minimal(self) -> None:
        """Minimal required-field rule used before multi-record creates."""

    def _to_attributes(self, attributes: Dict[str, Any]) -> None:
        raise NotImplementedError

    def _from_attributes(self, attributes: Mapping[str, Any]) -> None:
        raise NotImplementedError


def _put(attributes: Dict[str, Any], name: str, value: Any) -> None:
    if value is not None:
        attributes[name] = value


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()
