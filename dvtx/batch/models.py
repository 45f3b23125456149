from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from ..errors import InvalidArgumentError, RemoteOperationFailed

NIL_ID = UUID(int=0)


def is_empty_id(value: Optional[UUID]) -> bool:
    """True for a missing identifier: None or the nil UUID."""
    return value is None or value == NIL_ID


class OperationType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class RecordRef:
    """
    Reference to a single remote record.

    Also used as the wire value of lookup attributes (e.g. a contact's
    ``parentcustomerid``).
    """
    logical_name: str
    id: UUID


@dataclass
class Record:
    """
    Attribute bag for one record of a given logical type.
    """
    logical_name: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    id: Optional[UUID] = None

    def to_ref(self) -> RecordRef:
        if is_empty_id(self.id):
            raise InvalidArgumentError(f"{self.logical_name} record has no id")
        return RecordRef(self.logical_name, self.id)


@dataclass
class Operation:
    """
    A single batch operation.

    ``target`` is a Record for CREATE/UPDATE and a RecordRef for DELETE.
    """
    op_type: OperationType
    target: Union[Record, RecordRef]

    @classmethod
    def create(cls, record: Record) -> "Operation":
        return cls(OperationType.CREATE, record)

    @classmethod
    def update(cls, record: Record) -> "Operation":
        return cls(OperationType.UPDATE, record)

    @classmethod
    def delete(cls, ref: RecordRef) -> "Operation":
        return cls(OperationType.DELETE, ref)

    @property
    def logical_name(self) -> str:
        return self.target.logical_name

    def check(self) -> None:
        """
        Validate the structural invariants of this operation.

        Raises:
            InvalidArgumentError: If the payload does not fit the operation type
        """
        if self.op_type in (OperationType.CREATE, OperationType.UPDATE):
            if not isinstance(self.target, Record):
                raise InvalidArgumentError(
                    f"{self.op_type.value} operation requires a Record, "
                    f"got {type(self.target).__name__}"
                )
        elif self.op_type == OperationType.DELETE:
            if not isinstance(self.target, RecordRef):
                raise InvalidArgumentError(
                    f"delete operation requires a RecordRef, got {type(self.target).__name__}"
                )
        else:
            raise InvalidArgumentError(f"Unsupported operation type: {self.op_type}")

        if not self.target.logical_name:
            raise InvalidArgumentError("Entity logical name cannot be empty")

        if self.op_type == OperationType.CREATE:
            if not is_empty_id(self.target.id):
                raise InvalidArgumentError(
                    "Create operation must not carry an id; the platform assigns it"
                )
        elif is_empty_id(self.target.id):
            raise InvalidArgumentError(
                f"Entity ID cannot be empty for {self.op_type.value} operation"
            )


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of one operation in a batch.

    ``id`` is the platform-generated identifier for CREATE results, None otherwise.
    """
    op_type: OperationType
    id: Optional[UUID] = None

    @classmethod
    def created(cls, record_id: UUID) -> "OperationResult":
        return cls(OperationType.CREATE, record_id)

    @classmethod
    def updated(cls) -> "OperationResult":
        return cls(OperationType.UPDATE)

    @classmethod
    def deleted(cls) -> "OperationResult":
        return cls(OperationType.DELETE)

    @property
    def created_id(self) -> UUID:
        if self.op_type != OperationType.CREATE or self.id is None:
            raise RemoteOperationFailed(
                f"{self.op_type.value} result does not carry a created id"
            )
        return self.id


# Positionally aligned with the submitted operations.
BatchResult = List[OperationResult]
