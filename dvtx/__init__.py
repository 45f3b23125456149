from .batch.executor import BatchExecutor
from .batch.models import Operation, OperationResult, OperationType, Record, RecordRef
from .entities import Account, Contact, Entity
from .errors import (
    DvtxError,
    InvalidArgumentError,
    NotFoundError,
    PartialCompletionError,
    RemoteOperationFailed,
)
from .platform import DataPlatform, SqlPlatform
from .transactional import TransactionalService

__version__ = "0.1.0"

__all__ = [
    "Account",
    "BatchExecutor",
    "Contact",
    "DataPlatform",
    "DvtxError",
    "Entity",
    "InvalidArgumentError",
    "NotFoundError",
    "Operation",
    "OperationResult",
    "OperationType",
    "PartialCompletionError",
    "Record",
    "RecordRef",
    "RemoteOperationFailed",
    "SqlPlatform",
    "TransactionalService",
]
