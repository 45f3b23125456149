from .models import (
    BatchResult,
    Operation,
    OperationResult,
    OperationType,
    Record,
    RecordRef,
)
from .executor import BatchExecutor

__all__ = [
    "BatchExecutor",
    "BatchResult",
    "Operation",
    "OperationResult",
    "OperationType",
    "Record",
    "RecordRef",
]
