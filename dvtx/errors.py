from __future__ import annotations

from typing import Optional, Sequence


class DvtxError(Exception):
    """Base exception for dvtx errors."""


class InvalidArgumentError(DvtxError, ValueError):
    """A local precondition was violated before any remote call was made."""


class ConfigError(DvtxError):
    """Configuration validation error."""


class NotFoundError(DvtxError):
    """The requested record does not exist on the platform."""

    def __init__(self, logical_name: str, record_id) -> None:
        super().__init__(f"{logical_name} with id {record_id} does not exist")
        self.logical_name = logical_name
        self.record_id = record_id


class RemoteOperationFailed(DvtxError):
    """
    The remote call failed (network, auth, or the platform rejected an operation).

    For a batch call the platform guarantees nothing took effect.
    """

    def __init__(self, message: str, operation_index: Optional[int] = None) -> None:
        super().__init__(message)
        self.operation_index = operation_index


class PartialCompletionError(DvtxError):
    """
    Phase 1 of a two-phase create succeeded but a later phase failed.

    The records in ``primary_ref`` and ``dependent_refs`` exist remotely and
    are not linked. Nothing is rolled back; callers decide on compensation.
    """

    def __init__(
        self,
        message: str,
        *,
        primary_ref,
        dependent_refs: Sequence,
        failed_step: str,
    ) -> None:
        super().__init__(message)
        self.primary_ref = primary_ref
        self.dependent_refs = list(dependent_refs)
        self.failed_step = failed_step

    @property
    def created_refs(self) -> list:
        """All records created by phase 1, primary first."""
        return [self.primary_ref, *self.dependent_refs]
