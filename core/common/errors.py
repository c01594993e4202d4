"""Application-wide exception types.

Store and imaging failures are recoverable: callers catch them and show a
message; none of them is fatal to the process.
"""
from __future__ import annotations

from typing import Optional, Sequence


class SafetyFormsError(Exception):
    """Base exception for the application."""


class StoreUnavailable(SafetyFormsError):
    """Raised when a read or write against the document store failed."""

    def __init__(self, operation: str, collection: str, doc_id: Optional[str] = None,
                 cause: Optional[BaseException] = None) -> None:
        self.operation = operation
        self.collection = collection
        self.doc_id = doc_id
        self.cause = cause
        target = f"{collection}/{doc_id}" if doc_id else collection
        detail = f": {cause}" if cause else ""
        super().__init__(f"{operation} failed for {target}{detail}")


class ValidationSkipped(SafetyFormsError):
    """An action was refused because a precondition was not met.

    Not raised at the UI; services log it and report it through their
    return value.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class PartialBatchFailure(SafetyFormsError):
    """Some documents of a best-effort batch delete could not be removed."""

    def __init__(self, deleted_ids: Sequence[str], failed_ids: Sequence[str]) -> None:
        self.deleted_ids = list(deleted_ids)
        self.failed_ids = list(failed_ids)
        super().__init__(
            f"{len(self.failed_ids)} of {len(self.deleted_ids) + len(self.failed_ids)} deletes failed"
        )


class DecodeFailure(SafetyFormsError):
    """Input could not be decoded as an image."""
