"""
===============================================================================
Document Store Protocol – keyed document collections
-------------------------------------------------------------------------------
Purpose:
    Minimal contract for the networked document database behind drafts,
    master data and employees. Implementations: SQLite, in-memory; any
    document database offering these primitives can be plugged in.

Design:
    - Documents are JSON-compatible dicts. Returned documents carry their
      key under "id"; the key is not part of the stored body.
    - Errors from the backend surface as core.common.errors.StoreUnavailable.
===============================================================================
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

Document = Dict[str, Any]


@dataclass
class BatchDeleteResult:
    """Outcome of a best-effort batch delete."""
    deleted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed


class DocumentStore(Protocol):
    """
    Methods
    -------
    get_all(collection, order_by, descending) -> list[Document]
    get_one(collection, doc_id) -> Document | None
    set_one(collection, doc_id, document, merge) -> None
        merge=True updates top-level fields of an existing document and
        creates it when absent; merge=False replaces it.
    delete_one(collection, doc_id) -> None
        Idempotent.
    delete_many(collection, doc_ids) -> BatchDeleteResult
        Best effort; never rolls back successful deletes.
    new_id(collection) -> str
        Store-assigned id, generated client side.
    """

    def get_all(self, collection: str, *, order_by: Optional[str] = None,
                descending: bool = True) -> List[Document]:
        ...

    def get_one(self, collection: str, doc_id: str) -> Optional[Document]:
        ...

    def set_one(self, collection: str, doc_id: str, document: Mapping[str, Any], *,
                merge: bool = False) -> None:
        ...

    def delete_one(self, collection: str, doc_id: str) -> None:
        ...

    def delete_many(self, collection: str, doc_ids: Iterable[str]) -> BatchDeleteResult:
        ...

    def new_id(self, collection: str) -> str:
        ...


def sort_documents(docs: List[Document], order_by: Optional[str], descending: bool) -> List[Document]:
    """Order documents by a top-level field; documents lacking it sort last."""
    if not order_by:
        return docs
    present = [d for d in docs if d.get(order_by) is not None]
    missing = [d for d in docs if d.get(order_by) is None]
    present.sort(key=lambda d: d[order_by], reverse=descending)
    return present + missing
