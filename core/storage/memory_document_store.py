"""In-process DocumentStore used for tests and the ``memory`` storage backend."""
from __future__ import annotations

import copy
import uuid
from threading import RLock
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .document_store import BatchDeleteResult, Document, sort_documents


class InMemoryDocumentStore:
    def __init__(self) -> None:
        self._lock = RLock()
        self._collections: Dict[str, Dict[str, Document]] = {}

    def get_all(self, collection: str, *, order_by: Optional[str] = None,
                descending: bool = True) -> List[Document]:
        with self._lock:
            docs = [
                {**copy.deepcopy(body), "id": doc_id}
                for doc_id, body in self._collections.get(collection, {}).items()
            ]
        return sort_documents(docs, order_by, descending)

    def get_one(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            body = self._collections.get(collection, {}).get(doc_id)
            if body is None:
                return None
            return {**copy.deepcopy(body), "id": doc_id}

    def set_one(self, collection: str, doc_id: str, document: Mapping[str, Any], *,
                merge: bool = False) -> None:
        body = {k: copy.deepcopy(v) for k, v in document.items() if k != "id"}
        with self._lock:
            coll = self._collections.setdefault(collection, {})
            if merge and doc_id in coll:
                coll[doc_id].update(body)
            else:
                coll[doc_id] = body

    def delete_one(self, collection: str, doc_id: str) -> None:
        with self._lock:
            self._collections.get(collection, {}).pop(doc_id, None)

    def delete_many(self, collection: str, doc_ids: Iterable[str]) -> BatchDeleteResult:
        result = BatchDeleteResult()
        for doc_id in doc_ids:
            self.delete_one(collection, doc_id)
            result.deleted.append(doc_id)
        return result

    def new_id(self, collection: str) -> str:
        return uuid.uuid4().hex
