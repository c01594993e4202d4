"""
===============================================================================
SQLiteDocumentStore – DocumentStore backed by a single SQLite table
-------------------------------------------------------------------------------
Schema:
    documents(collection, doc_id, body JSON, PRIMARY KEY(collection, doc_id))

Every sqlite3.Error is wrapped into StoreUnavailable so that callers only
deal with one failure type regardless of the backend.
===============================================================================
"""
from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from pathlib import Path
from threading import RLock
from typing import Any, Iterable, List, Mapping, Optional

from core.common.db_interface import SQLiteRepository
from core.common.errors import StoreUnavailable
from .document_store import BatchDeleteResult, Document, sort_documents

logger = logging.getLogger(__name__)


class SQLiteDocumentStore(SQLiteRepository):
    def __init__(self, db_path: Path) -> None:
        super().__init__(db_path, check_same_thread=False)
        self._lock = RLock()
        self._ensure_schema()

    # ------------------------- schema ------------------------------- #
    def _ensure_schema(self) -> None:
        with self._lock:
            self.conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    collection TEXT NOT NULL,
                    doc_id     TEXT NOT NULL,
                    body       TEXT NOT NULL,
                    PRIMARY KEY (collection, doc_id)
                )
                """
            )
            self.conn.commit()

    @staticmethod
    def _row_to_doc(row: sqlite3.Row) -> Document:
        body = json.loads(row["body"])
        body["id"] = row["doc_id"]
        return body

    # ------------------------- read --------------------------------- #
    def get_all(self, collection: str, *, order_by: Optional[str] = None,
                descending: bool = True) -> List[Document]:
        try:
            with self._lock:
                rows = self.conn.execute(
                    "SELECT doc_id, body FROM documents WHERE collection = ?",
                    (collection,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreUnavailable("get_all", collection, cause=exc) from exc
        return sort_documents([self._row_to_doc(r) for r in rows], order_by, descending)

    def get_one(self, collection: str, doc_id: str) -> Optional[Document]:
        try:
            with self._lock:
                row = self.conn.execute(
                    "SELECT doc_id, body FROM documents WHERE collection = ? AND doc_id = ?",
                    (collection, doc_id),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreUnavailable("get_one", collection, doc_id, cause=exc) from exc
        return self._row_to_doc(row) if row else None

    # ------------------------- write -------------------------------- #
    def set_one(self, collection: str, doc_id: str, document: Mapping[str, Any], *,
                merge: bool = False) -> None:
        body = {k: v for k, v in document.items() if k != "id"}
        try:
            with self._lock, self.conn:
                if merge:
                    row = self.conn.execute(
                        "SELECT body FROM documents WHERE collection = ? AND doc_id = ?",
                        (collection, doc_id),
                    ).fetchone()
                    if row:
                        body = {**json.loads(row["body"]), **body}
                self.conn.execute(
                    """
                    INSERT INTO documents (collection, doc_id, body) VALUES (?, ?, ?)
                    ON CONFLICT(collection, doc_id) DO UPDATE SET body = excluded.body
                    """,
                    (collection, doc_id, json.dumps(body, ensure_ascii=False)),
                )
        except sqlite3.Error as exc:
            raise StoreUnavailable("set_one", collection, doc_id, cause=exc) from exc

    def delete_one(self, collection: str, doc_id: str) -> None:
        try:
            with self._lock, self.conn:
                self.conn.execute(
                    "DELETE FROM documents WHERE collection = ? AND doc_id = ?",
                    (collection, doc_id),
                )
        except sqlite3.Error as exc:
            raise StoreUnavailable("delete_one", collection, doc_id, cause=exc) from exc

    def delete_many(self, collection: str, doc_ids: Iterable[str]) -> BatchDeleteResult:
        result = BatchDeleteResult()
        for doc_id in doc_ids:
            try:
                self.delete_one(collection, doc_id)
            except StoreUnavailable as exc:
                logger.warning("Batch delete of %s/%s failed: %s", collection, doc_id, exc)
                result.failed.append(doc_id)
            else:
                result.deleted.append(doc_id)
        return result

    def new_id(self, collection: str) -> str:
        return uuid.uuid4().hex
