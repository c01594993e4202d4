"""
EmployeeStore – CRUD over the ``employees`` collection.

Records are free-form dicts (name, kana reading, qualifications ...) as
entered in the employee form; only ``id``, ``furiganaSei`` and
``furiganaMei`` have a meaning here.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping

from core.common.errors import StoreUnavailable
from core.helpers.date_time_helper import now_millis
from core.logging.logic.logger import logger
from core.storage.document_store import DocumentStore

COLLECTION = "employees"

_FEATURE = "Employees"

Employee = Dict[str, Any]


def kana_key(record: Mapping[str, Any]) -> str:
    """Sort key: kana reading family + given name; missing readings are ''."""
    return (record.get("furiganaSei") or "") + (record.get("furiganaMei") or "")


class EmployeeStore:
    def __init__(self, remote: DocumentStore, *, clock: Callable[[], int] = now_millis) -> None:
        self._remote = remote
        self._clock = clock

    def list_employees(self) -> List[Employee]:
        """Kana order. A failed read is logged and yields an empty list."""
        try:
            docs = self._remote.get_all(COLLECTION)
        except StoreUnavailable as exc:
            logger.log(_FEATURE, "ListFailed", level="ERROR", message=str(exc))
            return []
        return sorted(docs, key=kana_key)

    def save_employee(self, record: Mapping[str, Any]) -> str:
        """
        Create or merge-update; returns the id. New records get a millisecond
        timestamp id. Raises StoreUnavailable.
        """
        emp_id = str(record.get("id") or self._clock())
        body = {**record, "id": emp_id}
        try:
            self._remote.set_one(COLLECTION, emp_id, body, merge=True)
        except StoreUnavailable as exc:
            logger.log(_FEATURE, "SaveFailed", level="ERROR", reference_id=emp_id, message=str(exc))
            raise
        logger.log(_FEATURE, "Save", reference_id=emp_id)
        return emp_id

    def delete_employee(self, emp_id: str) -> None:
        try:
            self._remote.delete_one(COLLECTION, emp_id)
        except StoreUnavailable as exc:
            logger.log(_FEATURE, "DeleteFailed", level="ERROR", reference_id=emp_id, message=str(exc))
            raise
        logger.log(_FEATURE, "Delete", reference_id=emp_id)
