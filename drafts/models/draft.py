from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .report_type import ReportType


@dataclass
class Draft:
    """
    A persisted, resumable in-progress document.

    Notes:
    - 'id'            opaque, assigned by the store on create
    - 'data'          payload specific to 'type' (wizard form state)
    - 'last_modified' epoch milliseconds, set by the store on every write
    """
    id: str
    type: ReportType
    data: Dict[str, Any] = field(default_factory=dict)
    last_modified: int = 0

    @property
    def project(self) -> Optional[str]:
        value = self.data.get("project")
        return value if isinstance(value, str) else None

    # -------------------- Document mapping --------------------------- #
    def to_document(self) -> Dict[str, Any]:
        """Wire shape: {id, type, data, lastModified}."""
        return {
            "id": self.id,
            "type": self.type.value,
            "data": self.data,
            "lastModified": self.last_modified,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Draft":
        return cls(
            id=str(doc["id"]),
            type=ReportType(doc["type"]),
            data=dict(doc.get("data") or {}),
            last_modified=int(doc.get("lastModified") or 0),
        )
