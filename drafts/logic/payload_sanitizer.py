"""
payload_sanitizer.py

Bounds draft payload size before persistence.

Site photos are large and are inserted again on the printing PC, so they
are removed from SAFETY_TRAINING drafts. Signatures are small enough to
keep. A stripped field is set to None (never dropped) so readers can tell
"present but empty" from "never existed".
"""
from __future__ import annotations

import copy
from typing import Any, Dict, Tuple

from drafts.models.report_type import ReportType

HEAVY_FIELDS: Dict[ReportType, Tuple[str, ...]] = {
    ReportType.SAFETY_TRAINING: ("photoUrl",),
}


def strip_heavy_images(data: Dict[str, Any], report_type: ReportType) -> Dict[str, Any]:
    """Return a deep copy of *data* with heavy image fields nulled."""
    cleaned = copy.deepcopy(data)
    for key in HEAVY_FIELDS.get(report_type, ()):
        if cleaned.get(key):
            cleaned[key] = None
    return cleaned
