"""
draft_grouping.py

Groups drafts of one report type by project for the resume-draft picker.
Drafts without a project fall under a fixed "untitled" label.
"""
from __future__ import annotations

from typing import Dict, Iterable, List

from drafts.models.draft import Draft
from drafts.models.report_type import ReportType

UNTITLED = "名称未設定"
UNTITLED_SURVEY = "工事名未設定"


def group_key(draft: Draft) -> str:
    if draft.project:
        return draft.project
    return UNTITLED_SURVEY if draft.type == ReportType.NEWCOMER_SURVEY else UNTITLED


def group_by_project(drafts: Iterable[Draft], report_type: ReportType | str) -> Dict[str, List[Draft]]:
    """
    Returns {project label: drafts}; groups appear in the order of their
    first draft, drafts keep their input order (newest first from the store).
    """
    report_type = ReportType(report_type)
    groups: Dict[str, List[Draft]] = {}
    for draft in drafts:
        if draft.type != report_type:
            continue
        groups.setdefault(group_key(draft), []).append(draft)
    return groups
