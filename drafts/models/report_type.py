from __future__ import annotations
from enum import Enum


class ReportType(str, Enum):
    """Fixed set of document kinds a draft can hold."""
    SAFETY_TRAINING = "SAFETY_TRAINING"
    DISASTER_COUNCIL = "DISASTER_COUNCIL"
    SAFETY_PLAN = "SAFETY_PLAN"
    NEWCOMER_SURVEY = "NEWCOMER_SURVEY"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    ReportType.SAFETY_TRAINING: "安全訓練報告書",
    ReportType.DISASTER_COUNCIL: "災害防止協議会",
    ReportType.SAFETY_PLAN: "安全衛生計画書",
    ReportType.NEWCOMER_SURVEY: "新規入場者アンケート",
}
