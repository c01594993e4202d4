"""
===============================================================================
MasterData – shared pick-list registry (single document)
-------------------------------------------------------------------------------
Wire shape:
    {projects, workplaces, contractors, supervisors, locations,
     subcontractors, roles, topics, jobTypes, goals, predictions,
     countermeasures, processes, cautions}  -> each a list of strings

Rules:
    - A stored document is merged over the built-in defaults, so every list
      is always present.
    - Unknown list-valued keys found in the stored document are kept in
      `extras` and written back unchanged.
    - Instances are treated as values: the with_* helpers return a new
      MasterData; callers read-modify-write the whole document.
===============================================================================
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Tuple

# wire key -> attribute name
_ATTR_BY_KEY: Dict[str, str] = {
    "projects": "projects",
    "workplaces": "workplaces",
    "contractors": "contractors",
    "supervisors": "supervisors",
    "locations": "locations",
    "subcontractors": "subcontractors",
    "roles": "roles",
    "topics": "topics",
    "jobTypes": "job_types",
    "goals": "goals",
    "predictions": "predictions",
    "countermeasures": "countermeasures",
    "processes": "processes",
    "cautions": "cautions",
}

FIELD_KEYS: Tuple[str, ...] = tuple(_ATTR_BY_KEY)

LABELS: Dict[str, str] = {
    "projects": "工事名",
    "contractors": "会社名",
    "supervisors": "現場責任者",
    "locations": "場所",
    "workplaces": "作業所名",
    "subcontractors": "協力会社名",
    "roles": "役職",
    "topics": "安全訓練内容",
    "jobTypes": "工種",
    "goals": "安全衛生目標",
    "predictions": "予想災害",
    "countermeasures": "防止対策",
    "processes": "作業工程",
    "cautions": "注意事項",
}

FIELD_GROUPS: Dict[str, Tuple[str, ...]] = {
    "BASIC": ("projects", "contractors", "supervisors", "locations", "workplaces"),
    "TRAINING": ("roles", "topics", "jobTypes", "goals", "predictions",
                 "countermeasures", "processes", "cautions"),
}

GROUP_LABELS: Dict[str, str] = {
    "BASIC": "基本・共通マスタ",
    "TRAINING": "各種項目マスタ",
}

DEFAULT_VALUES: Dict[str, List[str]] = {
    "projects": [
        "公共運動公園周辺地区整備工事（R7芝崎地区粗造成その2）",
        "市内道路改良工事（第3工区）",
        "河川護岸改修工事（A地区）",
    ],
    "contractors": ["松浦建設株式会社", "山田建設株式会社"],
    "supervisors": ["大須賀 久敬", "佐藤 和則", "鈴木 一郎"],
    "locations": ["本社会議室", "現場事務所", "現場詰所"],
    "goals": ["重機災害の防止と合図の徹底", "墜落・転落災害の絶滅", "熱中症対策の徹底"],
    "processes": ["準備工・除草・看板設置", "掘削工・残土搬出", "路盤工・舗装工"],
    "topics": [
        "本工事内容の周知徹底および近隣対策について",
        "搬入経路と第三者災害防止について",
        "新規入場者教育の実施について",
    ],
    "cautions": ["現場内整理整頓と区画明確化", "開口部養生の徹底", "架空線注意と旋回範囲立入禁止"],
    "subcontractors": ["（株）田中土木", "鈴木興業", "（有）高橋重機", "（株）エストラスト"],
}


def _attr(key: str) -> str:
    try:
        return _ATTR_BY_KEY[key]
    except KeyError:
        raise KeyError(f"Unknown master data list: {key!r}") from None


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


@dataclass(frozen=True)
class MasterData:
    projects: List[str] = field(default_factory=list)
    workplaces: List[str] = field(default_factory=list)
    contractors: List[str] = field(default_factory=list)
    supervisors: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)
    subcontractors: List[str] = field(default_factory=list)
    roles: List[str] = field(default_factory=list)
    topics: List[str] = field(default_factory=list)
    job_types: List[str] = field(default_factory=list)
    goals: List[str] = field(default_factory=list)
    predictions: List[str] = field(default_factory=list)
    countermeasures: List[str] = field(default_factory=list)
    processes: List[str] = field(default_factory=list)
    cautions: List[str] = field(default_factory=list)

    # list-valued keys this version does not know about
    extras: Dict[str, List[str]] = field(default_factory=dict)

    # -------------------- Factories ---------------------------------- #
    @classmethod
    def defaults(cls) -> "MasterData":
        """Built-in seed document; lists without seeds are empty."""
        return cls(**{_ATTR_BY_KEY[k]: list(v) for k, v in DEFAULT_VALUES.items()})

    @classmethod
    def from_document(cls, doc: Mapping[str, Any] | None) -> "MasterData":
        """Merge a stored document over the defaults."""
        base = cls.defaults()
        if not doc:
            return base
        values: Dict[str, Any] = {}
        extras: Dict[str, List[str]] = {}
        for key, value in doc.items():
            if key == "id" or not _is_string_list(value):
                continue
            if key in _ATTR_BY_KEY:
                values[_ATTR_BY_KEY[key]] = list(value)
            else:
                extras[key] = list(value)
        return replace(base, extras=extras, **values)

    # -------------------- Document mapping --------------------------- #
    def to_document(self) -> Dict[str, List[str]]:
        doc: Dict[str, List[str]] = copy.deepcopy(self.extras)
        for key in FIELD_KEYS:
            doc[key] = list(self.items(key))
        return doc

    # -------------------- Access / read-modify-write ----------------- #
    def items(self, key: str) -> List[str]:
        return getattr(self, _attr(key))

    def with_items(self, key: str, items: List[str]) -> "MasterData":
        return replace(self, **{_attr(key): list(items)})

    def with_item_added(self, key: str, value: str) -> "MasterData":
        """Append *value* (trimmed). Blank values and duplicates raise ValueError."""
        text = (value or "").strip()
        if not text:
            raise ValueError("Value must not be empty.")
        current = self.items(key)
        if text in current:
            raise ValueError(f"「{text}」は既に登録されています。")
        return self.with_items(key, current + [text])

    def with_item_removed(self, key: str, index: int) -> "MasterData":
        current = list(self.items(key))
        if not 0 <= index < len(current):
            raise IndexError(f"No item {index} in {key!r}")
        del current[index]
        return self.with_items(key, current)

