from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple


ALL = "all"
SCHEDULE_SORT_FIELDS = ("date", "name", "shift", "position")
PRODUCTIVITY_SORT_FIELDS = (
    "shift",
    "name",
    "role",
    "callRecords",
    "careRecords",
    "records",
    "contribution",
    "shift3to8",
    "shift8to17",
    "shift17to22",
    "shift22to3",
)

DEFAULT_EXCLUDED_SOLUTIONS: Tuple[str, ...] = (
    "appointment call back to customer",
    "cus.no need support - finish",
    "get some information - drop call",
    "get some information - wait customer call back",
    "unreachable contact - finish",
)


@dataclass(frozen=True)
class DashboardSettings:
    excluded_solutions: Tuple[str, ...] = DEFAULT_EXCLUDED_SOLUTIONS
    header_search_rows: int = 10
    max_upload_bytes: int = 20 * 1024 * 1024


@dataclass(frozen=True)
class ScheduleFilters:
    query: str = ""
    shift: str = ALL
    position: str = ALL
    name: str = ALL
    date: Optional[str] = None
    sort_field: str = "date"
    ascending: bool = True


@dataclass(frozen=True)
class ProductivityFilters:
    shift: str = ALL
    sort_field: str = "shift"
    ascending: bool = True
    selected_names: List[str] = field(default_factory=list)


def is_all(value: Optional[str]) -> bool:
    return not value or value.strip().lower() == ALL


def _as_str_list(values: Optional[Iterable[object]]) -> List[str]:
    if not values:
        return []
    return [str(v).strip() for v in values if v is not None and str(v).strip()]


def _as_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() not in {"false", "0", "no", "desc", "descending"}
    return bool(value)


def _choice(value: object, allowed: Tuple[str, ...], default: str) -> str:
    s = str(value or "").strip()
    return s if s in allowed else default


def normalize_schedule_filters(raw: dict) -> ScheduleFilters:
    raw = raw or {}
    ascending = raw.get("ascending")
    if ascending is None and raw.get("sort_direction") is not None:
        ascending = str(raw.get("sort_direction")).strip().lower() != "desc"
    date = (raw.get("date") or "").strip() or None
    return ScheduleFilters(
        query=(raw.get("query") or "").strip(),
        shift=(raw.get("shift") or ALL).strip() or ALL,
        position=(raw.get("position") or ALL).strip() or ALL,
        name=(raw.get("name") or ALL).strip() or ALL,
        date=date,
        sort_field=_choice(raw.get("sort_field"), SCHEDULE_SORT_FIELDS, "date"),
        ascending=_as_bool(ascending, True),
    )


def normalize_productivity_filters(raw: dict) -> ProductivityFilters:
    raw = raw or {}
    return ProductivityFilters(
        shift=(raw.get("shift") or ALL).strip() or ALL,
        sort_field=_choice(raw.get("sort_field"), PRODUCTIVITY_SORT_FIELDS, "shift"),
        ascending=_as_bool(raw.get("ascending"), True),
        selected_names=_as_str_list(raw.get("selected_names")),
    )


def normalize_settings(raw: dict) -> DashboardSettings:
    raw = raw or {}
    excluded = raw.get("excluded_solutions")
    excluded_t = tuple(s.lower() for s in _as_str_list(excluded)) if excluded is not None else DEFAULT_EXCLUDED_SOLUTIONS

    search_rows = raw.get("header_search_rows", 10)
    try:
        search_rows = int(search_rows)
    except Exception:
        search_rows = 10
    search_rows = max(1, min(50, search_rows))

    max_bytes = raw.get("max_upload_bytes", 20 * 1024 * 1024)
    try:
        max_bytes = int(max_bytes)
    except Exception:
        max_bytes = 20 * 1024 * 1024
    max_bytes = max(1024, max_bytes)

    return DashboardSettings(excluded_solutions=excluded_t, header_search_rows=search_rows, max_upload_bytes=max_bytes)
