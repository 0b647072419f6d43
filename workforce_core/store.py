from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

import pandas as pd

from workforce_core.dates import date_sort_key, normalize, parse_canonical
from workforce_core.filters import ScheduleFilters, is_all
from workforce_core.mapping import ScheduleRecord


logger = logging.getLogger(__name__)

QUERY_FIELDS = ("name", "shift", "position")
SEARCH_FIELDS = ("name", "shift", "position", "date")


class UnknownFieldError(ValueError):
    """Raised for a field outside name/shift/position."""


def _check_field(field_name: str) -> str:
    if field_name not in QUERY_FIELDS:
        raise UnknownFieldError(f"Unknown field {field_name!r}; expected one of {', '.join(QUERY_FIELDS)}")
    return field_name


def _build_frame(records: Tuple[ScheduleRecord, ...]) -> pd.DataFrame:
    df = pd.DataFrame([r.to_dict() for r in records], columns=["id", "name", "date", "shift", "position"], dtype="object")
    df = df.fillna("")
    parts = [parse_canonical(d) for d in df["date"]]
    df["date_norm"] = [normalize(d) for d in df["date"]]
    df["year"] = pd.array([p[0] if p else None for p in parts], dtype="Int64")
    df["month"] = pd.array([p[1] if p else None for p in parts], dtype="Int64")
    df["day"] = pd.array([p[2] if p else None for p in parts], dtype="Int64")
    return df


@dataclass(frozen=True)
class _Snapshot:
    records: Tuple[ScheduleRecord, ...]
    frame: pd.DataFrame


class RecordStore:
    """In-memory holder of the current ScheduleRecord set.

    The set is only ever replaced wholesale; every query reads one snapshot and
    returns records in storage (ingestion) order.
    """

    def __init__(self, initial: Iterable[ScheduleRecord] = ()):
        self._snapshot = self._make_snapshot(initial)

    @staticmethod
    def _make_snapshot(records: Iterable[ScheduleRecord]) -> _Snapshot:
        recs = tuple(records)
        return _Snapshot(records=recs, frame=_build_frame(recs))

    @property
    def records(self) -> Tuple[ScheduleRecord, ...]:
        return self._snapshot.records

    def __len__(self) -> int:
        return len(self._snapshot.records)

    def replace_all(self, records: Iterable[ScheduleRecord]) -> None:
        snapshot = self._make_snapshot(records)
        self._snapshot = snapshot
        logger.info("schedule store replaced: %d records", len(snapshot.records))

    def reset(self) -> None:
        self.replace_all(())

    def _select(self, snapshot: _Snapshot, mask: pd.Series) -> List[ScheduleRecord]:
        if snapshot.frame.empty:
            return []
        return [snapshot.records[i] for i, hit in enumerate(mask.tolist()) if hit]

    # ---------------- Queries ----------------
    def by_date(self, date: str) -> List[ScheduleRecord]:
        snap = self._snapshot
        parts = parse_canonical(date)
        if parts is None or snap.frame.empty:
            return []
        return self._select(snap, snap.frame["date_norm"] == normalize(date))

    def by_month(self, year: int, month: int) -> List[ScheduleRecord]:
        snap = self._snapshot
        if snap.frame.empty or not 1 <= int(month) <= 12:
            return []
        df = snap.frame
        mask = (df["year"] == int(year)) & (df["month"] == int(month))
        return self._select(snap, mask.fillna(False))

    def search(self, query: str) -> List[ScheduleRecord]:
        snap = self._snapshot
        q = (query or "").strip().lower()
        if not q:
            return list(snap.records)
        if snap.frame.empty:
            return []
        df = snap.frame
        mask = pd.Series(False, index=df.index)
        for col in SEARCH_FIELDS:
            mask |= df[col].astype(str).str.lower().str.contains(q, regex=False, na=False)
        return self._select(snap, mask)

    def filter_by_field(self, field_name: str, value: str) -> List[ScheduleRecord]:
        col = _check_field(field_name)
        snap = self._snapshot
        if snap.frame.empty:
            return []
        return self._select(snap, snap.frame[col] == value)

    def distinct_values(self, field_name: str) -> List[str]:
        col = _check_field(field_name)
        return list(dict.fromkeys(getattr(r, col) for r in self._snapshot.records))

    def month_calendar(self, year: int, month: int) -> Dict[int, List[ScheduleRecord]]:
        days: Dict[int, List[ScheduleRecord]] = {}
        for rec in self.by_month(year, month):
            parts = parse_canonical(rec.date)
            if parts:
                days.setdefault(parts[2], []).append(rec)
        return days

    def apply_filters(self, filters: ScheduleFilters) -> List[ScheduleRecord]:
        """Search, categorical filters, selected date, then sort."""
        rows: Sequence[ScheduleRecord] = self.search(filters.query) if filters.query else self.records
        for col in QUERY_FIELDS:
            wanted = getattr(filters, col)
            if not is_all(wanted):
                rows = [r for r in rows if getattr(r, col) == wanted]
        if filters.date:
            target = normalize(filters.date)
            rows = [r for r in rows if parse_canonical(r.date) is not None and normalize(r.date) == target]
        return sort_records(rows, filters.sort_field, ascending=filters.ascending)


def sort_records(records: Sequence[ScheduleRecord], field_name: str = "date", *, ascending: bool = True) -> List[ScheduleRecord]:
    """Stable sort; dates by calendar order, other fields case-insensitively."""
    if field_name == "date":
        dated = [r for r in records if parse_canonical(r.date) is not None]
        undated = [r for r in records if parse_canonical(r.date) is None]
        ordered = sorted(dated, key=lambda r: date_sort_key(r.date), reverse=not ascending)
        return ordered + undated
    if field_name not in ("id",) + QUERY_FIELDS:
        raise UnknownFieldError(f"Cannot sort by {field_name!r}")
    if field_name == "id":
        return sorted(records, key=lambda r: int(r.id) if r.id.isdigit() else 0, reverse=not ascending)
    return sorted(records, key=lambda r: getattr(r, field_name).lower(), reverse=not ascending)
