from __future__ import annotations

import logging
import re
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from workforce_core.filters import DEFAULT_EXCLUDED_SOLUTIONS, is_all
from workforce_core.mapping import resolve_field


logger = logging.getLogger(__name__)

DEFAULT_LOG_ALIASES: Dict[str, Sequence[str]] = {
    "name": ("name", "agent", "agent name", "staff name", "created by", "user"),
    "solution": ("solution", "outcome", "result", "status", "call result"),
    "timestamp": ("date time", "datetime", "timestamp", "created at", "created date", "call time", "time", "date"),
    "shift": ("work shift", "shift", "team"),
    "role": ("role", "position"),
}

# (field, start hour inclusive, end hour exclusive); the last window wraps midnight.
TIME_WINDOWS = (
    ("shift3to8", 3, 8),
    ("shift8to17", 8, 17),
    ("shift17to22", 17, 22),
    ("shift22to3", 22, 3),
)

_CLOCK = re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::\d{2}(?:\.\d+)?)?\s*(?P<ampm>[AaPp][Mm])?$")


def _label_key(label: object) -> str:
    return " ".join(str(label or "").split()).lower()


class ExcludedSolutions:
    """Outcome labels left out of productivity counts (case-insensitive)."""

    def __init__(self, labels: Optional[Iterable[str]] = None):
        self._labels: "OrderedDict[str, str]" = OrderedDict()
        self.replace(DEFAULT_EXCLUDED_SOLUTIONS if labels is None else labels)

    def __contains__(self, label: object) -> bool:
        return _label_key(label) in self._labels

    def __iter__(self):
        return iter(self._labels.values())

    def __len__(self) -> int:
        return len(self._labels)

    def add(self, label: str) -> None:
        key = _label_key(label)
        if key:
            self._labels.setdefault(key, " ".join(str(label).split()))

    def remove(self, label: str) -> None:
        self._labels.pop(_label_key(label), None)

    def replace(self, labels: Iterable[str]) -> None:
        # Swapped in with one assignment; readers see either the old or the new set.
        fresh: "OrderedDict[str, str]" = OrderedDict()
        for label in labels:
            key = _label_key(label)
            if key:
                fresh.setdefault(key, " ".join(str(label).split()))
        self._labels = fresh

    def copy(self) -> "ExcludedSolutions":
        return ExcludedSolutions(self.as_list())

    def reset(self) -> None:
        self.replace(DEFAULT_EXCLUDED_SOLUTIONS)

    def as_list(self) -> List[str]:
        return list(self._labels.values())


@dataclass(frozen=True)
class ProductivityRecord:
    name: str
    shift: str = ""
    role: str = ""
    call_records: int = 0
    care_records: int = 0
    contribution: float = 0.0
    shift3to8: int = 0
    shift8to17: int = 0
    shift17to22: int = 0
    shift22to3: int = 0
    records: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", self.call_records + self.care_records)

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "shift": self.shift,
            "role": self.role,
            "callRecords": self.call_records,
            "careRecords": self.care_records,
            "records": self.records,
            "contribution": self.contribution,
            "shift3to8": self.shift3to8,
            "shift8to17": self.shift8to17,
            "shift17to22": self.shift17to22,
            "shift22to3": self.shift22to3,
        }


@dataclass(frozen=True)
class AggregationResult:
    records: List[ProductivityRecord] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    skipped: int = 0
    excluded: int = 0


def time_window(hour: int) -> str:
    hour = int(hour) % 24
    for name, start, end in TIME_WINDOWS[:-1]:
        if start <= hour < end:
            return name
    return TIME_WINDOWS[-1][0]


def parse_log_time(value: object) -> Optional[int]:
    """Hour of day (0-23) for a log timestamp cell, or None."""
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Excel serial day number; the fraction is the time of day.
        if pd.isna(value) or value < 0:
            return None
        return int(round((float(value) % 1) * 24 * 60)) // 60 % 24
    text = str(value).strip()
    if not text:
        return None
    m = _CLOCK.match(text)
    if m:
        hour = int(m.group("hour"))
        ampm = (m.group("ampm") or "").lower()
        if ampm == "pm" and hour < 12:
            hour += 12
        elif ampm == "am" and hour == 12:
            hour = 0
        return hour if 0 <= hour < 24 else None
    ts = pd.to_datetime(text, errors="coerce")
    if pd.isna(ts):
        return None
    return int(ts.hour)


@dataclass
class _Tally:
    name: str
    shift: str = ""
    role: str = ""
    calls: int = 0
    cares: int = 0
    windows: Dict[str, int] = field(default_factory=lambda: {w[0]: 0 for w in TIME_WINDOWS})


def aggregate_logs(
    call_log_rows: Optional[Sequence[Mapping[str, object]]],
    care_log_rows: Optional[Sequence[Mapping[str, object]]],
    excluded_solutions: Optional[Iterable[str]] = None,
    *,
    aliases: Optional[Mapping[str, Sequence[str]]] = None,
) -> AggregationResult:
    """Per-staff call/care counts bucketed into the four daily windows.

    Staff are emitted in first-seen order (call log first, then care log).
    Contribution keeps full precision; display rounding is left to callers.
    """
    table = dict(DEFAULT_LOG_ALIASES)
    if aliases:
        table.update(aliases)
    excluded = excluded_solutions if isinstance(excluded_solutions, ExcludedSolutions) else ExcludedSolutions(
        DEFAULT_EXCLUDED_SOLUTIONS if excluded_solutions is None else excluded_solutions
    )

    tallies: "OrderedDict[str, _Tally]" = OrderedDict()
    warnings: List[str] = []
    skipped = 0
    excluded_count = 0

    for source, rows in (("call", call_log_rows or []), ("care", care_log_rows or [])):
        for row_no, row in enumerate(rows, start=1):
            name = resolve_field(row, table["name"])
            if not name:
                skipped += 1
                continue
            if resolve_field(row, table["solution"]) in excluded:
                excluded_count += 1
                continue
            hour = parse_log_time(_first_cell(row, table["timestamp"]))
            if hour is None:
                skipped += 1
                warnings.append(f"{source} log row {row_no}: no usable timestamp")
                continue

            tally = tallies.get(name)
            if tally is None:
                tally = tallies[name] = _Tally(name=name)
            tally.shift = tally.shift or resolve_field(row, table["shift"])
            tally.role = tally.role or resolve_field(row, table["role"])
            if source == "call":
                tally.calls += 1
            else:
                tally.cares += 1
            tally.windows[time_window(hour)] += 1

    total = sum(t.calls + t.cares for t in tallies.values())
    records = [
        ProductivityRecord(
            name=t.name,
            shift=t.shift,
            role=t.role,
            call_records=t.calls,
            care_records=t.cares,
            contribution=(100.0 * (t.calls + t.cares) / total) if total else 0.0,
            **t.windows,
        )
        for t in tallies.values()
    ]
    return AggregationResult(records=records, warnings=warnings, skipped=skipped, excluded=excluded_count)


def _first_cell(row: Mapping[str, object], aliases: Sequence[str]) -> object:
    lowered = {str(k).strip().lower(): v for k, v in row.items()}
    for alias in aliases:
        value = lowered.get(alias.lower())
        if value is not None and str(value).strip():
            return value
    return None


def aggregate(call_log_rows, care_log_rows, excluded_solutions=None) -> List[ProductivityRecord]:
    return aggregate_logs(call_log_rows, care_log_rows, excluded_solutions).records


# ---------------- Reporting helpers ----------------
def total_records(records: Iterable[ProductivityRecord]) -> int:
    return sum(r.records for r in records)


def filter_by_shift(records: Sequence[ProductivityRecord], shift: Optional[str]) -> List[ProductivityRecord]:
    if is_all(shift):
        return list(records)
    return [r for r in records if r.shift == shift]


def sort_productivity(records: Sequence[ProductivityRecord], sort_field: str = "shift", ascending: bool = True) -> List[ProductivityRecord]:
    def key(rec: ProductivityRecord):
        value = rec.to_dict().get(sort_field)
        if isinstance(value, str):
            return value.lower()
        return value

    if sort_field not in ProductivityRecord(name="").to_dict():
        raise ValueError(f"Cannot sort by {sort_field!r}")
    return sorted(records, key=key, reverse=not ascending)


def shift_distribution(records: Iterable[ProductivityRecord]) -> List[Dict[str, object]]:
    totals: "OrderedDict[str, int]" = OrderedDict()
    for r in records:
        totals[r.shift] = totals.get(r.shift, 0) + r.records
    return [{"shift": s, "records": n} for s, n in totals.items()]


def staff_contribution(records: Iterable[ProductivityRecord]) -> List[Dict[str, object]]:
    return [{"name": r.name, "records": r.records, "contribution": r.contribution} for r in records]
