from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from workforce_core.dates import normalize_date


logger = logging.getLogger(__name__)

# Priority-ordered header spellings per logical field (matched lower-cased).
DEFAULT_SCHEDULE_ALIASES: Dict[str, Sequence[str]] = {
    "name": ("name", "staff name", "employee name", "full name", "employee", "staff"),
    "date": ("date", "work date", "shift date", "day"),
    "shift": ("shifts", "shift", "work shift", "shift time"),
    "position": ("position", "role", "department", "team"),
}

REQUIRED_FIELDS = ("name", "date")
NO_DATA_WARNING = "No data found"


@dataclass(frozen=True)
class ScheduleRecord:
    id: str
    name: str
    date: str
    shift: str = ""
    position: str = ""

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class MappingResult:
    records: List[ScheduleRecord] = field(default_factory=list)
    total_rows: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def dropped_rows(self) -> int:
        return self.total_rows - len(self.records)

    @property
    def no_data(self) -> bool:
        return not self.records

    def summary(self) -> str:
        return f"Loaded {len(self.records)} of {self.total_rows} rows"


def cell_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def resolve_field(row: Mapping[str, object], aliases: Sequence[str]) -> str:
    """First non-empty cell among the alias headers, as stripped text."""
    lowered = {str(k).strip().lower(): v for k, v in row.items()}
    for alias in aliases:
        text = cell_text(lowered.get(alias.lower()))
        if text:
            return text
    return ""


def _has_any_header(rows: Sequence[Mapping[str, object]], aliases: Sequence[str]) -> bool:
    wanted = {a.lower() for a in aliases}
    for row in rows:
        if wanted & {str(k).strip().lower() for k in row.keys()}:
            return True
    return False


def map_rows(raw_rows: Optional[Sequence[Mapping[str, object]]], aliases: Optional[Mapping[str, Sequence[str]]] = None) -> MappingResult:
    """Map decoded rows onto ScheduleRecords.

    Rows without a name or a date are dropped. Dates are normalized to
    ``MM-DD-YYYY``; values that do not normalize are kept verbatim and reported
    in ``warnings``.
    """
    table = dict(DEFAULT_SCHEDULE_ALIASES)
    if aliases:
        table.update(aliases)

    if not raw_rows or not all(isinstance(r, Mapping) for r in raw_rows):
        return MappingResult(records=[], total_rows=len(raw_rows or []), warnings=[NO_DATA_WARNING])
    if not all(_has_any_header(raw_rows, table[f]) for f in REQUIRED_FIELDS):
        return MappingResult(records=[], total_rows=len(raw_rows), warnings=[NO_DATA_WARNING])

    records: List[ScheduleRecord] = []
    warnings: List[str] = []
    for row_no, row in enumerate(raw_rows, start=1):
        name = resolve_field(row, table["name"])
        raw_date = resolve_field(row, table["date"])
        if not name or not raw_date:
            continue
        result = normalize_date(raw_date)
        if not result.ok:
            warnings.extend(f"row {row_no}: {w}" for w in result.warnings)
        records.append(
            ScheduleRecord(
                id=str(len(records) + 1),
                name=name,
                date=str(result.value),
                shift=resolve_field(row, table["shift"]),
                position=resolve_field(row, table["position"]),
            )
        )

    if not records:
        warnings.append(NO_DATA_WARNING)
    return MappingResult(records=records, total_rows=len(raw_rows), warnings=warnings)
