from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import pandas as pd


logger = logging.getLogger(__name__)

CANONICAL_FORMAT = "MM-DD-YYYY"

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Priority order matters: the first pattern that yields a real calendar date wins.
DATE_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("YYYY-MM-DD", re.compile(r"^(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})$")),
    ("MM-DD-YYYY", re.compile(r"^(?P<month>\d{1,2})-(?P<day>\d{1,2})-(?P<year>\d{4})$")),
    ("MM/DD/YYYY", re.compile(r"^(?P<month>\d{1,2})/(?P<day>\d{1,2})/(?P<year>\d{4})$")),
    ("MM-DD-YY", re.compile(r"^(?P<month>\d{1,2})-(?P<day>\d{1,2})-(?P<year>\d{2})$")),
    ("MM/DD/YY", re.compile(r"^(?P<month>\d{1,2})/(?P<day>\d{1,2})/(?P<year>\d{2})$")),
)

_ISO_SHAPE = re.compile(r"^\d{4}-")
_CANONICAL = re.compile(r"^(\d{2})-(\d{2})-(\d{4})$")


@dataclass(frozen=True)
class DateResult:
    """Outcome of normalizing one date value.

    ``value`` is the canonical ``MM-DD-YYYY`` text when ``ok`` is true, and the
    untouched input otherwise.
    """

    value: object
    ok: bool
    source_format: Optional[str] = None
    warnings: List[str] = field(default_factory=list)


def _calendar_date(year: int, month: int, day: int) -> Optional[pd.Timestamp]:
    ts = pd.to_datetime(f"{year:04d}-{month:02d}-{day:02d}", format="%Y-%m-%d", errors="coerce")
    if pd.isna(ts):
        return None
    return ts


def _match(text: str) -> Optional[Tuple[str, pd.Timestamp]]:
    patterns = DATE_PATTERNS
    if not _ISO_SHAPE.match(text):
        patterns = DATE_PATTERNS[1:]
    for name, pattern in patterns:
        m = pattern.match(text)
        if not m:
            continue
        year = int(m.group("year"))
        if len(m.group("year")) == 2:
            year += 2000
        ts = _calendar_date(year, int(m.group("month")), int(m.group("day")))
        if ts is not None:
            return name, ts
    return None


def normalize_date(value: object) -> DateResult:
    """Convert any accepted date text to ``MM-DD-YYYY``; never raises."""
    if not isinstance(value, str):
        return DateResult(value=value, ok=False, warnings=[f"Date value {value!r} is not text"])
    text = value.strip()
    if not text:
        return DateResult(value=value, ok=False, warnings=["Date value is empty"])

    hit = _match(text)
    if hit is None:
        logger.debug("unrecognised date %r", value)
        return DateResult(value=value, ok=False, warnings=[f"Unrecognised date format: {value!r}"])
    name, ts = hit
    return DateResult(value=f"{ts.month:02d}-{ts.day:02d}-{ts.year:04d}", ok=True, source_format=name)


def normalize(value: object) -> object:
    return normalize_date(value).value


def parse_canonical(value: object) -> Optional[Tuple[int, int, int]]:
    """Return ``(year, month, day)`` for a value that normalizes, else None."""
    result = normalize_date(value)
    if not result.ok:
        return None
    m = _CANONICAL.match(str(result.value))
    if not m:
        return None
    return int(m.group(3)), int(m.group(1)), int(m.group(2))


def to_iso(value: object) -> object:
    parts = parse_canonical(value)
    if parts is None:
        return value
    year, month, day = parts
    return f"{year:04d}-{month:02d}-{day:02d}"


def to_readable(value: object) -> object:
    """Render as ``MMM DD, YYYY`` (e.g. ``May 10, 2025``)."""
    parts = parse_canonical(value)
    if parts is None:
        return value
    year, month, day = parts
    return f"{MONTH_ABBR[month - 1]} {day:02d}, {year:04d}"


def date_sort_key(value: object) -> Tuple[int, int, int, int]:
    # Uncomparable dates sort after every real date.
    parts = parse_canonical(value)
    if parts is None:
        return (1, 0, 0, 0)
    return (0,) + parts
