from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional, Sequence

from workforce_core.charts import daily_headcount_chart, to_vega_spec
from workforce_core.dates import parse_canonical, to_readable
from workforce_core.filters import ScheduleFilters
from workforce_core.mapping import ScheduleRecord
from workforce_core.store import QUERY_FIELDS, RecordStore


def compute_schedule(
    filters: ScheduleFilters,
    store: RecordStore,
    *,
    view_year: Optional[int] = None,
    view_month: Optional[int] = None,
    rows: Optional[Sequence[ScheduleRecord]] = None,
) -> Dict[str, Any]:
    """Schedule page payload; pass ``rows`` when the caller already applied ``filters``."""
    if rows is None:
        rows = store.apply_filters(filters)
    payload: Dict[str, Any] = {
        "filters": asdict(filters),
        "counts": {"total": len(store), "filtered": len(rows)},
        "options": {f: store.distinct_values(f) for f in QUERY_FIELDS},
        "rows": [dict(r.to_dict(), display_date=to_readable(r.date)) for r in rows],
        "day": None,
        "calendar": None,
        "charts": {},
    }

    if filters.date:
        day_rows = store.by_date(filters.date)
        payload["day"] = {"date": to_readable(filters.date), "rows": [r.to_dict() for r in day_rows]}

    if view_year is None or view_month is None:
        parts = parse_canonical(filters.date) if filters.date else None
        if parts is None and rows:
            parts = parse_canonical(rows[0].date)
        if parts is not None:
            view_year, view_month = parts[0], parts[1]

    if view_year is not None and view_month is not None:
        days = store.month_calendar(view_year, view_month)
        counts = [{"day": d, "count": len(recs)} for d, recs in sorted(days.items())]
        payload["calendar"] = {
            "year": view_year,
            "month": view_month,
            "days": {d: [r.to_dict() for r in recs] for d, recs in sorted(days.items())},
        }
        if counts:
            payload["charts"]["daily_headcount"] = to_vega_spec(daily_headcount_chart(counts))
    return payload
