from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Sequence

from workforce_core.charts import shift_distribution_chart, staff_contribution_chart, to_vega_spec
from workforce_core.filters import ProductivityFilters
from workforce_core.productivity import (
    ProductivityRecord,
    filter_by_shift,
    shift_distribution,
    sort_productivity,
    staff_contribution,
    total_records,
)


def compute_productivity(filters: ProductivityFilters, records: Sequence[ProductivityRecord]) -> Dict[str, Any]:
    shifts = list(dict.fromkeys(r.shift for r in records))
    rows = filter_by_shift(records, filters.shift)
    if filters.selected_names:
        wanted = set(filters.selected_names)
        rows = [r for r in rows if r.name in wanted]
    rows = sort_productivity(rows, filters.sort_field, filters.ascending)
    if not records:
        return {"filters": asdict(filters), "kpis": {}, "rows": [], "options": {"shift": []}, "charts": {}}

    top = max(records, key=lambda r: r.records)
    kpis = {
        "total_records": total_records(records),
        "staff_count": len(records),
        "call_records": sum(r.call_records for r in records),
        "care_records": sum(r.care_records for r in records),
        "top_contributor": {"name": top.name, "records": top.records, "contribution": round(top.contribution, 1)},
    }

    table = []
    for r in rows:
        row = r.to_dict()
        row["contribution"] = round(r.contribution, 1)
        table.append(row)

    charts = {
        "shift_distribution": to_vega_spec(shift_distribution_chart(shift_distribution(rows))),
        "staff_contribution": to_vega_spec(staff_contribution_chart(staff_contribution(rows))),
    }
    return {"filters": asdict(filters), "kpis": kpis, "rows": table, "options": {"shift": shifts}, "charts": charts}
