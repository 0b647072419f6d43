from __future__ import annotations

import csv
from typing import Iterable

import pandas as pd

from workforce_core.dates import to_readable
from workforce_core.mapping import ScheduleRecord
from workforce_core.productivity import ProductivityRecord


SCHEDULE_HEADERS = ["Name", "Date", "Shift", "Position"]
PRODUCTIVITY_HEADERS = [
    "Work Shift",
    "Name",
    "Callogs",
    "Carelogs",
    "3AM-8AM",
    "8AM-5PM",
    "5PM-10PM",
    "10PM-3AM",
    "Total Records",
]
SCHEDULE_FILENAME = "work_schedule.csv"
PRODUCTIVITY_FILENAME = "staff_productivity.csv"


def _to_csv(df: pd.DataFrame) -> str:
    return df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")


def schedule_csv(records: Iterable[ScheduleRecord]) -> str:
    rows = [[r.name, to_readable(r.date), r.shift, r.position] for r in records]
    return _to_csv(pd.DataFrame(rows, columns=SCHEDULE_HEADERS, dtype="object"))


def productivity_csv(records: Iterable[ProductivityRecord]) -> str:
    rows = [
        [
            r.shift,
            r.name,
            r.call_records,
            r.care_records,
            r.shift3to8,
            r.shift8to17,
            r.shift17to22,
            r.shift22to3,
            r.records,
        ]
        for r in records
    ]
    return _to_csv(pd.DataFrame(rows, columns=PRODUCTIVITY_HEADERS, dtype="object"))
