"""
Shared fixtures for the workforce dashboard tests.
"""
import io

import pandas as pd
import pytest

from workforce_core.mapping import ScheduleRecord
from workforce_core.store import RecordStore


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: Pure in-memory tests")
    config.addinivalue_line("markers", "integration: Tests that decode real workbook bytes or hit the API")


@pytest.fixture
def schedule_records():
    return [
        ScheduleRecord(id="1", name="Sun Hengly", date="05-10-2025", shift="9PM-3AM", position="NOC"),
        ScheduleRecord(id="2", name="Chea Pisey", date="05-10-2025", shift="8AM-5PM", position="Agent"),
        ScheduleRecord(id="3", name="Sun Hengly", date="05-11-2025", shift="Day Off", position="NOC"),
        ScheduleRecord(id="4", name="Aun Ratha", date="05-20-2025", shift="5PM-10PM", position="Team Lead"),
        ScheduleRecord(id="5", name="Aun Ratha", date="06-01-2025", shift="Public Holiday", position="Team Lead"),
    ]


@pytest.fixture
def store(schedule_records):
    return RecordStore(schedule_records)


@pytest.fixture
def make_xlsx():
    """Build workbook bytes from a list of row dicts (first sheet)."""

    def _make(rows, columns=None):
        buffer = io.BytesIO()
        pd.DataFrame(rows, columns=columns).to_excel(buffer, index=False, engine="openpyxl")
        return buffer.getvalue()

    return _make


@pytest.fixture
def schedule_csv_bytes():
    return (
        "Name,Date,Shifts,Position\n"
        "Sun Hengly,5/10/25,9PM-3AM,NOC\n"
        "Chea Pisey,2025-05-10,8AM-5PM,Agent\n"
        ",05-11-2025,Day Off,Agent\n"
        "Aun Ratha,,5PM-10PM,Team Lead\n"
        "Kong Sopheak,13-45-2025,8AM-5PM,Manager\n"
    ).encode("utf-8")


@pytest.fixture
def call_log_rows():
    return [
        {"agent": "ANG PHEARAK", "solution": "Resolved", "date time": "2025-05-10 04:15:00", "work shift": "Day Shift", "role": "Senior Agent"},
        {"agent": "ANG PHEARAK", "solution": "Resolved", "date time": "2025-05-10 09:30:00"},
        {"agent": "SAM SOKHOM", "solution": "unreachable contact - finish", "date time": "2025-05-10 23:10:00", "work shift": "Nightshift"},
        {"agent": "SAM SOKHOM", "solution": "Resolved", "date time": "2025-05-10 23:40:00", "work shift": "Nightshift"},
        {"agent": "SAM SOKHOM", "solution": "Resolved", "date time": "2025-05-11 01:05:00"},
        {"agent": "", "solution": "Resolved", "date time": "2025-05-10 12:00:00"},
    ]


@pytest.fixture
def care_log_rows():
    return [
        {"agent": "ANG PHEARAK", "solution": "Follow up", "date time": "2025-05-10 18:00:00"},
        {"agent": "CHEA PISEY", "solution": "Follow up", "date time": "2025-05-10 21:59:00", "work shift": "Day Shift"},
        {"agent": "CHEA PISEY", "solution": "Get some information - drop call", "date time": "2025-05-10 10:00:00"},
    ]
