"""
Integration tests for the dashboard HTTP API.
"""
import pandas as pd
import pytest
from fastapi.testclient import TestClient

from workforce_api.main import app, get_session
from workforce_core.session import DashboardSession


pytestmark = pytest.mark.integration


@pytest.fixture
def session():
    return DashboardSession()


@pytest.fixture
def client(session):
    app.dependency_overrides[get_session] = lambda: session
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def loaded(client, schedule_csv_bytes):
    resp = client.post("/schedule/upload", files={"file": ("schedule.csv", schedule_csv_bytes, "text/csv")})
    assert resp.status_code == 200
    return client


def _log_file(name, rows):
    return (name, pd.DataFrame(rows).to_csv(index=False).encode("utf-8"), "text/csv")


class TestScheduleEndpoints:
    """Upload, query and export the work schedule"""

    def test_upload_summary(self, client, schedule_csv_bytes):
        resp = client.post("/schedule/upload", files={"file": ("schedule.csv", schedule_csv_bytes, "text/csv")})
        body = resp.json()
        assert body["status"] == "loaded"
        assert body["loaded"] == 3
        assert body["dropped"] == 2

    def test_unsupported_upload(self, client):
        resp = client.post("/schedule/upload", files={"file": ("schedule.pdf", b"%PDF", "application/pdf")})
        assert resp.status_code == 422
        assert resp.json()["status"] == "failed"

    def test_records_by_date_any_format(self, loaded):
        for query in ("2025-05-10", "05/10/2025"):
            body = loaded.get("/schedule/records", params={"date": query}).json()
            assert body["count"] == 2

    def test_records_search(self, loaded):
        body = loaded.get("/schedule/records", params={"q": "agent"}).json()
        assert [r["name"] for r in body["records"]] == ["Chea Pisey"]

    def test_records_by_field(self, loaded):
        body = loaded.get("/schedule/records", params={"field": "position", "value": "NOC"}).json()
        assert body["count"] == 1

    def test_options(self, loaded):
        assert loaded.get("/schedule/options/shift").json() == {"values": ["9PM-3AM", "8AM-5PM"]}

    def test_options_unknown_field(self, loaded):
        resp = loaded.get("/schedule/options/date")
        assert resp.status_code == 400
        assert resp.json()["type"] == "UnknownFieldError"

    def test_schedule_payload(self, loaded):
        body = loaded.post("/schedule", json={"position": "NOC"}).json()
        assert body["counts"] == {"total": 3, "filtered": 1}
        assert body["rows"][0]["display_date"] == "May 10, 2025"
        assert body["calendar"]["month"] == 5

    def test_export(self, loaded):
        resp = loaded.get("/export/schedule", params={"shift": "8AM-5PM"})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert "work_schedule.csv" in resp.headers["content-disposition"]
        lines = resp.text.splitlines()
        assert lines[0] == '"Name","Date","Shift","Position"'
        assert len(lines) == 3


class TestProductivityEndpoints:
    """Log upload, payload, exclusions and export"""

    @pytest.fixture
    def uploaded(self, client, call_log_rows, care_log_rows):
        resp = client.post(
            "/productivity/upload",
            files={"call_logs": _log_file("calls.csv", call_log_rows), "care_logs": _log_file("care.csv", care_log_rows)},
        )
        assert resp.status_code == 200
        return client

    def test_payload(self, uploaded):
        body = uploaded.post("/productivity", json={"sort_field": "records", "ascending": False}).json()
        assert body["kpis"]["total_records"] == 6
        assert body["kpis"]["top_contributor"]["name"] == "ANG PHEARAK"
        assert [r["name"] for r in body["rows"]] == ["ANG PHEARAK", "SAM SOKHOM", "CHEA PISEY"]
        assert body["rows"][1]["contribution"] == 33.3

    def test_shift_filter(self, uploaded):
        body = uploaded.post("/productivity", json={"shift": "Nightshift"}).json()
        assert [r["name"] for r in body["rows"]] == ["SAM SOKHOM"]

    def test_excluded_solutions_roundtrip(self, uploaded):
        assert len(uploaded.get("/settings/excluded-solutions").json()["labels"]) == 5
        resp = uploaded.put("/settings/excluded-solutions", json={"labels": []})
        assert resp.json() == {"labels": []}
        body = uploaded.post("/productivity", json={}).json()
        assert body["kpis"]["total_records"] == 8
        uploaded.delete("/settings/excluded-solutions")
        assert uploaded.post("/productivity", json={}).json()["kpis"]["total_records"] == 6

    def test_export(self, uploaded):
        resp = uploaded.get("/export/productivity")
        assert "staff_productivity.csv" in resp.headers["content-disposition"]
        assert resp.text.splitlines()[0].startswith('"Work Shift","Name","Callogs"')

    def test_empty_payload_before_upload(self, client):
        body = client.post("/productivity", json={}).json()
        assert body["rows"] == []
        assert body["kpis"] == {}


def test_reset(loaded, session):
    assert loaded.post("/reset").status_code == 200
    assert len(session.store) == 0
