from __future__ import annotations

import logging
import math
from typing import Literal, Optional

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI, File, Query, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from workforce_api.schemas import (
    ExcludedSolutionsModel,
    IngestResultModel,
    MetaListResponse,
    ProductivityFiltersModel,
    ScheduleFiltersModel,
)
from workforce_core.export import PRODUCTIVITY_FILENAME, SCHEDULE_FILENAME, productivity_csv, schedule_csv
from workforce_core.filters import normalize_productivity_filters, normalize_schedule_filters
from workforce_core.metrics_productivity import compute_productivity
from workforce_core.metrics_schedule import compute_schedule
from workforce_core.productivity import filter_by_shift
from workforce_core.session import DashboardSession, IngestResult
from workforce_core.store import UnknownFieldError


app = FastAPI(title="Workforce Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8080"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_session = DashboardSession()


def get_session() -> DashboardSession:
    return _session


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


def _ingest_response(result: IngestResult) -> JSONResponse:
    body = IngestResultModel(**result.to_dict()).model_dump()
    if result.status == "loaded":
        return _json(body)
    if result.status == "stale":
        return _json(body, status_code=409)
    return _json(body, status_code=422)


# ---------------- Schedule ----------------
@app.post("/schedule/upload")
async def schedule_upload(file: UploadFile = File(...), session: DashboardSession = Depends(get_session)):
    try:
        content = await file.read()
        result = await session.ingest_schedule(content, file.filename or "")
        return _ingest_response(result)
    except Exception as exc:
        logger.exception("schedule_upload failed")
        return _error(exc)


@app.get("/schedule/records")
def schedule_records(
    date: Optional[str] = Query(default=None),
    year: Optional[int] = Query(default=None),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    q: str = Query(default=""),
    field: Optional[Literal["name", "shift", "position"]] = Query(default=None),
    value: Optional[str] = Query(default=None),
    session: DashboardSession = Depends(get_session),
):
    try:
        store = session.store
        if date:
            rows = store.by_date(date)
        elif year is not None and month is not None:
            rows = store.by_month(year, month)
        elif field and value is not None:
            rows = store.filter_by_field(field, value)
        else:
            rows = store.search(q)
        return _json({"records": [r.to_dict() for r in rows], "count": len(rows)})
    except Exception as exc:
        logger.exception("schedule_records failed")
        return _error(exc)


@app.get("/schedule/options/{field}", response_model=MetaListResponse)
def schedule_options(field: str, session: DashboardSession = Depends(get_session)):
    try:
        return _json({"values": session.store.distinct_values(field)})
    except UnknownFieldError as exc:
        return _error(exc, status_code=400)
    except Exception as exc:
        logger.exception("schedule_options failed")
        return _error(exc)


@app.post("/schedule")
def schedule(filters: ScheduleFiltersModel, session: DashboardSession = Depends(get_session)):
    try:
        raw = filters.model_dump()
        f = normalize_schedule_filters(raw)
        return _json(compute_schedule(f, session.store, view_year=raw.get("view_year"), view_month=raw.get("view_month")))
    except Exception as exc:
        logger.exception("schedule failed")
        return _error(exc)


# ---------------- Productivity ----------------
@app.post("/productivity/upload")
async def productivity_upload(
    call_logs: Optional[UploadFile] = File(default=None),
    care_logs: Optional[UploadFile] = File(default=None),
    session: DashboardSession = Depends(get_session),
):
    try:
        call_content = await call_logs.read() if call_logs is not None else None
        care_content = await care_logs.read() if care_logs is not None else None
        result = await session.ingest_productivity(
            call_content,
            call_logs.filename if call_logs is not None else "",
            care_content,
            care_logs.filename if care_logs is not None else "",
        )
        return _ingest_response(result)
    except Exception as exc:
        logger.exception("productivity_upload failed")
        return _error(exc)


@app.post("/productivity")
def productivity(filters: ProductivityFiltersModel, session: DashboardSession = Depends(get_session)):
    try:
        f = normalize_productivity_filters(filters.model_dump())
        return _json(compute_productivity(f, session.productivity))
    except Exception as exc:
        logger.exception("productivity failed")
        return _error(exc)


# ---------------- Settings ----------------
@app.get("/settings/excluded-solutions")
async def get_excluded_solutions(session: DashboardSession = Depends(get_session)):
    return _json({"labels": session.excluded_solutions.as_list()})


@app.put("/settings/excluded-solutions")
async def put_excluded_solutions(body: ExcludedSolutionsModel, session: DashboardSession = Depends(get_session)):
    try:
        session.excluded_solutions.replace(body.labels)
        session.reaggregate()
        return _json({"labels": session.excluded_solutions.as_list()})
    except Exception as exc:
        logger.exception("put_excluded_solutions failed")
        return _error(exc)


@app.delete("/settings/excluded-solutions")
async def reset_excluded_solutions(session: DashboardSession = Depends(get_session)):
    session.excluded_solutions.reset()
    session.reaggregate()
    return _json({"labels": session.excluded_solutions.as_list()})


@app.post("/reset")
async def reset(session: DashboardSession = Depends(get_session)):
    session.reset()
    return _json({"records": 0, "staff": 0})


# ---------------- Export ----------------
@app.get("/export/schedule")
def export_schedule(
    q: str = Query(default=""),
    shift: str = Query(default="all"),
    position: str = Query(default="all"),
    name: str = Query(default="all"),
    date: Optional[str] = Query(default=None),
    session: DashboardSession = Depends(get_session),
):
    f = normalize_schedule_filters({"query": q, "shift": shift, "position": position, "name": name, "date": date})
    csv_text = schedule_csv(session.store.apply_filters(f))
    return Response(
        content=csv_text.encode("utf-8"),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={SCHEDULE_FILENAME}"},
    )


@app.get("/export/productivity")
def export_productivity(shift: str = Query(default="all"), session: DashboardSession = Depends(get_session)):
    csv_text = productivity_csv(filter_by_shift(session.productivity, shift))
    return Response(
        content=csv_text.encode("utf-8"),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={PRODUCTIVITY_FILENAME}"},
    )
