from __future__ import annotations

import csv
import datetime as dt
import io
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd


logger = logging.getLogger(__name__)

RawRow = Dict[str, object]

ACCEPTED_EXTENSIONS = (".xlsx", ".xls", ".csv")
EXCEL_ENGINES = {".xlsx": "openpyxl", ".xls": "xlrd"}
HEADER_SEARCH_ROWS = 10
DEFAULT_HEADER_KEYWORDS = ("name", "date", "shift", "shifts", "position", "agent", "solution")


class TableDecodeError(ValueError):
    """Raised when uploaded bytes cannot be read as a table."""


def file_extension(filename: str) -> str:
    return Path(filename or "").suffix.lower()


def find_header_row(df: pd.DataFrame, keywords: Iterable[str], search_rows: int = HEADER_SEARCH_ROWS) -> Optional[int]:
    lowered = {k.strip().lower() for k in keywords}
    for idx in range(min(search_rows, len(df))):
        cells = {str(v).strip().lower() for v in df.iloc[idx].tolist() if not _is_blank(v)}
        if cells & lowered:
            return idx
    return None


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def clean_cell(value: object) -> object:
    """Turn one parsed cell into plain text/number/None."""
    if _is_blank(value):
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (pd.Timestamp, dt.datetime)):
        ts = pd.Timestamp(value)
        if ts.hour == 0 and ts.minute == 0 and ts.second == 0:
            return ts.strftime("%Y-%m-%d")
        return ts.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, dt.date):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, dt.time):
        return value.strftime("%H:%M:%S")
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        f = float(value)
        return int(f) if f.is_integer() else f
    return value


def _csv_width(text: str) -> int:
    return max((len(row) for row in csv.reader(io.StringIO(text))), default=0)


def _read_grid(content: bytes, ext: str) -> pd.DataFrame:
    if ext == ".csv":
        text = content.decode("utf-8-sig")
        width = _csv_width(text)
        if not width:
            return pd.DataFrame()
        # Fixed column names let short title rows sit above a wider table.
        return pd.read_csv(
            io.StringIO(text),
            header=None,
            names=list(range(width)),
            dtype=str,
            skip_blank_lines=True,
            keep_default_na=False,
        )
    return pd.read_excel(io.BytesIO(content), sheet_name=0, header=None, engine=EXCEL_ENGINES[ext])


def rows_from_grid(grid: pd.DataFrame, *, header_keywords: Iterable[str] = DEFAULT_HEADER_KEYWORDS, search_rows: int = HEADER_SEARCH_ROWS) -> List[RawRow]:
    if grid.empty:
        return []
    header_row = find_header_row(grid, header_keywords, search_rows=search_rows) or 0
    headers = [str(h).strip().lower() if not _is_blank(h) else "" for h in grid.iloc[header_row].tolist()]

    keep: List[int] = []
    seen = set()
    for idx, name in enumerate(headers):
        if not name or name in seen:
            continue
        seen.add(name)
        keep.append(idx)

    rows: List[RawRow] = []
    for values in grid.iloc[header_row + 1 :].itertuples(index=False, name=None):
        row = {headers[i]: clean_cell(values[i]) for i in keep}
        if all(v is None for v in row.values()):
            continue
        rows.append(row)
    return rows


def read_table(
    content: bytes,
    filename: str,
    *,
    search_rows: int = HEADER_SEARCH_ROWS,
    header_keywords: Optional[Iterable[str]] = None,
) -> List[RawRow]:
    """Decode an uploaded workbook/CSV (first worksheet) into lower-cased header rows."""
    ext = file_extension(filename)
    if ext not in ACCEPTED_EXTENSIONS:
        raise TableDecodeError(f"Unsupported file type {ext or '(none)'!r}; expected one of {', '.join(ACCEPTED_EXTENSIONS)}")
    if not content:
        return []
    try:
        grid = _read_grid(content, ext)
    except pd.errors.EmptyDataError:
        return []
    except Exception as exc:
        raise TableDecodeError(f"Could not read {filename}: {exc}") from exc

    rows = rows_from_grid(grid, header_keywords=header_keywords or DEFAULT_HEADER_KEYWORDS, search_rows=search_rows)
    logger.debug("decoded %s: %d rows", filename, len(rows))
    return rows
