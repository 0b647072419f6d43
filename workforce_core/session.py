from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from workforce_core.decoder import RawRow, TableDecodeError, read_table
from workforce_core.filters import DashboardSettings
from workforce_core.mapping import MappingResult, map_rows
from workforce_core.productivity import AggregationResult, ExcludedSolutions, ProductivityRecord, aggregate_logs
from workforce_core.store import RecordStore


logger = logging.getLogger(__name__)

IngestStatus = Literal["loaded", "empty", "failed", "stale"]

NO_VALID_DATA = "No valid data found in file"
FAILED_TO_PROCESS = "Failed to process file"
SUPERSEDED = "Superseded by a newer upload"


@dataclass(frozen=True)
class IngestResult:
    status: IngestStatus
    message: str
    loaded: int = 0
    total_rows: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "loaded"

    def to_dict(self) -> Dict[str, object]:
        return {
            "status": self.status,
            "message": self.message,
            "loaded": self.loaded,
            "total_rows": self.total_rows,
            "dropped": self.total_rows - self.loaded,
            "warnings": list(self.warnings),
        }


class _Tickets:
    """Monotonic ticket counter per ingestion channel; only the newest may commit."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self.latest = 0

    def issue(self) -> int:
        self.latest = next(self._counter)
        return self.latest

    def is_current(self, ticket: int) -> bool:
        return ticket == self.latest


class DashboardSession:
    """State of one dashboard: schedule store, productivity set, exclusions."""

    def __init__(self, store: Optional[RecordStore] = None, settings: Optional[DashboardSettings] = None):
        self.settings = settings or DashboardSettings()
        self.store = store if store is not None else RecordStore()
        self.excluded_solutions = ExcludedSolutions(self.settings.excluded_solutions)
        self._productivity: Tuple[ProductivityRecord, ...] = ()
        self._log_rows: Optional[Tuple[List[RawRow], List[RawRow]]] = None
        self._schedule_tickets = _Tickets()
        self._productivity_tickets = _Tickets()

    @property
    def productivity(self) -> Tuple[ProductivityRecord, ...]:
        return self._productivity

    def _too_large(self, content: bytes) -> bool:
        return len(content or b"") > self.settings.max_upload_bytes

    def _decode(self, content: bytes, filename: str) -> List[RawRow]:
        return read_table(content, filename, search_rows=self.settings.header_search_rows)

    def _decode_and_map(self, content: bytes, filename: str) -> MappingResult:
        return map_rows(self._decode(content, filename))

    # ---------------- Schedule ----------------
    async def ingest_schedule(self, content: bytes, filename: str) -> IngestResult:
        ticket = self._schedule_tickets.issue()
        if self._too_large(content):
            return IngestResult(status="failed", message=f"{FAILED_TO_PROCESS}: file exceeds upload limit")
        try:
            result = await asyncio.to_thread(self._decode_and_map, content, filename)
        except TableDecodeError as exc:
            logger.warning("schedule upload %s failed: %s", filename, exc)
            if not self._schedule_tickets.is_current(ticket):
                return IngestResult(status="stale", message=SUPERSEDED)
            return IngestResult(status="failed", message=FAILED_TO_PROCESS, warnings=[str(exc)])

        if not self._schedule_tickets.is_current(ticket):
            logger.info("discarding stale schedule upload %s", filename)
            return IngestResult(status="stale", message=SUPERSEDED, total_rows=result.total_rows)
        if result.no_data:
            logger.info("schedule upload %s: no valid rows (%d read)", filename, result.total_rows)
            return IngestResult(status="empty", message=NO_VALID_DATA, total_rows=result.total_rows, warnings=result.warnings)

        self.store.replace_all(result.records)
        for w in result.warnings:
            logger.debug("schedule upload %s: %s", filename, w)
        logger.info("schedule upload %s: %s", filename, result.summary().lower())
        return IngestResult(
            status="loaded",
            message=result.summary(),
            loaded=len(result.records),
            total_rows=result.total_rows,
            warnings=result.warnings,
        )

    # ---------------- Productivity ----------------
    def _aggregate(
        self, call_rows: List[RawRow], care_rows: List[RawRow], excluded: Optional[ExcludedSolutions] = None
    ) -> AggregationResult:
        # Aggregation works on a private copy of the exclusions.
        return aggregate_logs(call_rows, care_rows, excluded if excluded is not None else self.excluded_solutions.copy())

    def _decode_logs(
        self,
        call_content: Optional[bytes],
        call_filename: str,
        care_content: Optional[bytes],
        care_filename: str,
        excluded: ExcludedSolutions,
    ) -> Tuple[List[RawRow], List[RawRow], AggregationResult]:
        call_rows = self._decode(call_content, call_filename) if call_content else []
        care_rows = self._decode(care_content, care_filename) if care_content else []
        return call_rows, care_rows, self._aggregate(call_rows, care_rows, excluded)

    async def ingest_productivity(
        self,
        call_content: Optional[bytes],
        call_filename: str,
        care_content: Optional[bytes],
        care_filename: str,
    ) -> IngestResult:
        ticket = self._productivity_tickets.issue()
        if self._too_large(call_content) or self._too_large(care_content):
            return IngestResult(status="failed", message=f"{FAILED_TO_PROCESS}: file exceeds upload limit")
        excluded = self.excluded_solutions.copy()
        try:
            call_rows, care_rows, result = await asyncio.to_thread(
                self._decode_logs, call_content, call_filename, care_content, care_filename, excluded
            )
        except TableDecodeError as exc:
            logger.warning("log upload failed: %s", exc)
            if not self._productivity_tickets.is_current(ticket):
                return IngestResult(status="stale", message=SUPERSEDED)
            return IngestResult(status="failed", message=FAILED_TO_PROCESS, warnings=[str(exc)])

        total_rows = len(call_rows) + len(care_rows)
        if not self._productivity_tickets.is_current(ticket):
            logger.info("discarding stale log upload")
            return IngestResult(status="stale", message=SUPERSEDED, total_rows=total_rows)
        if excluded.as_list() != self.excluded_solutions.as_list():
            logger.info("exclusions changed during log upload; recounting")
            result = self._aggregate(call_rows, care_rows)
        if not result.records:
            return IngestResult(status="empty", message=NO_VALID_DATA, total_rows=total_rows, warnings=result.warnings)

        self._log_rows = (call_rows, care_rows)
        self._productivity = tuple(result.records)
        counted = sum(r.records for r in result.records)
        logger.info(
            "log upload: %d staff, %d of %d entries counted (%d excluded, %d skipped)",
            len(result.records),
            counted,
            total_rows,
            result.excluded,
            result.skipped,
        )
        return IngestResult(
            status="loaded",
            message=f"Processed {counted} of {total_rows} log entries for {len(result.records)} staff",
            loaded=counted,
            total_rows=total_rows,
            warnings=result.warnings,
        )

    def reaggregate(self) -> Tuple[ProductivityRecord, ...]:
        """Recount the last uploaded logs against the current exclusions."""
        log_rows = self._log_rows
        if log_rows is None:
            return self._productivity
        records = tuple(self._aggregate(*log_rows).records)
        # Commit only while these are still the latest uploaded logs.
        if self._log_rows is log_rows:
            self._productivity = records
        else:
            logger.info("discarding recount of superseded log upload")
        return self._productivity

    def reset(self) -> None:
        self.store.reset()
        self._productivity = ()
        self._log_rows = None
        self.excluded_solutions.reset()
