from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.locks import KeyedLocks
from ..core.constants import DEFAULT_DIAGNOSTIC_LIMIT, DEFAULT_PERSIST_GROUP_SIZE
from ..core.enums import IdentityMatch, PunchKind, PunchSource, RejectReason
from ..core.exceptions import PersistenceConflict, PersistenceFailure, PunchRejected
from ..summaries.service import AggregateMaterializer, MaterializationReport
from ..summaries.verifier import SummaryVerifier, VerificationReport
from .csv_reader import PunchCsvReader
from .deduplicator import dedupe_in_batch
from .model import NormalizedPunch, RawPunchRow
from .normalizer import PunchNormalizer
from .repository import PunchRepository

logger = logging.getLogger(__name__)

INSERTED = "inserted"
OVERWRITTEN = "overwritten"
DUPLICATE = "duplicate"
FAILED = "failed"


@dataclass
class BatchResult:
    total_processed: int = 0
    inserted: int = 0
    overwritten: int = 0
    duplicates_skipped: int = 0
    duplicates_in_batch: int = 0
    unmatched_identity: int = 0
    malformed_timestamp: int = 0
    unclassified: int = 0
    filtered: int = 0
    persistence_errors: int = 0
    matched_by_employee_number: int = 0
    matched_by_name: int = 0
    diagnostics: list[str] = field(default_factory=list)
    diagnostic_limit: int = DEFAULT_DIAGNOSTIC_LIMIT
    materialization: Optional[MaterializationReport] = None
    verification: Optional[VerificationReport] = None

    def add_diagnostic(self, message: str) -> None:
        if len(self.diagnostics) < self.diagnostic_limit:
            self.diagnostics.append(message)

    def as_dict(self) -> dict:
        return {
            "total_processed": self.total_processed,
            "inserted": self.inserted,
            "overwritten": self.overwritten,
            "duplicates_skipped": self.duplicates_skipped,
            "duplicates_in_batch": self.duplicates_in_batch,
            "unmatched_identity": self.unmatched_identity,
            "malformed_timestamp": self.malformed_timestamp,
            "unclassified": self.unclassified,
            "filtered": self.filtered,
            "persistence_errors": self.persistence_errors,
            "matched_by_employee_number": self.matched_by_employee_number,
            "matched_by_name": self.matched_by_name,
            "diagnostics": list(self.diagnostics),
            "materialization": self.materialization.as_dict() if self.materialization else None,
            "verification": self.verification.as_dict() if self.verification else None,
        }


class BatchIngestionService:
    """Ingest a batch of raw punches and re-materialize what it touched.

    Normalization, sorting and in-batch dedup run sequentially so the first
    occurrence always wins. Writes then run in fixed-size parallel groups,
    each under the lock of its (user, date). Record-level failures are
    counted and reported; they never abort the batch.
    """

    def __init__(
        self,
        normalizer: PunchNormalizer,
        punches: PunchRepository,
        materializer: AggregateMaterializer,
        *,
        verifier: Optional[SummaryVerifier] = None,
        locks: Optional[KeyedLocks] = None,
        reader: Optional[PunchCsvReader] = None,
        group_size: int = DEFAULT_PERSIST_GROUP_SIZE,
        diagnostic_limit: int = DEFAULT_DIAGNOSTIC_LIMIT,
        clock: Callable[[], datetime] = now_local,
    ):
        self._normalizer = normalizer
        self._punches = punches
        self._materializer = materializer
        self._verifier = verifier
        self._locks = locks or KeyedLocks()
        self._reader = reader or PunchCsvReader()
        self._group_size = max(1, int(group_size))
        self._diagnostic_limit = int(diagnostic_limit)
        self._clock = clock

    def _normalize_all(self, rows: Sequence[RawPunchRow], now: datetime, result: BatchResult) -> list[NormalizedPunch]:
        normalized: list[NormalizedPunch] = []
        for raw in rows:
            try:
                punch = self._normalizer.normalize(raw, now=now)
            except PunchRejected as e:
                if e.reason == RejectReason.UNMATCHED_IDENTITY:
                    result.unmatched_identity += 1
                elif e.reason == RejectReason.UNCLASSIFIED_PUNCH:
                    result.unclassified += 1
                else:
                    result.malformed_timestamp += 1
                logger.info("Line %s rejected (%s): %s", raw.line_no, e.reason.value, e)
                result.add_diagnostic(f"Line {raw.line_no}: {e}")
                continue

            if punch is None:
                result.filtered += 1
                continue
            if punch.matched_by == IdentityMatch.EMPLOYEE_NUMBER:
                result.matched_by_employee_number += 1
            elif punch.matched_by == IdentityMatch.NAME:
                result.matched_by_name += 1
            normalized.append(punch)
        return normalized

    def _persist(self, punch: NormalizedPunch, overwrite: bool) -> tuple[str, str]:
        record = punch.record
        with self._locks.hold((record.user_id, record.work_date)):
            try:
                if overwrite:
                    replaced = self._punches.replace(record)
                    return (OVERWRITTEN if replaced else INSERTED), ""
                self._punches.insert(record)
                return INSERTED, ""
            except PersistenceConflict:
                return DUPLICATE, ""
            except PersistenceFailure as e:
                logger.warning("Line %s: could not store punch: %s", punch.line_no, e)
                return FAILED, f"Line {punch.line_no}: store error: {e}"
            except Exception as e:
                logger.exception("Line %s: unexpected error storing punch", punch.line_no)
                return FAILED, f"Line {punch.line_no}: store error: {e}"

    def ingest(
        self,
        rows: Sequence[RawPunchRow],
        *,
        overwrite: bool = False,
        now: Optional[datetime] = None,
    ) -> BatchResult:
        now = now or self._clock()
        result = BatchResult(total_processed=len(rows), diagnostic_limit=self._diagnostic_limit)

        normalized = self._normalize_all(rows, now, result)
        unique, result.duplicates_in_batch = dedupe_in_batch(normalized)
        if result.filtered:
            logger.info("Batch: %s row(s) in ignored punch categories", result.filtered)

        touched: set = set()
        with ThreadPoolExecutor(max_workers=self._group_size) as pool:
            for start in range(0, len(unique), self._group_size):
                group = unique[start:start + self._group_size]
                futures = [pool.submit(self._persist, p, overwrite) for p in group]
                for punch, fut in zip(group, futures):
                    outcome, message = fut.result()
                    if outcome == INSERTED:
                        result.inserted += 1
                    elif outcome == OVERWRITTEN:
                        result.overwritten += 1
                    elif outcome == DUPLICATE:
                        result.duplicates_skipped += 1
                        continue
                    else:
                        result.persistence_errors += 1
                        result.add_diagnostic(message)
                        continue
                    touched.add((punch.record.user_id, punch.record.work_date))

        if touched:
            result.materialization = self._materializer.materialize(touched, overwrite=overwrite, now=now)
            for failure in result.materialization.failures:
                result.add_diagnostic(failure)
            if self._verifier is not None:
                result.verification = self._verifier.verify(touched)

        logger.info(
            "Batch done: processed=%s inserted=%s overwritten=%s duplicates=%s/%s "
            "unmatched=%s malformed=%s filtered=%s errors=%s",
            result.total_processed, result.inserted, result.overwritten,
            result.duplicates_skipped, result.duplicates_in_batch,
            result.unmatched_identity, result.malformed_timestamp,
            result.filtered, result.persistence_errors,
        )
        return result

    def ingest_csv(self, data: bytes, *, overwrite: bool = False, now: Optional[datetime] = None) -> BatchResult:
        """Read a terminal CSV export; BatchFormatError propagates before any row is processed."""
        rows = self._reader.read_bytes(data)
        return self.ingest(rows, overwrite=overwrite, now=now)

    def submit_web_punch(
        self,
        user_id: int,
        kind: PunchKind,
        *,
        had_dinner: bool = False,
        location_text: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> BatchResult:
        now = now or self._clock()
        raw = RawPunchRow(
            line_no=1,
            date_text=now.strftime("%Y-%m-%d"),
            time_text=now.strftime("%H:%M:%S"),
            source=PunchSource.WEB,
            user_id=int(user_id),
            mode=PunchKind(kind).value,
            had_dinner=had_dinner,
            location_text=location_text,
        )
        return self.ingest([raw], now=now)
