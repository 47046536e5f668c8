from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional

from ..common.datetime_utils import following_sunday, month_bounds, month_key, now_local
from ..common.locks import KeyedLocks
from ..core.constants import DEFAULT_PERSIST_GROUP_SIZE
from ..core.enums import WorkStatus
from ..policies.model import DayClassification, PolicySnapshot
from ..policies.resolver import DayTypeResolver
from ..punches.model import PunchRecord
from ..punches.repository import PunchRepository
from ..sessions.pairer import SessionPairer
from ..sessions.splitter import split_at_midnight
from .calculator import HourCalculator
from .model import DailyWorkSummary, MonthlyWorkStats
from .repository import SummaryRepository

logger = logging.getLogger(__name__)

Key = tuple[int, date]


@dataclass
class MaterializationReport:
    daily_written: int = 0
    daily_deleted: int = 0
    monthly_written: int = 0
    monthly_deleted: int = 0
    failures: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "daily_written": self.daily_written,
            "daily_deleted": self.daily_deleted,
            "monthly_written": self.monthly_written,
            "monthly_deleted": self.monthly_deleted,
            "failures": list(self.failures),
            "warnings": list(self.warnings),
        }


class AggregateMaterializer:
    """Recompute daily and monthly aggregates from persisted punches.

    Rows are derived only from the punches and the policy snapshot, never
    from an earlier summary value (except the preceding week's stored hours,
    which decide a Sunday's paid-rest status). Keys are processed in three
    phases: Monday to Saturday, then Sundays, then the affected months.
    """

    def __init__(
        self,
        punches: PunchRepository,
        summaries: SummaryRepository,
        resolver: DayTypeResolver,
        *,
        snapshot_provider: Callable[[], PolicySnapshot],
        pairer: Optional[SessionPairer] = None,
        calculator: Optional[HourCalculator] = None,
        locks: Optional[KeyedLocks] = None,
        max_workers: int = DEFAULT_PERSIST_GROUP_SIZE,
    ):
        self._punches = punches
        self._summaries = summaries
        self._resolver = resolver
        self._snapshot_provider = snapshot_provider
        self._pairer = pairer or SessionPairer()
        self._calculator = calculator or HourCalculator()
        self._locks = locks or KeyedLocks()
        self._max_workers = max(1, int(max_workers))

    def _preceding_week_hours(self, user_id: int, sunday: date) -> float:
        rows = self._summaries.list_daily(user_id, sunday - timedelta(days=6), sunday - timedelta(days=1))
        return sum(r.work_hours for r in rows)

    def _punches_by_date(self, user_id: int, work_date: date) -> dict[date, list[PunchRecord]]:
        grouped: dict[date, list[PunchRecord]] = defaultdict(list)
        for p in self._punches.list_for_user_dates(
            user_id, work_date - timedelta(days=1), work_date + timedelta(days=1)
        ):
            grouped[p.work_date].append(p)
        return grouped

    def compute_daily(
        self,
        user_id: int,
        work_date: date,
        snapshot: PolicySnapshot,
        *,
        now: datetime,
    ) -> Optional[DailyWorkSummary]:
        """Build the summary row for one key; None means the key has no row."""
        policy = snapshot.policy
        grouped = self._punches_by_date(user_id, work_date)
        previous_day = grouped.get(work_date - timedelta(days=1), [])
        next_day = grouped.get(work_date + timedelta(days=1), [])
        own = self._pairer.release_claimed(user_id, work_date, grouped.get(work_date, []), previous_day)

        week_hours = self._preceding_week_hours(user_id, work_date) if work_date.weekday() == 6 else None
        head = self._resolver.resolve(user_id, work_date, snapshot, preceding_week_hours=week_hours)

        session = self._pairer.pair(user_id, work_date, own, next_day=next_day)
        session = split_at_midnight(session, long_span_warning_hours=policy.long_span_warning_hours)

        base = dict(
            user_id=user_id,
            work_date=work_date,
            day_type=head.day_type,
            calculated_at=now,
        )

        if session.state == WorkStatus.NO_RECORD:
            if head.leave is not None:
                return DailyWorkSummary(
                    **base,
                    check_in_time=None,
                    check_out_time=None,
                    basic_hours=head.leave_hours,
                    overtime_hours=0.0,
                    night_hours=0.0,
                    substitute_hours=0.0,
                    compensatory_hours=0.0,
                    work_status=WorkStatus.LEAVE,
                    had_dinner=False,
                    note=head.leave.leave_type,
                )
            if head.paid_rest_eligible:
                return DailyWorkSummary(
                    **base,
                    check_in_time=None,
                    check_out_time=None,
                    basic_hours=policy.paid_rest_day_hours,
                    overtime_hours=0.0,
                    night_hours=0.0,
                    substitute_hours=0.0,
                    compensatory_hours=0.0,
                    work_status=WorkStatus.PAID_REST_DAY,
                    had_dinner=False,
                    paid_rest_flag=True,
                )
            if not own:
                return None

        classifications: dict[date, DayClassification] = {work_date: head}
        for seg in session.segments:
            if seg.work_date not in classifications:
                classifications[seg.work_date] = self._resolver.resolve(user_id, seg.work_date, snapshot)

        hours = self._calculator.calculate(session, classifications, policy)
        if hours.warnings:
            logger.warning("User %s %s: %s", user_id, work_date, "; ".join(hours.warnings))

        return DailyWorkSummary(
            **base,
            check_in_time=session.check_in.local_time if session.check_in else None,
            check_out_time=session.check_out.local_time if session.check_out else None,
            basic_hours=hours.basic,
            overtime_hours=hours.overtime,
            night_hours=hours.night,
            substitute_hours=hours.substitute,
            compensatory_hours=hours.compensatory,
            work_status=session.state,
            had_dinner=hours.had_dinner,
            paid_rest_flag=head.paid_rest_eligible and session.is_complete,
            break_minutes=hours.break_minutes,
            note="; ".join(hours.warnings) or None,
        )

    def expand_keys(self, keys: Iterable[Key], *, today: date) -> set[Key]:
        """Add the neighbouring days with punches and the following Sunday of each key.

        A changed punch can move a cross-midnight check-out between adjacent
        days, and Monday to Saturday hours decide the Sunday's paid-rest status.
        """
        expanded: set[Key] = set()
        for user_id, d in keys:
            expanded.add((user_id, d))
            for neighbour in self._punches.dates_with_punches(user_id, d - timedelta(days=1), d + timedelta(days=1)):
                expanded.add((user_id, neighbour))
        for user_id, d in list(expanded):
            sunday = following_sunday(d)
            if sunday != d and sunday <= today:
                expanded.add((user_id, sunday))
        return expanded

    def _write_key(self, key: Key, snapshot: PolicySnapshot, overwrite: bool, now: datetime) -> tuple[str, Optional[DailyWorkSummary]]:
        user_id, work_date = key
        with self._locks.hold(key):
            summary = self.compute_daily(user_id, work_date, snapshot, now=now)
            if summary is None:
                deleted = self._summaries.delete_daily(user_id, work_date)
                return ("deleted" if deleted else "empty"), None
            if overwrite:
                self._summaries.replace_daily(summary)
            else:
                self._summaries.upsert_daily(summary)
            return "written", summary

    def _run_phase(
        self,
        keys: list[Key],
        snapshot: PolicySnapshot,
        overwrite: bool,
        now: datetime,
        report: MaterializationReport,
    ) -> None:
        if not keys:
            return
        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(keys))) as pool:
            futures = {key: pool.submit(self._write_key, key, snapshot, overwrite, now) for key in keys}
            for key, fut in futures.items():
                try:
                    outcome, summary = fut.result()
                except Exception as e:
                    msg = f"Recompute failed for user {key[0]} on {key[1]}: {e}"
                    logger.warning(msg)
                    report.failures.append(msg)
                    continue
                if outcome == "written":
                    report.daily_written += 1
                    if summary.note:
                        report.warnings.append(f"User {key[0]} {key[1]}: {summary.note}")
                elif outcome == "deleted":
                    report.daily_deleted += 1

    def _recompute_month(self, user_id: int, work_month: str, now: datetime, report: MaterializationReport) -> None:
        first, last = month_bounds(work_month)
        try:
            with self._locks.hold((user_id, work_month)):
                rows = self._summaries.list_daily(user_id, first, last)
                if rows:
                    self._summaries.replace_monthly(
                        MonthlyWorkStats.from_daily(user_id, work_month, rows, calculated_at=now)
                    )
                    report.monthly_written += 1
                elif self._summaries.delete_monthly(user_id, work_month):
                    report.monthly_deleted += 1
        except Exception as e:
            msg = f"Monthly recompute failed for user {user_id} {work_month}: {e}"
            logger.warning(msg)
            report.failures.append(msg)

    def materialize(
        self,
        keys: Iterable[Key],
        *,
        overwrite: bool = False,
        now: Optional[datetime] = None,
        snapshot: Optional[PolicySnapshot] = None,
    ) -> MaterializationReport:
        now = now or now_local()
        snapshot = snapshot or self._snapshot_provider()
        report = MaterializationReport()

        expanded = sorted(self.expand_keys(keys, today=now.date()))
        weekdays = [k for k in expanded if k[1].weekday() != 6]
        sundays = [k for k in expanded if k[1].weekday() == 6]

        self._run_phase(weekdays, snapshot, overwrite, now, report)
        self._run_phase(sundays, snapshot, overwrite, now, report)

        for user_id, work_month in sorted({(u, month_key(d)) for u, d in expanded}):
            self._recompute_month(user_id, work_month, now, report)

        logger.info(
            "Materialized %s key(s): %s written, %s deleted, %s month(s), %s failure(s)",
            len(expanded), report.daily_written, report.daily_deleted,
            report.monthly_written, len(report.failures),
        )
        return report

    def recompute_range(
        self,
        user_id: int,
        start: date,
        end: date,
        *,
        now: Optional[datetime] = None,
    ) -> MaterializationReport:
        """Re-materialize every day in [start, end] for one user from its punches."""
        if end < start:
            start, end = end, start
        days = (end - start).days
        keys = [(int(user_id), start + timedelta(days=i)) for i in range(days + 1)]
        return self.materialize(keys, overwrite=True, now=now)
