from __future__ import annotations

from datetime import date, datetime
from types import SimpleNamespace

import pytest

from src.attendance_engine.attendance_engine.common.locks import KeyedLocks
from src.attendance_engine.attendance_engine.core.enums import PunchKind, PunchSource
from src.attendance_engine.attendance_engine.policies.model import PolicySnapshot, WorkPolicy
from src.attendance_engine.attendance_engine.policies.resolver import DayTypeResolver
from src.attendance_engine.attendance_engine.punches.model import PunchRecord
from src.attendance_engine.attendance_engine.punches.normalizer import PunchNormalizer
from src.attendance_engine.attendance_engine.punches.service import BatchIngestionService
from src.attendance_engine.attendance_engine.summaries.service import AggregateMaterializer
from src.attendance_engine.attendance_engine.summaries.verifier import SummaryVerifier
from src.attendance_engine.attendance_engine.users.model import Employee

from tests.fakes import (
    FakeHolidayCalendar,
    FakeLeaveStore,
    FakePunchRepository,
    FakeSummaryRepository,
    FakeUserDirectory,
)


@pytest.fixture()
def fixed_now():
    return datetime(2025, 2, 1, 12, 0, 0)


@pytest.fixture()
def employees():
    return [
        Employee(user_id=1, full_name="김민수", employee_number="E1001"),
        Employee(user_id=2, full_name="이지은", employee_number="E1002"),
        Employee(user_id=3, full_name="박서준", employee_number=None),
    ]


@pytest.fixture()
def policy():
    return WorkPolicy()


@pytest.fixture()
def make_punch():
    def _make(user_id, when, kind, *, source=PunchSource.TERMINAL, had_dinner=False):
        ts = datetime.strptime(when, "%Y-%m-%d %H:%M")
        return PunchRecord(
            user_id=user_id,
            work_date=ts.date(),
            local_time=ts.time(),
            timestamp=ts,
            kind=PunchKind(kind),
            source=source,
            had_dinner=had_dinner,
        )

    return _make


@pytest.fixture()
def engine(employees, policy):
    """Fully wired engine over in-memory stores."""
    holidays = FakeHolidayCalendar()
    leaves = FakeLeaveStore()
    punches = FakePunchRepository()
    summaries = FakeSummaryRepository()
    periods: list = []
    locks = KeyedLocks()

    materializer = AggregateMaterializer(
        punches,
        summaries,
        DayTypeResolver(holidays, leaves),
        snapshot_provider=lambda: PolicySnapshot(policy=policy, flexible_periods=tuple(periods)),
        locks=locks,
        max_workers=4,
    )
    verifier = SummaryVerifier(punches, summaries, policy=policy)
    ingestion = BatchIngestionService(
        PunchNormalizer(FakeUserDirectory(employees), ignored_categories=policy.ignored_punch_categories),
        punches,
        materializer,
        verifier=verifier,
        locks=locks,
        group_size=3,
        diagnostic_limit=5,
    )
    return SimpleNamespace(
        holidays=holidays,
        leaves=leaves,
        punches=punches,
        summaries=summaries,
        periods=periods,
        materializer=materializer,
        verifier=verifier,
        ingestion=ingestion,
    )


@pytest.fixture()
def day():
    def _day(text):
        return date.fromisoformat(text)

    return _day
