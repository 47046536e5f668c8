from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .common.locks import KeyedLocks
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .holidays.mysql_holiday_repository import MySQLHolidayCalendar
from .leaves.mysql_leave_repository import MySQLLeaveApprovalStore
from .policies.model import PolicySnapshot, WorkPolicy
from .policies.mysql_flexible_period_repository import MySQLFlexibleWorkPeriodStore
from .policies.resolver import DayTypeResolver
from .punches.mysql_punch_repository import MySQLPunchRepository
from .punches.normalizer import PunchNormalizer
from .punches.service import BatchIngestionService
from .sessions.pairer import SessionPairer
from .summaries.calculator import HourCalculator
from .summaries.factory import HoursStrategyFactory
from .summaries.mysql_summary_repository import MySQLSummaryRepository
from .summaries.service import AggregateMaterializer
from .summaries.verifier import SummaryVerifier
from .users.mysql_user_repository import MySQLUserDirectory


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    policy: WorkPolicy

    users_repo: MySQLUserDirectory
    holidays_repo: MySQLHolidayCalendar
    leaves_repo: MySQLLeaveApprovalStore
    periods_repo: MySQLFlexibleWorkPeriodStore
    punches_repo: MySQLPunchRepository
    summaries_repo: MySQLSummaryRepository

    materializer: AggregateMaterializer
    verifier: SummaryVerifier
    ingestion_service: BatchIngestionService


def build_container(*, db_config: dict, engine: Optional[Mapping[str, Any]] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    engine = dict(engine or {})
    policy = WorkPolicy.from_settings(engine)
    group_size = int(engine.get("PERSIST_GROUP_SIZE", constants.DEFAULT_PERSIST_GROUP_SIZE))

    users_repo = MySQLUserDirectory(conn)
    holidays_repo = MySQLHolidayCalendar(conn)
    leaves_repo = MySQLLeaveApprovalStore(conn)
    periods_repo = MySQLFlexibleWorkPeriodStore(conn)
    punches_repo = MySQLPunchRepository(conn)
    summaries_repo = MySQLSummaryRepository(conn)

    def snapshot() -> PolicySnapshot:
        # Read once per batch so a batch never sees two configurations.
        return PolicySnapshot(policy=policy, flexible_periods=tuple(periods_repo.list_periods()))

    locks = KeyedLocks()
    pairer = SessionPairer(
        ghost_window_minutes=policy.ghost_pair_window_minutes,
        max_overnight_span_hours=policy.max_overnight_span_hours,
    )
    materializer = AggregateMaterializer(
        punches_repo,
        summaries_repo,
        DayTypeResolver(holidays_repo, leaves_repo),
        snapshot_provider=snapshot,
        pairer=pairer,
        calculator=HourCalculator(strategy_factory=HoursStrategyFactory()),
        locks=locks,
        max_workers=group_size,
    )
    verifier = SummaryVerifier(
        punches_repo,
        summaries_repo,
        policy=policy,
        pairer=pairer,
        sample_size=int(engine.get("VERIFY_SAMPLE_SIZE", constants.DEFAULT_VERIFY_SAMPLE_SIZE)),
        tolerance_hours=float(engine.get("VERIFY_TOLERANCE_HOURS", constants.DEFAULT_VERIFY_TOLERANCE_HOURS)),
    )
    ingestion_service = BatchIngestionService(
        PunchNormalizer(users_repo, ignored_categories=policy.ignored_punch_categories),
        punches_repo,
        materializer,
        verifier=verifier,
        locks=locks,
        group_size=group_size,
        diagnostic_limit=int(engine.get("DIAGNOSTIC_LIMIT", constants.DEFAULT_DIAGNOSTIC_LIMIT)),
    )

    return Container(
        conn=conn,
        policy=policy,
        users_repo=users_repo,
        holidays_repo=holidays_repo,
        leaves_repo=leaves_repo,
        periods_repo=periods_repo,
        punches_repo=punches_repo,
        summaries_repo=summaries_repo,
        materializer=materializer,
        verifier=verifier,
        ingestion_service=ingestion_service,
    )
