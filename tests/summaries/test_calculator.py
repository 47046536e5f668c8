from datetime import date, datetime

import pytest

from src.attendance_engine.attendance_engine.core.enums import PunchSource
from src.attendance_engine.attendance_engine.policies.model import FlexibleWorkPeriod, PolicySnapshot, WorkPolicy
from src.attendance_engine.attendance_engine.policies.resolver import DayTypeResolver
from src.attendance_engine.attendance_engine.sessions.model import WorkSession
from src.attendance_engine.attendance_engine.summaries.calculator import (
    HourCalculator,
    break_minutes_for,
    night_overlap_hours,
)

from tests.fakes import FakeHolidayCalendar, FakeLeaveStore


@pytest.fixture()
def resolver():
    return DayTypeResolver(FakeHolidayCalendar(), FakeLeaveStore())


@pytest.fixture()
def calculate(resolver, make_punch):
    def _calculate(start, end, *, snapshot=None, source=PunchSource.TERMINAL, had_dinner=False):
        snapshot = snapshot or PolicySnapshot()
        check_in = make_punch(1, start, "CHECK_IN")
        check_out = make_punch(1, end, "CHECK_OUT", source=source, had_dinner=had_dinner)
        session = WorkSession(user_id=1, work_date=check_in.work_date, check_in=check_in, check_out=check_out)
        dates = {check_in.work_date, check_out.work_date}
        classifications = {d: resolver.resolve(1, d, snapshot) for d in dates}
        return HourCalculator().calculate(session, classifications, snapshot.policy)

    return _calculate


def test_weekday_split_after_lunch(calculate):
    result = calculate("2025-01-10 08:00", "2025-01-10 18:00")
    assert (result.basic, result.overtime) == (8.0, 1.0)
    assert result.break_minutes == 60
    assert not result.had_dinner


def test_flexible_threshold_changes_weekday_split(calculate):
    period = FlexibleWorkPeriod(1, date(2025, 1, 1), date(2025, 1, 31), 40, 9.0, datetime(2024, 12, 1))
    result = calculate("2025-01-10 08:00", "2025-01-10 18:00", snapshot=PolicySnapshot(flexible_periods=(period,)))
    assert (result.basic, result.overtime) == (9.0, 0.0)


def test_saturday_substitute_accrual(calculate):
    result = calculate("2025-01-11 07:00", "2025-01-11 18:00")
    assert result.basic == 10.0
    assert result.overtime == 0.0
    assert result.substitute == 11.0
    assert result.compensatory == 0.0


def test_sunday_compensatory_accrual(calculate):
    result = calculate("2025-01-12 07:00", "2025-01-12 18:00")
    assert result.basic == 10.0
    assert result.compensatory == 16.0
    assert result.substitute == 0.0


def test_cross_midnight_friday_into_saturday(calculate):
    result = calculate("2025-01-10 23:00", "2025-01-11 02:00")
    assert result.break_minutes == 0
    assert result.basic == 3.0
    assert result.overtime == 0.0
    assert result.night == 3.0
    # Saturday segment: 2h base + 2h night uplift at 0.5
    assert result.substitute == 3.0


def test_terminal_checkout_after_evening_confirms_dinner(calculate):
    result = calculate("2025-01-10 09:00", "2025-01-10 20:00")
    assert result.had_dinner
    assert result.break_minutes == 120
    assert (result.basic, result.overtime) == (8.0, 1.0)


def test_web_checkout_needs_dinner_flag(calculate):
    without = calculate("2025-01-10 09:00", "2025-01-10 20:00", source=PunchSource.WEB)
    with_flag = calculate("2025-01-10 09:00", "2025-01-10 20:00", source=PunchSource.WEB, had_dinner=True)
    assert without.break_minutes == 60
    assert with_flag.break_minutes == 120


def test_dinner_deducted_once_even_when_both_conditions_hold(calculate):
    result = calculate("2025-01-10 09:00", "2025-01-10 20:00", had_dinner=True)
    assert result.break_minutes == 120


def test_checkout_before_evening_has_no_dinner(calculate):
    result = calculate("2025-01-10 09:00", "2025-01-10 18:30", had_dinner=True)
    assert result.break_minutes == 60


def test_short_session_has_no_lunch(calculate):
    result = calculate("2025-01-10 09:00", "2025-01-10 12:30")
    assert result.break_minutes == 0
    assert result.basic == 3.5


def test_night_hours_are_tracked_on_weekdays(calculate):
    result = calculate("2025-01-10 14:00", "2025-01-10 23:30")
    assert result.night == 1.5
    assert result.break_minutes == 120


def test_night_overlap_covers_early_morning(policy):
    assert night_overlap_hours(datetime(2025, 1, 10, 4, 0), datetime(2025, 1, 10, 8, 0), policy) == 2.0
    assert night_overlap_hours(datetime(2025, 1, 10, 21, 0), datetime(2025, 1, 11, 7, 0), policy) == 8.0


def test_incomplete_session_yields_zero_hours(resolver, make_punch):
    session = WorkSession(user_id=1, work_date=date(2025, 1, 10), check_in=make_punch(1, "2025-01-10 09:00", "CHECK_IN"))
    classifications = {date(2025, 1, 10): resolver.resolve(1, date(2025, 1, 10), PolicySnapshot())}
    result = HourCalculator().calculate(session, classifications, WorkPolicy())
    assert (result.basic, result.overtime, result.night) == (0.0, 0.0, 0.0)


def test_break_rule_thresholds_follow_policy(make_punch):
    policy = WorkPolicy(lunch_min_span_hours=6.0, lunch_break_minutes=30)
    session = WorkSession(
        user_id=1,
        work_date=date(2025, 1, 10),
        check_in=make_punch(1, "2025-01-10 09:00", "CHECK_IN"),
        check_out=make_punch(1, "2025-01-10 15:00", "CHECK_OUT"),
    )
    assert break_minutes_for(session, policy) == (30, False)
