from datetime import datetime

import pytest

from src.attendance_engine.attendance_engine.core.enums import IdentityMatch, PunchKind, PunchSource, RejectReason
from src.attendance_engine.attendance_engine.core.exceptions import PunchRejected
from src.attendance_engine.attendance_engine.punches.model import RawPunchRow
from src.attendance_engine.attendance_engine.punches.normalizer import PunchNormalizer

from tests.fakes import FakeUserDirectory


@pytest.fixture()
def normalizer(employees):
    return PunchNormalizer(FakeUserDirectory(employees))


def _row(**kwargs):
    base = dict(line_no=2, date_text="2025-01-10", time_text="09:00:00", employee_number="E1001", mode="해제")
    base.update(kwargs)
    return RawPunchRow(**base)


def test_terminal_row_becomes_check_in(normalizer, fixed_now):
    punch = normalizer.normalize(_row(), now=fixed_now)
    assert punch.record.user_id == 1
    assert punch.record.kind == PunchKind.CHECK_IN
    assert punch.record.timestamp == datetime(2025, 1, 10, 9, 0)
    assert punch.matched_by == IdentityMatch.EMPLOYEE_NUMBER


def test_mode_takes_precedence_over_category(normalizer, fixed_now):
    punch = normalizer.normalize(_row(mode="세트", category="출근"), now=fixed_now)
    assert punch.record.kind == PunchKind.CHECK_OUT


def test_category_used_when_mode_missing(normalizer, fixed_now):
    punch = normalizer.normalize(_row(mode=None, category="퇴근"), now=fixed_now)
    assert punch.record.kind == PunchKind.CHECK_OUT


def test_ignored_category_is_filtered_not_rejected(normalizer, fixed_now):
    assert normalizer.normalize(_row(mode=None, category="출입"), now=fixed_now) is None
    assert normalizer.normalize(_row(mode=None, category="General"), now=fixed_now) is None


def test_ignored_categories_are_configurable(employees, fixed_now):
    strict = PunchNormalizer(FakeUserDirectory(employees), ignored_categories=())
    with pytest.raises(PunchRejected) as exc:
        strict.normalize(_row(mode=None, category="출입"), now=fixed_now)
    assert exc.value.reason == RejectReason.UNCLASSIFIED_PUNCH


def test_unknown_vocabulary_is_unclassified(normalizer, fixed_now):
    with pytest.raises(PunchRejected) as exc:
        normalizer.normalize(_row(mode="??", category="???"), now=fixed_now)
    assert exc.value.reason == RejectReason.UNCLASSIFIED_PUNCH


def test_identity_falls_back_to_name(normalizer, fixed_now):
    punch = normalizer.normalize(_row(employee_number="E9999", name="이지은"), now=fixed_now)
    assert punch.record.user_id == 2
    assert punch.matched_by == IdentityMatch.NAME


def test_unmatched_identity_is_rejected(normalizer, fixed_now):
    with pytest.raises(PunchRejected) as exc:
        normalizer.normalize(_row(employee_number="E9999", name="홍길동"), now=fixed_now)
    assert exc.value.reason == RejectReason.UNMATCHED_IDENTITY


def test_malformed_time_is_rejected(normalizer, fixed_now):
    with pytest.raises(PunchRejected) as exc:
        normalizer.normalize(_row(time_text="9시 5분"), now=fixed_now)
    assert exc.value.reason == RejectReason.MALFORMED_TIMESTAMP


def test_future_timestamp_uses_reference_clock(normalizer, fixed_now):
    within_tolerance = _row(date_text="2025-02-01", time_text="12:04:00")
    assert normalizer.normalize(within_tolerance, now=fixed_now) is not None

    with pytest.raises(PunchRejected) as exc:
        normalizer.normalize(_row(date_text="2025-02-01", time_text="12:30:00"), now=fixed_now)
    assert exc.value.reason == RejectReason.FUTURE_TIMESTAMP


def test_web_punch_carries_location_and_dinner(normalizer, fixed_now):
    raw = _row(
        source=PunchSource.WEB,
        employee_number=None,
        user_id=3,
        mode="CHECK_OUT",
        had_dinner=True,
        location_text="lat: 37.5 lng: 127.0",
    )
    punch = normalizer.normalize(raw, now=fixed_now)
    assert punch.matched_by == IdentityMatch.USER_ID
    assert punch.record.had_dinner is True
    assert (punch.record.location_lat, punch.record.location_lng) == (37.5, 127.0)


def test_location_ignored_for_terminal_rows(normalizer, fixed_now):
    punch = normalizer.normalize(_row(location_text="37.5, 127.0"), now=fixed_now)
    assert punch.record.location_lat is None
