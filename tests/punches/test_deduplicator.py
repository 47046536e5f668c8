from src.attendance_engine.attendance_engine.core.enums import IdentityMatch
from src.attendance_engine.attendance_engine.punches.deduplicator import dedupe_in_batch
from src.attendance_engine.attendance_engine.punches.model import NormalizedPunch


def test_collapses_identical_keys_to_first_occurrence(make_punch):
    a = NormalizedPunch(make_punch(1, "2025-01-10 09:00", "CHECK_IN"), IdentityMatch.EMPLOYEE_NUMBER, 2)
    b = NormalizedPunch(make_punch(1, "2025-01-10 09:00", "CHECK_IN"), IdentityMatch.NAME, 3)
    c = NormalizedPunch(make_punch(1, "2025-01-10 09:00", "CHECK_OUT"), IdentityMatch.EMPLOYEE_NUMBER, 4)

    unique, dropped = dedupe_in_batch([a, b, c, b])

    assert dropped == 2
    assert [p.line_no for p in unique] == [2, 4]


def test_output_is_chronological(make_punch):
    late = NormalizedPunch(make_punch(1, "2025-01-10 18:00", "CHECK_OUT"), IdentityMatch.EMPLOYEE_NUMBER, 2)
    early = NormalizedPunch(make_punch(1, "2025-01-10 09:00", "CHECK_IN"), IdentityMatch.EMPLOYEE_NUMBER, 3)

    unique, dropped = dedupe_in_batch([late, early])

    assert dropped == 0
    assert [p.line_no for p in unique] == [3, 2]
