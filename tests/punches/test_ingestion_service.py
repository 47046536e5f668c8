import threading
from datetime import date, datetime, time

import pytest

from src.attendance_engine.attendance_engine.core.enums import PunchKind, PunchSource
from src.attendance_engine.attendance_engine.core.exceptions import BatchFormatError
from src.attendance_engine.attendance_engine.punches.model import RawPunchRow

FRIDAY = date(2025, 1, 10)


def _raw(line_no, when, mode, *, employee_number="E1001", name=None, category=None):
    d, t = when.split(" ")
    return RawPunchRow(
        line_no=line_no,
        date_text=d,
        time_text=t,
        employee_number=employee_number,
        name=name,
        mode=mode,
        category=category,
    )


@pytest.fixture()
def workday():
    return [
        _raw(2, "2025-01-10 08:00:00", "해제"),
        _raw(3, "2025-01-10 18:00:00", "세트"),
    ]


def test_counts_for_a_mixed_batch(engine, fixed_now):
    rows = [
        _raw(2, "2025-01-10 08:00:00", "해제"),
        _raw(3, "2025-01-10 08:00:00", "해제"),
        _raw(4, "2025-01-10 18:00:00", "세트"),
        _raw(5, "2025-01-10 09:00:00", "해제", employee_number=None, name="이지은"),
        _raw(6, "2025-01-10 09:00:00", "해제", employee_number="E404", name="홍길동"),
        _raw(7, "2025-01-10 25:00:00", "해제"),
        _raw(8, "2025-01-10 12:00:00", None, category="출입"),
    ]

    result = engine.ingestion.ingest(rows, now=fixed_now)

    assert result.total_processed == 7
    assert result.inserted == 3
    assert result.duplicates_in_batch == 1
    assert result.unmatched_identity == 1
    assert result.malformed_timestamp == 1
    assert result.filtered == 1
    assert result.matched_by_employee_number == 3
    assert result.matched_by_name == 1
    assert result.persistence_errors == 0
    assert any(d.startswith("Line 6:") for d in result.diagnostics)
    assert engine.summaries.get_daily(1, FRIDAY).basic_hours == 8.0
    assert engine.summaries.get_daily(2, FRIDAY).work_status.value == "CHECKOUT_MISSING"


def test_second_run_only_counts_duplicates(engine, workday, fixed_now):
    engine.ingestion.ingest(workday, now=fixed_now)
    daily = dict(engine.summaries.daily)
    monthly = dict(engine.summaries.monthly)

    again = engine.ingestion.ingest(workday, now=fixed_now)

    assert again.inserted == 0
    assert again.duplicates_skipped == 2
    assert again.materialization is None
    assert engine.summaries.daily == daily
    assert engine.summaries.monthly == monthly
    assert len(engine.punches.records) == 2


def test_overwrite_replaces_stored_punches(engine, workday, fixed_now):
    engine.ingestion.ingest(workday, now=fixed_now)

    result = engine.ingestion.ingest(workday, overwrite=True, now=fixed_now)

    assert result.overwritten == 2
    assert result.inserted == 0
    assert len(engine.punches.records) == 2
    assert engine.summaries.replace_calls >= 1


def test_store_failure_is_counted_and_batch_continues(engine, workday, make_punch, fixed_now):
    engine.punches.failing_keys.add(make_punch(1, "2025-01-10 18:00", "CHECK_OUT").key)

    result = engine.ingestion.ingest(workday, now=fixed_now)

    assert result.inserted == 1
    assert result.persistence_errors == 1
    assert any("store error" in d for d in result.diagnostics)
    assert engine.summaries.get_daily(1, FRIDAY).work_status.value == "CHECKOUT_MISSING"


def test_unexpected_store_error_is_counted_and_batch_continues(engine, workday, make_punch, fixed_now):
    engine.punches.crashing_keys.add(make_punch(1, "2025-01-10 18:00", "CHECK_OUT").key)

    result = engine.ingestion.ingest(workday, now=fixed_now)

    assert result.inserted == 1
    assert result.persistence_errors == 1
    assert any("driver returned no row id" in d for d in result.diagnostics)
    assert result.materialization is not None
    assert engine.summaries.get_daily(1, FRIDAY).work_status.value == "CHECKOUT_MISSING"


def test_concurrent_batches_for_the_same_day_settle_on_one_summary(engine, fixed_now):
    first = [_raw(2, "2025-01-10 08:00:00", "해제"), _raw(3, "2025-01-10 18:00:00", "세트")]
    second = [_raw(2, "2025-01-10 08:00:00", "해제"), _raw(3, "2025-01-10 19:00:00", "세트")]
    start = threading.Barrier(2)
    results = []

    def run(rows):
        start.wait()
        results.append(engine.ingestion.ingest(rows, now=fixed_now))

    threads = [threading.Thread(target=run, args=(rows,)) for rows in (first, second)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(r.inserted for r in results) == 3
    assert sum(r.duplicates_skipped for r in results) == 1
    row = engine.summaries.get_daily(1, FRIDAY)
    assert row.check_out_time == time(19, 0)
    assert row.break_minutes == 120
    assert (row.basic_hours, row.overtime_hours) == (8.0, 1.0)
    month = engine.summaries.get_monthly(1, "2025-01")
    assert (month.worked_days, month.total_work_hours) == (1, 9.0)


def test_diagnostics_are_bounded(engine, fixed_now):
    rows = [_raw(i, "2025-01-10 08:00:00", "해제", employee_number=f"X{i}") for i in range(2, 12)]

    result = engine.ingestion.ingest(rows, now=fixed_now)

    assert result.unmatched_identity == 10
    assert len(result.diagnostics) == 5


def test_future_punch_counts_as_malformed(engine, fixed_now):
    result = engine.ingestion.ingest([_raw(2, "2025-03-01 08:00:00", "해제")], now=fixed_now)
    assert result.malformed_timestamp == 1
    assert result.inserted == 0


def test_verification_runs_after_materialization(engine, workday, fixed_now):
    result = engine.ingestion.ingest(workday, now=fixed_now)
    assert result.verification.checked == 1
    assert result.verification.mismatches == 0


def test_web_punch_flows_through_the_pipeline(engine):
    morning = datetime(2025, 1, 10, 9, 0)
    evening = datetime(2025, 1, 10, 20, 0)

    first = engine.ingestion.submit_web_punch(3, PunchKind.CHECK_IN, now=morning)
    second = engine.ingestion.submit_web_punch(
        3, PunchKind.CHECK_OUT, had_dinner=True, location_text="37.5, 127.0", now=evening
    )

    assert first.inserted == second.inserted == 1
    stored = [r for r in engine.punches.records.values() if r.user_id == 3]
    assert {r.source for r in stored} == {PunchSource.WEB}
    row = engine.summaries.get_daily(3, FRIDAY)
    assert row.had_dinner
    assert (row.basic_hours, row.overtime_hours) == (8.0, 1.0)


def test_csv_with_bad_header_is_rejected_before_processing(engine, fixed_now):
    with pytest.raises(BatchFormatError):
        engine.ingestion.ingest_csv("이름,사원번호\n김민수,E1001\n".encode("utf-8"), now=fixed_now)
    assert engine.punches.records == {}


def test_csv_batch_end_to_end(engine, fixed_now):
    body = "\n".join(
        [
            "발생일자,발생시각,단말기ID,사용자ID,이름,사원번호,직급,구분,모드,인증,결과",
            "2025. 1. 10.,오전 8:59:00,T01,17,김민수,E1001,사원,출근,해제,카드,성공",
            "2025. 1. 10.,오전 9:03:00,T01,17,김민수,E1001,사원,퇴근,세트,카드,성공",
            "2025. 1. 10.,오전 9:05:00,T01,17,김민수,E1001,사원,출근,해제,카드,성공",
            "2025. 1. 10.,오후 6:00:00,T01,17,김민수,E1001,사원,퇴근,세트,카드,성공",
        ]
    )
    result = engine.ingestion.ingest_csv(body.encode("utf-8"), now=fixed_now)

    assert result.inserted == 4
    row = engine.summaries.get_daily(1, FRIDAY)
    assert row.check_in_time.strftime("%H:%M") == "09:05"
    assert row.basic_hours == 7.9
