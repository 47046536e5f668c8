import pytest

from src.attendance_engine.attendance_engine.core.exceptions import BatchFormatError
from src.attendance_engine.attendance_engine.punches.csv_reader import PunchCsvReader

CAPS_HEADER = "발생일자,발생시각,단말기ID,사용자ID,이름,사원번호,직급,구분,모드,인증,결과"


def test_reads_caps_export():
    text = "\n".join(
        [
            CAPS_HEADER,
            "2025. 1. 10.,오전 9:05:00,T01,17,김민수,E1001,사원,출근,해제,카드,성공",
            "",
            "2025. 1. 10.,오후 6:00:00,T01,17,김민수,E1001,사원,퇴근,세트,카드,성공",
        ]
    )
    rows = PunchCsvReader().read_text(text)

    assert len(rows) == 2
    first = rows[0]
    assert first.line_no == 2
    assert (first.date_text, first.time_text) == ("2025. 1. 10.", "오전 9:05:00")
    assert (first.employee_number, first.name) == ("E1001", "김민수")
    assert (first.category, first.mode, first.terminal_id) == ("출근", "해제", "T01")
    assert first.user_id is None
    assert rows[1].line_no == 4


def test_reads_english_header_with_optional_columns():
    text = "date,time,name,category,mode,had_dinner,location\n2025-01-10,19:30,이지은,,CheckOut,yes,\"37.5, 127.0\"\n"
    [row] = PunchCsvReader().read_text(text)
    assert row.had_dinner is True
    assert row.location_text == "37.5, 127.0"
    assert row.employee_number is None


def test_bom_and_cp949_bytes_are_decoded():
    body = CAPS_HEADER + "\n2025-01-10,09:00,T01,1,김민수,E1001,,출근,해제,,\n"
    assert PunchCsvReader().read_bytes(("﻿" + body).encode("utf-8"))[0].name == "김민수"
    assert PunchCsvReader().read_bytes(body.encode("cp949"))[0].name == "김민수"


def test_missing_required_column_fails_the_batch():
    with pytest.raises(BatchFormatError) as exc:
        PunchCsvReader().read_text("date,time,name\n2025-01-10,09:00,김민수\n")
    assert "category" in str(exc.value)


def test_empty_file_fails_the_batch():
    with pytest.raises(BatchFormatError):
        PunchCsvReader().read_text("")


def test_short_row_is_passed_on_as_malformed():
    [row] = PunchCsvReader().read_text(CAPS_HEADER + "\n2025-01-10,09:00,T01\n")
    assert row.date_text == ""
    assert row.line_no == 2
