from __future__ import annotations

import csv
import io
import logging
from typing import Iterator, Optional, TextIO

from ..common.validators import require_columns
from ..core.enums import PunchSource
from ..core.exceptions import BatchFormatError
from .model import RawPunchRow

logger = logging.getLogger(__name__)

# Terminal export header (CAPS) with the English names accepted for the same columns.
HEADER_ALIASES = {
    "발생일자": "date",
    "발생시각": "time",
    "단말기id": "terminal_id",
    "사용자id": "user_id",
    "이름": "name",
    "사원번호": "employee_number",
    "직급": "position",
    "구분": "category",
    "모드": "mode",
    "인증": "auth",
    "결과": "result",
    "저녁식사": "had_dinner",
    "위치": "location",
    "date": "date",
    "time": "time",
    "terminal_id": "terminal_id",
    "user_id": "user_id",
    "name": "name",
    "employee_number": "employee_number",
    "position": "position",
    "category": "category",
    "mode": "mode",
    "auth": "auth",
    "result": "result",
    "had_dinner": "had_dinner",
    "location": "location",
}

REQUIRED_COLUMNS = ("date", "time", "category", "mode")

_TRUTHY = {"1", "y", "yes", "true", "o", "예"}


def _canonical(name: str) -> str:
    key = (name or "").strip().lstrip("﻿").replace(" ", "").lower()
    return HEADER_ALIASES.get(key, key)


def _opt(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


class PunchCsvReader:
    """Read a terminal CSV export into RawPunchRow objects.

    The header is validated eagerly: a missing required column or an empty
    file raises BatchFormatError before any row is returned. Rows with fewer
    cells than the header are yielded with an empty date so the normalizer
    rejects them as malformed.
    """

    def __init__(self, *, source: PunchSource = PunchSource.TERMINAL):
        self._source = source

    def read_text(self, text: str) -> list[RawPunchRow]:
        return self.read(io.StringIO(text))

    def read_bytes(self, data: bytes) -> list[RawPunchRow]:
        for encoding in ("utf-8-sig", "cp949"):
            try:
                return self.read_text(data.decode(encoding))
            except UnicodeDecodeError:
                continue
        raise BatchFormatError("Uploaded file is neither UTF-8 nor CP949 encoded")

    def read(self, stream: TextIO) -> list[RawPunchRow]:
        return list(self._iter_rows(stream))

    def _iter_rows(self, stream: TextIO) -> Iterator[RawPunchRow]:
        reader = csv.reader(stream)
        header = next(reader, None)
        if not header or not any(cell.strip() for cell in header):
            raise BatchFormatError("Empty batch: no header row")

        columns = [_canonical(c) for c in header]
        require_columns(columns, REQUIRED_COLUMNS)
        width = len(columns)

        for line_no, cells in enumerate(reader, start=2):
            if not any(c.strip() for c in cells):
                continue
            if len(cells) < width:
                logger.info("Line %s: expected %s columns, got %s", line_no, width, len(cells))
                yield RawPunchRow(line_no=line_no, date_text="", time_text="", source=self._source)
                continue

            row = dict(zip(columns, cells))
            user_id = _opt(row.get("user_id"))
            dinner = _opt(row.get("had_dinner"))
            yield RawPunchRow(
                line_no=line_no,
                date_text=(row.get("date") or "").strip(),
                time_text=(row.get("time") or "").strip(),
                source=self._source,
                # Terminal user ids are device-local, not directory ids.
                user_id=None,
                employee_number=_opt(row.get("employee_number")),
                name=_opt(row.get("name")),
                category=_opt(row.get("category")),
                mode=_opt(row.get("mode")),
                terminal_id=_opt(row.get("terminal_id")),
                had_dinner=(dinner.lower() in _TRUTHY) if dinner else None,
                location_text=_opt(row.get("location")),
                note=f"terminal user {user_id}" if user_id else None,
            )
