"""Re-materialize one user's summaries for a date range from stored punches.

Usage: python scripts/recompute.py USER_ID 2025-01-01 2025-01-31
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.attendance_engine.attendance_engine.common.datetime_utils import parse_iso_date
from src.attendance_engine.attendance_engine.container import build_container


def main() -> int:
    parser = argparse.ArgumentParser(description="Recompute daily/monthly summaries")
    parser.add_argument("user_id", type=int)
    parser.add_argument("start", type=parse_iso_date)
    parser.add_argument("end", type=parse_iso_date)
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=settings.DB_CONFIG, engine=getattr(settings, "ENGINE", None))

    report = container.materializer.recompute_range(args.user_id, args.start, args.end)
    print(json.dumps(report.as_dict(), ensure_ascii=False, indent=2))
    return 1 if report.failures else 0


if __name__ == "__main__":
    sys.exit(main())
