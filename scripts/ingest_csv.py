"""Ingest a terminal CSV export from the command line.

Usage: python scripts/ingest_csv.py punches.csv [--overwrite]
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

from src.attendance_engine.attendance_engine.container import build_container
from src.attendance_engine.attendance_engine.core.exceptions import BatchFormatError


def main() -> int:
    parser = argparse.ArgumentParser(description="Ingest a punch CSV and re-materialize summaries")
    parser.add_argument("path", type=Path)
    parser.add_argument("--overwrite", action="store_true", help="replace punches that are already stored")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=settings.DB_CONFIG, engine=getattr(settings, "ENGINE", None))

    try:
        result = container.ingestion_service.ingest_csv(args.path.read_bytes(), overwrite=args.overwrite)
    except BatchFormatError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    print(json.dumps(result.as_dict(), ensure_ascii=False, indent=2))
    return 0 if not result.persistence_errors else 1


if __name__ == "__main__":
    sys.exit(main())
