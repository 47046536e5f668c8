"""Example: drive the engine through the service layer (no Flask).

Controllers are thin; ingestion and materialization live in services.
"""

import importlib
from pathlib import Path

from dotenv import load_dotenv

from config import get_settings_module

from src.attendance_engine.attendance_engine.container import build_container
from src.attendance_engine.attendance_engine.core.enums import PunchKind


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, engine=getattr(settings, "ENGINE", None))

    sample = Path(__file__).with_name("sample_punches.csv")
    result = container.ingestion_service.ingest_csv(sample.read_bytes())
    print(result.as_dict())

    web = container.ingestion_service.submit_web_punch(2, PunchKind.CHECK_IN, location_text="lat: 37.5665, lng: 126.9780")
    print(web.as_dict())

    for row in container.summaries_repo.list_monthly("2025-01"):
        print(row.to_dict())


if __name__ == "__main__":
    main()
