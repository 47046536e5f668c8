from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, list_tables

from .container import build_container
from .policies.resolver import validate_periods
from .punches.controller import register as register_punches
from .summaries.controller import register as register_summaries

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module, db_config.get("user"), db_config.get("host"),
        db_config.get("port", 3306), db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

    container = build_container(db_config=db_config, engine=getattr(settings, "ENGINE", None))
    for warning in validate_periods(container.periods_repo.list_periods()):
        logger.warning("Flexible work period configuration: %s", warning)

    register_punches(app, container)
    register_summaries(app, container)

    return app
