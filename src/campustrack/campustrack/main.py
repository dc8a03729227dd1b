from __future__ import annotations

import importlib
import logging
import logging.config
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, list_tables

from .container import build_container
from .attendance.controller import register as register_attendance
from .mdc.controller import register as register_mdc
from .periods.controller import register as register_periods
from .reports.controller import register as register_reports
from .students.controller import register as register_students
from .timetable.controller import register as register_timetable

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging_config = getattr(settings, "LOGGING", None)
    if logging_config:
        logging.config.dictConfig(logging_config)

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if getattr(settings, "AUTO_INIT_DB", False):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
    if getattr(settings, "AUTO_SEED_DB", False):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        logger.info("Demo seed ready")

    container = build_container(db_config=db_config)

    register_periods(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_students(app, container)
    register_mdc(app, container)
    register_timetable(app, container)

    return app
