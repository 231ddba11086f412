from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, ensure_default_settings, list_tables
from .logging_config import setup_logging

from .container import Container, build_container
from .admission.controller import register as register_admission
from .attendance.controller import register as register_attendance

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    "allowed_radius_meters": 100,
    "wifi_allowlist": [],
    "code_period_seconds": 60,
    "admin_notifications": {"enabled": True, "notify_on_checkin": False, "notify_on_checkout": False},
}


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if not app.config["TESTING"]:
        setup_logging(app, getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            ensure_default_settings(db_config, DEFAULT_SETTINGS)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
        )
        container = build_container(
            db_config=db_config,
            jwt_secret=getattr(settings, "JWT_SECRET"),
            jwt_algorithm=getattr(settings, "JWT_ALGORITHM", "HS256"),
            jwt_ttl_minutes=int(getattr(settings, "JWT_TTL_MINUTES", 720)),
            reject_duplicate_checkin=bool(getattr(settings, "REJECT_DUPLICATE_CHECKIN", False)),
            expected_embedding_size=int(getattr(settings, "EXPECTED_EMBEDDING_SIZE", 128)),
        )

    register_admission(app, container)
    register_attendance(app, container)

    return app
