from __future__ import annotations

import atexit
import importlib
import logging
import sys
from logging import StreamHandler
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .database.bootstrap import apply_schema, list_tables

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .events.controller import register as register_events
from .points.controller import register as register_points
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


_console_handler: Optional[logging.Handler] = None


def configure_logging(level: str) -> None:
    """Attach one stdout handler to the root logger; safe to call per app."""
    global _console_handler
    root = logging.getLogger()
    if _console_handler is None:
        _console_handler = StreamHandler(sys.stdout)
        _console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(_console_handler)
    root.setLevel(str(level).upper())


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            jwt_secret=getattr(settings, "JWT_SECRET"),
            jwt_expires_minutes=int(getattr(settings, "JWT_EXPIRES_MINUTES")),
            qr_secret=getattr(settings, "QR_CODE_SECRET"),
            qr_validity_hours=int(getattr(settings, "QR_VALIDITY_HOURS")),
        )
        atexit.register(container.close)

    app.extensions["clubhub.container"] = container
    register_error_handlers(app)

    register_users(app, container)
    register_events(app, container)
    register_attendance(app, container)
    register_points(app, container)

    return app
