from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from .attendance.controller import register as register_attendance
from .common.datetime_utils import now_local
from .container import Container, build_container
from .credentials.controller import register as register_credentials
from .database.bootstrap import apply_schema, ensure_demo_data, list_tables
from .events.controller import register as register_events
from .reports.controller import register as register_reports
from .sessions.controller import register as register_sessions
from .settings import get_settings_module
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    """Application factory.

    ``container`` lets tests inject in-memory repositories instead of MySQL.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["QR_TOKEN_TTL_MINUTES"] = int(getattr(settings, "QR_TOKEN_TTL_MINUTES", 10))
    app.config["EVENT_QUEUE_SIZE"] = int(getattr(settings, "EVENT_QUEUE_SIZE", 100))

    configure_logging(str(getattr(settings, "LOG_LEVEL", "INFO")).upper())

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
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            session_id = ensure_demo_data(db_config)
            logger.info("demo seed ready (class session %s)", session_id)

        container = build_container(
            db_config=db_config,
            ttl_minutes=app.config["QR_TOKEN_TTL_MINUTES"],
            event_queue_size=app.config["EVENT_QUEUE_SIZE"],
        )

    @app.route("/api/health", endpoint="health")
    def health():
        return jsonify({"message": "QR Attendance API is running!", "timestamp": now_local().isoformat()})

    register_users(app, container)
    register_sessions(app, container)
    register_credentials(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_events(app, container)

    return app
