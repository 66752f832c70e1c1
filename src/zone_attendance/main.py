from __future__ import annotations

import importlib
import logging
import logging.config

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .audit.controller import register as register_audit
from .config import get_settings_module
from .container import build_container
from .core.constants import (
    DEFAULT_GLOBAL_GOAL_MINUTES,
    DEFAULT_KIOSK_DISPLAY_SECONDS,
    DEFAULT_LIVE_REFRESH_SECONDS,
)
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .kiosk.controller import register as register_kiosk
from .membership.controller import register as register_membership
from .rules.controller import register as register_rules

log = logging.getLogger(__name__)


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
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    log.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if getattr(settings, "AUTO_INIT_DB", False):
        apply_schema(db_config)
        log.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if getattr(settings, "AUTO_SEED_DB", False):
        apply_seed_sql(db_config)
        log.info("demo seed ready")

    container = build_container(
        db_config=db_config,
        enforce_operating_hours=bool(getattr(settings, "ENFORCE_OPERATING_HOURS", False)),
        default_global_goal=int(getattr(settings, "DEFAULT_GLOBAL_GOAL_MINUTES", DEFAULT_GLOBAL_GOAL_MINUTES)),
        kiosk_display_seconds=int(getattr(settings, "KIOSK_DISPLAY_SECONDS", DEFAULT_KIOSK_DISPLAY_SECONDS)),
        live_refresh_seconds=int(getattr(settings, "LIVE_REFRESH_SECONDS", DEFAULT_LIVE_REFRESH_SECONDS)),
    )

    register_rules(app, container)
    register_attendance(app, container)
    register_kiosk(app, container)
    register_audit(app, container)
    register_membership(app, container)

    return app
