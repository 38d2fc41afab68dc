from __future__ import annotations

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module, load_settings

from .assistant.controller import register as register_assistant
from .attendance.controller import register as register_attendance
from .auth.controller import register as register_auth
from .common.web import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .day_notes.controller import register as register_day_notes
from .leads.controller import register as register_leads
from .students.controller import register as register_students
from .workspace.controller import register as register_workspace


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Tests pass a ``container`` wired around in-memory repositories; otherwise
    one is built from the settings module selected by ``APP_ENV``.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = load_settings()
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    app.logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            app.logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        api_key = getattr(settings, "GEMINI_API_KEY", "")
        if not api_key:
            app.logger.warning("GEMINI_API_KEY is not set; assistant answers will be fallback messages")
        container = build_container(
            db_config=db_config,
            gemini_api_key=api_key,
            chat_model=getattr(settings, "GEMINI_CHAT_MODEL", "gemini-3-pro-preview"),
            fast_model=getattr(settings, "GEMINI_FAST_MODEL", "gemini-3-flash-preview"),
            departments=getattr(settings, "DEPARTMENTS", None),
            recent_limit=int(getattr(settings, "RECENT_SESSIONS_LIMIT", 5)),
            workspace_max_age=float(getattr(settings, "WORKSPACE_MAX_AGE", 30.0)),
            workspace_idle_timeout=float(getattr(settings, "WORKSPACE_IDLE_TIMEOUT", 1800.0)),
        )

    app.extensions["academix"] = container

    register_error_handlers(app)
    register_auth(app, container)
    register_attendance(app, container)
    register_students(app, container)
    register_day_notes(app, container)
    register_leads(app, container)
    register_assistant(app, container)
    register_workspace(app, container)

    return app
