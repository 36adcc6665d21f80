"""TaskBoard application factory and bootstrap."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from flask import Flask

from taskboard.config import config_by_name
from taskboard.core.events.event_bus import event_bus
from taskboard.extensions import init_extensions


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the TaskBoard Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    project_root = Path(__file__).resolve().parent.parent
    instance_root = project_root / "instance"

    app = Flask(__name__, instance_path=str(instance_root), instance_relative_config=True)
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)
    instance_root.mkdir(parents=True, exist_ok=True)

    # Normalize sqlite path to absolute to avoid "unable to open database file"
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
    if db_uri.startswith("sqlite:///") and db_uri != "sqlite:///:memory:":
        db_path = Path(db_uri.replace("sqlite:///", "", 1))
        if not db_path.is_absolute():
            db_path = project_root / db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_path}"

    _configure_logging(app)
    init_extensions(app)
    _import_models()
    _register_blueprints(app)
    _register_error_handlers(app)

    # Attach shared engines
    from taskboard.domains.automations.services.engine import automation_engine

    app.extensions["event_bus"] = event_bus
    app.extensions["automation_engine"] = automation_engine

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    # Register CLI commands
    from taskboard.scripts.sweep_due_tasks import register_commands

    register_commands(app)

    return app


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO)
    logger = logging.getLogger("taskboard")
    logger.setLevel(level)
    if not logger.handlers and not logging.getLogger().handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)


def _import_models() -> None:
    """Load every model module so cross-table foreign keys resolve."""
    import taskboard.core.events.event_models  # noqa: F401
    import taskboard.core.users.models  # noqa: F401
    import taskboard.domains.automations.models.automation_models  # noqa: F401
    import taskboard.domains.notifications.models.notification_models  # noqa: F401
    import taskboard.domains.projects.models.project_models  # noqa: F401


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from taskboard.core.users.controllers import user_api_bp
    from taskboard.domains.automations.controllers.automation_api import automation_api_bp
    from taskboard.domains.notifications.controllers.notification_api import notification_api_bp
    from taskboard.domains.projects.controllers.project_api import project_api_bp
    from taskboard.domains.projects.controllers.task_api import task_api_bp

    app.register_blueprint(user_api_bp, url_prefix="/api/users")
    app.register_blueprint(project_api_bp, url_prefix="/api/projects")
    app.register_blueprint(task_api_bp, url_prefix="/api/tasks")
    app.register_blueprint(automation_api_bp, url_prefix="/api/automations")
    app.register_blueprint(notification_api_bp, url_prefix="/api/notifications")


def _register_error_handlers(app: Flask) -> None:
    """Basic JSON error responses."""
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {"ok": False, "error": exc.description}, exc.code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        # In debug/testing, surface the exception message to speed up diagnosis
        if app.debug or app.testing:
            return {"ok": False, "error": str(exc)}, 500
        return {"ok": False, "error": "unexpected_error"}, 500
