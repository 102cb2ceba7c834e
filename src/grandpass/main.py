from __future__ import annotations

import importlib
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .common.datetime_utils import format_manila_datetime
from .container import Container, build_container
from .core.logger import configure_logging, get_logger
from .directory.controller import register as register_directory
from .scanner.controller import register as register_scanner
from .settings import get_settings_module
from .users.access import current_user
from .users.controller import register as register_users
from .visitors.controller import register as register_visitors
from .visits.controller import register as register_visits

logger = get_logger(__name__)


def create_app(settings_module: Optional[str] = None, *, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)

    configure_logging(getattr(settings, "LOG_LEVEL", None))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["API_BASE"] = getattr(settings, "API_BASE")
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", 7)))

    if container is None:
        container = build_container(
            api_base=app.config["API_BASE"],
            timeout=getattr(settings, "API_TIMEOUT", None),
            scan_lock_seconds=getattr(settings, "SCAN_LOCK_SECONDS", 30),
        )
    logger.info("GrandPass starting (settings=%s, backend=%s)", settings_module, app.config["API_BASE"])

    app.jinja_env.filters["manila_datetime"] = format_manila_datetime

    @app.context_processor
    def inject_user():
        return {"current_user": current_user()}

    register_users(app, container)
    register_visits(app, container)
    register_scanner(app, container)
    register_visitors(app, container)
    register_directory(app, container)

    return app
