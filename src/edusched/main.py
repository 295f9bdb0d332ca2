from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .backup.controller import register as register_backup
from .branding.controller import register as register_branding
from .catalog.controller import register as register_catalog
from .common.http import register_error_handlers, register_session_loader
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_catalog_defaults, list_tables
from .users.controller import register as register_users

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "database" / "schema.sql"

logger = logging.getLogger("edusched")


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["JSON_AS_ASCII"] = False

    logging.basicConfig(
        level=logging.DEBUG if app.config["DEBUG"] else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

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
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_catalog_defaults(db_config)
            logger.info("catalog defaults ready")

        container = build_container(settings=settings)

    register_error_handlers(app)
    register_session_loader(app, container.auth_service.current_user)
    register_users(app, container)
    register_catalog(app, container)
    register_branding(app, container)
    register_backup(app, container)

    return app
