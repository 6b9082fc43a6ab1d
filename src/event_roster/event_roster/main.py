from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import Container, build_container
from .core.constants import DEFAULT_CHUNK_SIZE, DEFAULT_MAX_UPLOAD_BYTES, DEFAULT_PREVIEW_ROWS
from .database.bootstrap import apply_schema, list_tables
from .importing.controller import register as register_import

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    import_config = {
        "preview_rows": getattr(settings, "IMPORT_PREVIEW_ROWS", DEFAULT_PREVIEW_ROWS),
        "chunk_size": getattr(settings, "IMPORT_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
        "max_upload_bytes": getattr(settings, "MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
    }
    # Werkzeug rejects larger bodies before the import pipeline sees them.
    app.config["MAX_CONTENT_LENGTH"] = int(import_config["max_upload_bytes"]) + 64 * 1024

    if container is None:
        container = build_container(db_config=db_config, import_config=import_config)
        logger.info("settings=%s db=%s", settings_module, container.conn.config.describe())

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(container.conn, schema_path=schema_path)
            logger.info("schema ready (tables=%d)", len(list_tables(container.conn)))

    register_import(app, container)

    return app
