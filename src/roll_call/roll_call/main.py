from __future__ import annotations

import atexit
import importlib
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .sync.controller import register as register_sync

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"

REPO_ROOT = Path(__file__).resolve().parents[3]


def configure_logging(app: Flask, *, level: str = "INFO", log_file: str | None = None) -> None:
    root = logging.getLogger("roll_call")
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    if not root.handlers:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(formatter)
        root.addHandler(stream)

        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(log_file, maxBytes=1_048_576, backupCount=10)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
            app.logger.addHandler(file_handler)

    app.logger.setLevel(level)


def create_app(container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    db_config = getattr(settings, "DB_CONFIG")

    configure_logging(
        app,
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        log_file=getattr(settings, "LOG_FILE", None),
    )
    app.logger.info(
        "roll-call starting settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            app.logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            storage_dir=getattr(settings, "OFFLINE_STORAGE_DIR"),
            autosave_delay=float(getattr(settings, "AUTOSAVE_DELAY_SECONDS", 1.0)),
            sync_interval=float(getattr(settings, "SYNC_INTERVAL_SECONDS", 3.0)),
        )

        if bool(getattr(settings, "SYNC_SCHEDULER_ENABLED", False)):
            container.scheduler.start()
            atexit.register(container.scheduler.stop, 5.0)
        atexit.register(container.draft_store.flush)

    app.extensions["roll_call"] = container

    @app.errorhandler(Exception)
    def _unexpected_error(e: Exception):
        if isinstance(e, HTTPException):
            return e
        app.logger.exception("Unhandled error")
        return jsonify({"success": False, "message": "Erro interno do sistema"}), 500

    @app.route("/health", endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    register_attendance(app, container)
    register_sync(app, container)

    return app
