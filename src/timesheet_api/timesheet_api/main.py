from __future__ import annotations

import importlib
import logging
import time
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, g, request
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .common import responses as resp
from .container import Container, build_container
from .core.logging import setup_logging
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables, wait_for_database, wait_for_server
from .database.connection import DBConfig
from .timesheets.controller import register as register_timesheets

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]


def _install_request_id(app: Flask) -> None:
    @app.before_request
    def assign_request_id():
        g.request_id = request.headers.get("X-Request-ID") or str(time.time_ns())

    @app.after_request
    def echo_request_id(response):
        request_id = g.get("request_id")
        if request_id:
            response.headers["X-Request-ID"] = request_id
        logger.info("%s %s -> %s [%s]", request.method, request.path, response.status_code, request_id)
        return response


def _install_error_handlers(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        if e.code == 404:
            return resp.not_found("Route not found")
        if e.code == 405:
            return resp.method_not_allowed()
        return resp.write(e.code or 500, e.name)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("unhandled error in %s %s", request.method, request.path)
        return resp.internal("Internal server error")


def _register_health(app: Flask, container: Container) -> None:
    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        if not container.conn.ping():
            return resp.service_unavailable("DB down")
        return resp.ok({"status": "ok"}, "Healthy")


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__, static_folder=None)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["APP_ENV"] = getattr(settings, "APP_ENV", "development")
    app.config["PORT"] = int(getattr(settings, "PORT", 8080))
    app.config["TIME_ZONE"] = getattr(settings, "TIME_ZONE", "Asia/Jakarta")

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        target = DBConfig.from_dict(db_config)
        logger.info("settings=%s env=%s db=%s", settings_module, app.config["APP_ENV"], target.describe())

        auto_init = bool(getattr(settings, "AUTO_INIT_DB", False))
        auto_seed = bool(getattr(settings, "AUTO_SEED_DB", False))
        if auto_init or auto_seed:
            # The schema step may have to create the database, so wait on the server alone.
            wait_for_server(target)

        if auto_init:
            apply_schema(target, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(target)))
        if auto_seed:
            apply_seed_sql(target, seed_path=REPO_ROOT / "database" / "seed.sql")
            logger.info("demo seed ready")

        container = build_container(db_config=db_config)
        wait_for_database(container.conn)

    _install_request_id(app)
    _install_error_handlers(app)
    _register_health(app, container)
    register_timesheets(app, container)

    for rule in app.url_map.iter_rules():
        logger.debug("[ROUTE] %s %s -> %s", ",".join(sorted(rule.methods - {"HEAD", "OPTIONS"})), rule.rule, rule.endpoint)

    return app
