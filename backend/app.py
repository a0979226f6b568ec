from __future__ import annotations

import logging
from datetime import datetime, timezone

from flask import Flask, jsonify
from flask_cors import CORS
from pymongo.database import Database
from werkzeug.exceptions import HTTPException

from unirecords import config
from unirecords.config import ConfigError
from unirecords.db import connect_from_config, ensure_indexes
from unirecords.errors import InternalError, StorageUnavailableError
from unirecords.logging import setup_logging
from unirecords.routes import BLUEPRINTS, STORE_EXTENSION, json_error
from unirecords.store import RecordStore

logger = logging.getLogger("unirecords.app")


def create_app(database: Database | None = None) -> Flask:
    """Build the Flask application.

    ``database`` is injected by tests; otherwise the MongoDB connection is
    established from the environment, retrying with backoff.
    """

    setup_logging(config.get_log_level())

    if database is None:
        database = connect_from_config()
    ensure_indexes(database)

    app = Flask(__name__)
    app.json.sort_keys = False
    app.extensions[STORE_EXTENSION] = RecordStore(database)

    CORS(
        app,
        resources={r"/api/*": {"origins": config.get_cors_origins()}},
        supports_credentials=True,
    )

    for blueprint in BLUEPRINTS:
        app.register_blueprint(blueprint)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return json_error(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        logger.exception("Unhandled error while serving request")
        error = InternalError(details={"error": str(exc)} if config.is_development() else None)
        return json_error(error.message, error.status_code, error.details)

    @app.get("/api/health")
    def health():
        return jsonify(
            {
                "success": True,
                "status": "success",
                "message": "University Management API is running",
                "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            }
        )

    logger.info("Application initialized with database '%s'", database.name)
    return app


if __name__ == "__main__":
    try:
        application = create_app()
    except (ConfigError, StorageUnavailableError) as exc:
        logger.error("Failed to start server: %s", exc)
        raise SystemExit(1)
    application.run(port=config.get_port(), debug=config.is_development())
