"""
Application factory for the wellbeing quiz backend.

This module provides a function to create and configure the Flask
application. Extensions (SQLAlchemy, CORS) are initialised here, and
so are the per-application service objects the route handlers use:
the store connection and assessment store, the background writer,
the statistics aggregator and the quote client. They live in
``app.extensions`` so tests can replace any of them.

Environment variables control the database connection, the quote
service and a few tuning knobs. A default configuration is provided
for development, using SQLite when no database URL is available.
"""

from __future__ import annotations

import atexit
import logging
import os

from flask import Flask
from flask_cors import CORS

from .db import db
from .store import AssessmentStore, BackgroundWriter, StoreConnection
from .services.statistics import DEFAULT_AVERAGE_SCORE, StatisticsAggregator
from .services.quotes import QuoteClient


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _configure_logging(app: Flask) -> None:
    level = app.config["LOG_LEVEL"]
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("wellbeing_quiz").setLevel(level)
    app.logger.setLevel(level)


def create_app(test_config: dict | None = None) -> Flask:
    """Create and configure a Flask application.

    Parameters
    ----------
    test_config: dict | None, optional
        Optional configuration overrides used when running tests.

    Returns
    -------
    Flask
        A configured Flask application instance.
    """
    app = Flask(__name__)

    # Default configuration. Override using environment variables or
    # by passing a ``test_config`` mapping.
    app.config.update(
        SQLALCHEMY_DATABASE_URI=os.environ.get("DATABASE_URL", "sqlite:///wellbeing.db"),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        QUOTE_API_URL=os.environ.get("QUOTE_API_URL"),
        QUOTE_API_TIMEOUT=float(os.environ.get("QUOTE_API_TIMEOUT", "5")),
        CORS_ORIGINS=os.environ.get("CORS_ORIGINS", "*"),
        DEFAULT_AVERAGE_SCORE=int(os.environ.get("DEFAULT_AVERAGE_SCORE", DEFAULT_AVERAGE_SCORE)),
        STORE_WRITER_WORKERS=int(os.environ.get("STORE_WRITER_WORKERS", "2")),
        STORE_CONNECT_ON_START=_env_flag("STORE_CONNECT_ON_START", True),
        RECOMMENDATIONS_BY_QUESTION_ID=_env_flag("RECOMMENDATIONS_BY_QUESTION_ID", False),
        LOG_LEVEL=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )

    if test_config:
        app.config.update(test_config)

    _configure_logging(app)

    # Initialise extensions with the app
    db.init_app(app)
    origins = app.config["CORS_ORIGINS"]
    CORS(app, resources={r"/api/*": {"origins": origins.split(",") if origins != "*" else "*"}})

    connection = StoreConnection(db)
    store = AssessmentStore(connection)
    app.extensions["store_connection"] = connection
    app.extensions["assessment_store"] = store
    writer = BackgroundWriter(
        store, max_workers=app.config["STORE_WRITER_WORKERS"]
    )
    app.extensions["assessment_writer"] = writer
    # Let queued detached writes finish before the interpreter exits.
    atexit.register(writer.shutdown)
    app.extensions["statistics"] = StatisticsAggregator(
        store, default_average=app.config["DEFAULT_AVERAGE_SCORE"]
    )
    app.extensions["quote_client"] = QuoteClient(
        app.config["QUOTE_API_URL"], timeout=app.config["QUOTE_API_TIMEOUT"]
    )

    if app.config["STORE_CONNECT_ON_START"]:
        with app.app_context():
            connection.connect()

    # Register custom error handlers
    from .errors import register_error_handlers
    register_error_handlers(app)

    from .seed import register_commands
    register_commands(app)

    # Register blueprints. Importing here avoids circular imports.
    from .routes.assessments import assessments_bp
    from .routes.statistics import statistics_bp
    from .routes.quotes import quotes_bp

    app.register_blueprint(assessments_bp, url_prefix="/api")
    app.register_blueprint(statistics_bp, url_prefix="/api")
    app.register_blueprint(quotes_bp, url_prefix="/api")

    @app.route("/api/health")
    def health_check() -> dict[str, str]:
        """Return a simple health check response.

        Also reports the assessment store's connection state, pinging
        the store again first if it is not connected.
        """
        if not connection.is_connected:
            connection.connect()
        return {"status": "ok", "store": connection.state.value}

    return app
