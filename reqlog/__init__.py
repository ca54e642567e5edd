"""Application factory for reqlog."""
from __future__ import annotations

from flask import Flask

from .config import Config
from .event_store import EventStore
from .extensions import db, sock
from .request_logging import install_request_logging


def _apply_store_timeout(app: Flask) -> None:
    """Use STORE_TIMEOUT as the SQLite busy timeout for every connection."""
    options = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
    connect_args = dict(options.get("connect_args") or {})
    connect_args["timeout"] = app.config["STORE_TIMEOUT"]
    options["connect_args"] = connect_args
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = options


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    _apply_store_timeout(app)

    db.init_app(app)
    sock.init_app(app)
    store = EventStore(app)
    install_request_logging(app, store)

    from .pages import bp as pages_bp
    from .logs import bp as logs_bp
    from .stream import bp as stream_bp

    app.register_blueprint(pages_bp)
    app.register_blueprint(logs_bp, url_prefix="/api/logs")
    app.register_blueprint(stream_bp)

    return app
