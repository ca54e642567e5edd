"""Configuration settings for reqlog."""
from __future__ import annotations

import os
import tempfile
from pathlib import Path

DEFAULT_DATABASE_PATH = Path(tempfile.gettempdir()) / "logs.db"


class Config:
    """Base configuration class."""

    SECRET_KEY = os.environ.get("REQLOG_SECRET_KEY", "reqlog-dev-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "REQLOG_DATABASE_URI", f"sqlite:///{DEFAULT_DATABASE_PATH}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # The writer thread and request threads share the pool. The busy timeout
    # is filled in from STORE_TIMEOUT by create_app.
    SQLALCHEMY_ENGINE_OPTIONS = {
        "connect_args": {"check_same_thread": False},
    }
    STORE_TIMEOUT = float(os.environ.get("REQLOG_STORE_TIMEOUT", 5.0))
    WRITE_QUEUE_SIZE = int(os.environ.get("REQLOG_WRITE_QUEUE_SIZE", 10000))
    LOG_LEVEL = os.environ.get("REQLOG_LOG_LEVEL", "INFO")
