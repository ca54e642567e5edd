from __future__ import annotations

from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from reqlog import create_app
from reqlog.config import Config
from reqlog.extensions import db


@pytest.fixture()
def app(tmp_path):
    """Create a Flask app backed by a throwaway SQLite file."""

    class TestingConfig(Config):
        """Configuration tuned for isolated unit tests."""

        TESTING = True
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'logs.db'}"
        STORE_TIMEOUT = 2.0

    application = create_app(TestingConfig)
    yield application
    application.extensions["event_store"].close()
    with application.app_context():
        db.drop_all()
        db.session.remove()
        db.engine.dispose()


@pytest.fixture()
def store(app):
    """Return the event store bound to the test app."""

    return app.extensions["event_store"]


@pytest.fixture()
def client(app):
    """Provide a Flask test client for request assertions."""

    return app.test_client()
