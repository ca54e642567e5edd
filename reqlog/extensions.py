"""Shared Flask extension instances."""
from __future__ import annotations

from flask_sock import Sock
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
sock = Sock()
