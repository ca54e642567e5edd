"""Database models for reqlog."""
from __future__ import annotations

from .extensions import db


class LogEntry(db.Model):
    """A single persisted request, client event or fingerprint submission."""

    __tablename__ = "logs"
    __table_args__ = {"sqlite_autoincrement": True}

    id: int = db.Column(db.Integer, primary_key=True)
    method: str = db.Column(db.Text)
    url: str = db.Column(db.Text)
    headers: str = db.Column(db.Text)
    body: str = db.Column(db.Text)
    timestamp: str = db.Column(db.Text, index=True)

    def serialize(self) -> dict[str, object]:
        """Return a JSON-serializable representation of the log entry."""
        return {
            "id": self.id,
            "method": self.method,
            "url": self.url,
            "headers": self.headers,
            "body": self.body,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<LogEntry {self.id} {self.method} {self.url}>"
