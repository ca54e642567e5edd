"""Append-only event store for request and telemetry records."""
from __future__ import annotations

import atexit
import json
import logging
import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from flask import Flask, current_app
from sqlalchemy.exc import SQLAlchemyError

from .extensions import db
from .models import LogEntry

logger = logging.getLogger(__name__)

_STOP = object()


def utc_timestamp() -> str:
    """Return the current UTC time as a fixed-width ISO-8601 string."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def serialize_payload(value: Any) -> str:
    """Serialize a free-form payload for storage."""
    return json.dumps(value, default=str)


@dataclass(frozen=True)
class PendingRecord:
    """A record accepted for writing but not yet persisted."""

    method: str
    url: str
    headers: str = "{}"
    body: str = ""
    timestamp: str = field(default_factory=utc_timestamp)


class EventStore:
    """Durable, append-only collection of log records.

    Writes are handed to a single background writer so callers never wait on
    storage. Reads and purges run in the calling thread and raise
    ``SQLAlchemyError`` on failure.
    """

    def __init__(self, app: Optional[Flask] = None) -> None:
        self.app: Optional[Flask] = None
        self._queue: Optional["queue.Queue[object]"] = None
        self._worker: Optional[threading.Thread] = None
        self._write_lock = threading.Lock()
        self._lifecycle_lock = threading.Lock()
        self._closed = True
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Attach the store to the Flask app and start the writer."""
        self.app = app
        app.extensions["event_store"] = self
        self.initialize()

        self._queue = queue.Queue(maxsize=app.config.get("WRITE_QUEUE_SIZE", 10000))
        self._closed = False
        self._worker = threading.Thread(
            target=self._run, name="reqlog-writer", daemon=True
        )
        self._worker.start()
        atexit.register(self.close)

    def initialize(self) -> None:
        """Create the backing table when missing."""
        with self.app.app_context():
            db.create_all()

    @property
    def closed(self) -> bool:
        return self._closed

    def append(self, record: PendingRecord) -> bool:
        """Queue a record for writing. Returns False when it was dropped."""
        with self._lifecycle_lock:
            if self._closed:
                logger.warning(
                    "Event store closed; dropping %s record for %s",
                    record.method,
                    record.url,
                )
                return False
            try:
                self._queue.put_nowait(record)
            except queue.Full:
                logger.warning(
                    "Write queue full; dropping %s record for %s",
                    record.method,
                    record.url,
                )
                return False
        return True

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                if isinstance(item, threading.Event):
                    item.set()
                    continue
                self._write(item)
            except Exception:
                logger.exception(
                    "Failed to persist %s record for %s", item.method, item.url
                )
            finally:
                self._queue.task_done()

    def _write(self, record: PendingRecord) -> None:
        with self.app.app_context(), self._write_lock:
            entry = LogEntry(
                method=record.method,
                url=record.url,
                headers=record.headers,
                body=record.body,
                timestamp=record.timestamp,
            )
            db.session.add(entry)
            try:
                db.session.commit()
            except SQLAlchemyError:
                db.session.rollback()
                raise

    def query(
        self,
        min_timestamp: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, object]]:
        """Return records newest first, optionally bounded by time and count."""
        with self.app.app_context():
            query = LogEntry.query
            if min_timestamp:
                query = query.filter(LogEntry.timestamp >= min_timestamp)
            query = query.order_by(LogEntry.timestamp.desc(), LogEntry.id.desc())
            if limit is not None and limit > 0:
                query = query.limit(limit)
            return [entry.serialize() for entry in query.all()]

    def purge(self) -> int:
        """Delete every record, including writes queued before the call."""
        self._wait_for_backlog(self.app.config.get("STORE_TIMEOUT"))
        with self.app.app_context(), self._write_lock:
            try:
                deleted = LogEntry.query.delete(synchronize_session=False)
                db.session.commit()
            except SQLAlchemyError:
                db.session.rollback()
                raise
        return deleted

    def _wait_for_backlog(self, timeout: Optional[float]) -> bool:
        """Wait until records queued before this call have been processed.

        Records appended afterwards are not waited for.
        """
        barrier = threading.Event()
        with self._lifecycle_lock:
            if self._closed:
                return True
            try:
                self._queue.put_nowait(barrier)
                queued = True
            except queue.Full:
                queued = False
        if not queued:
            try:
                self._queue.put(barrier, timeout=timeout)
            except queue.Full:
                logger.warning("Write queue full; purging without draining it")
                return False
        return barrier.wait(timeout)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Block until queued records are processed. False on timeout."""
        if self._queue is None:
            return True
        pending = self._queue
        with pending.all_tasks_done:
            return pending.all_tasks_done.wait_for(
                lambda: pending.unfinished_tasks == 0, timeout
            )

    def close(self) -> None:
        """Drain pending writes and stop the writer thread."""
        with self._lifecycle_lock:
            if self._closed:
                return
            self._closed = True
        atexit.unregister(self.close)
        self._queue.put(_STOP)
        self._worker.join(timeout=self.app.config.get("STORE_TIMEOUT"))


def get_event_store() -> EventStore:
    """Return the store bound to the active application."""
    return current_app.extensions["event_store"]
