"""Record every inbound HTTP request in the event store."""
from __future__ import annotations

import logging

from flask import Flask, Request, request

from .event_store import EventStore, PendingRecord, serialize_payload

logger = logging.getLogger(__name__)


def _request_url(req: Request) -> str:
    query = req.query_string.decode("utf-8", errors="replace")
    return f"{req.path}?{query}" if query else req.path


def _header_map(req: Request) -> dict[str, str]:
    out: dict[str, str] = {}
    for key, value in req.headers.items():
        name = key.lower()
        out[name] = f"{out[name]}, {value}" if name in out else value
    return out


def _request_body(req: Request) -> str:
    payload = req.get_json(silent=True)
    if isinstance(payload, (dict, list)) and payload:
        return serialize_payload(payload)
    if req.form:
        return serialize_payload(req.form.to_dict())
    return ""


def build_request_record(req: Request) -> PendingRecord:
    """Describe an inbound request as a log record."""
    return PendingRecord(
        method=req.method,
        url=_request_url(req),
        headers=serialize_payload(_header_map(req)),
        body=_request_body(req),
    )


def install_request_logging(app: Flask, store: EventStore) -> None:
    """Register a hook that logs each request before it is dispatched."""

    @app.before_request
    def log_request() -> None:
        try:
            store.append(build_request_record(request))
        except Exception:
            logger.exception("Could not record %s %s", request.method, request.path)
        return None
