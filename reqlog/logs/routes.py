"""Routes for writing, reading and clearing stored log records."""
from __future__ import annotations

import logging

from flask import jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from ..event_store import PendingRecord, get_event_store, serialize_payload, utc_timestamp
from . import bp

CLIENT_LOG_METHOD = "CLIENT_LOG"

logger = logging.getLogger(__name__)


def _json_response(payload, *, status: int = 200):
    """Return a JSON response with the supplied status."""

    response = jsonify(payload)
    response.status_code = status
    return response


def _json_error(message: str, *, status: int = 400):
    """Return a JSON error payload with the supplied status."""

    return _json_response({"success": False, "error": message}, status=status)


def _query_filters() -> tuple[str | None, int | None]:
    """Read the ``startTime`` and ``limit`` query parameters."""

    limit = request.args.get("limit", type=int)
    if limit is not None and limit <= 0:
        limit = None
    start_time = request.args.get("startTime") or None
    return start_time, limit


@bp.route("", methods=["POST"])
def submit_client_log():
    """Persist a structured event emitted by a browser page."""

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}

    log_type = payload.get("type")
    message = payload.get("message")
    data = payload.get("data")
    timestamp = payload.get("timestamp")
    if not isinstance(timestamp, str) or not timestamp:
        timestamp = utc_timestamp()

    record = PendingRecord(
        method=CLIENT_LOG_METHOD,
        url=request.path,
        body=serialize_payload(
            {"message": message, "data": data, "timestamp": timestamp}
        ),
        timestamp=timestamp,
    )
    logger.info("[%s] %s", log_type, message)
    logger.debug("[%s] data: %s", log_type, serialize_payload(data))

    if not get_event_store().append(record):
        return _json_error("Log store is not accepting records", status=503)
    return _json_response({"success": True})


@bp.route("", methods=["GET"])
def list_logs():
    """Return stored records newest first."""

    start_time, limit = _query_filters()
    try:
        records = get_event_store().query(min_timestamp=start_time, limit=limit)
    except SQLAlchemyError as exc:
        logger.error("Error fetching logs: %s: %s", exc.__class__.__name__, exc)
        return _json_error("Failed to fetch logs", status=500)
    return jsonify(records)


@bp.route("/export", methods=["GET"])
def export_logs():
    """Return stored records as a downloadable JSON document."""

    start_time, limit = _query_filters()
    try:
        records = get_event_store().query(min_timestamp=start_time, limit=limit)
    except SQLAlchemyError as exc:
        logger.error("Error exporting logs: %s: %s", exc.__class__.__name__, exc)
        return _json_error("Failed to export logs", status=500)

    stamp = utc_timestamp().replace(":", "-")
    response = jsonify(records)
    response.headers["Content-Disposition"] = f'attachment; filename="logs-{stamp}.json"'
    return response


@bp.route("", methods=["DELETE"])
def purge_logs():
    """Delete every stored record."""

    try:
        deleted = get_event_store().purge()
    except SQLAlchemyError as exc:
        logger.error("Error clearing logs: %s: %s", exc.__class__.__name__, exc)
        return _json_error("Failed to clear logs", status=500)

    logger.warning("Cleared %d log records", deleted)
    return _json_response({"success": True, "message": f"Cleared {deleted} log records"})
