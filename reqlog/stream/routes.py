"""Websocket channel accepting device fingerprint submissions."""
from __future__ import annotations

import json
import logging
from typing import Optional

from ..event_store import EventStore, PendingRecord, get_event_store, serialize_payload
from ..extensions import sock
from . import bp

STREAM_METHOD = "WS"

logger = logging.getLogger(__name__)


def _bot_verdict(fields: dict) -> str:
    detection = fields.get("botDetection")
    if isinstance(detection, dict) and detection.get("humanVerified"):
        return "Human"
    return "Unknown"


def handle_stream_message(store: EventStore, raw: str | bytes) -> Optional[PendingRecord]:
    """Store one inbound frame if it carries a fingerprint.

    Returns the record handed to the store, or ``None`` when the frame was
    ignored.
    """
    try:
        message = json.loads(raw)
    except (TypeError, ValueError) as exc:
        logger.warning("WS parse error: %s", exc)
        return None

    if not isinstance(message, dict) or message.get("type") != "fingerprint":
        return None

    fields = message.get("data")
    fields = dict(fields) if isinstance(fields, dict) else {}
    # A non-string origin stays in the body.
    origin = fields.get("origin")
    if isinstance(origin, str):
        del fields["origin"]
    else:
        origin = ""

    record = PendingRecord(
        method=STREAM_METHOD,
        url=origin,
        body=serialize_payload(fields),
    )
    store.append(record)
    logger.info(
        "[FINGERPRINT] Received from %s - Bot Detection: %s",
        record.url,
        _bot_verdict(fields),
    )
    return record


def pump_messages(ws, store: EventStore) -> None:
    """Feed frames from ``ws`` to the store until the connection closes."""
    while True:
        raw = ws.receive()
        if raw is None:
            continue
        handle_stream_message(store, raw)


@sock.route("/ws", bp=bp)
def fingerprint_stream(ws):
    """Accept fingerprint frames for the lifetime of the connection."""
    pump_messages(ws, get_event_store())
