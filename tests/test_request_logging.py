"""Tests for the per-request ingestion hook."""

from __future__ import annotations

import json


def _records_for(store, method: str) -> list[dict]:
    store.flush(timeout=5)
    return [record for record in store.query() if record["method"] == method]


def test_get_request_is_recorded_with_query_string_and_headers(client, store):
    """Page loads should be stored with their full path and headers."""

    response = client.get("/login?ref=newsletter", headers={"X-Trace": "abc"})

    assert response.status_code == 200
    records = _records_for(store, "GET")
    assert len(records) == 1
    record = records[0]
    assert record["url"] == "/login?ref=newsletter"
    assert record["body"] == ""
    headers = json.loads(record["headers"])
    assert headers["x-trace"] == "abc"
    assert record["timestamp"].endswith("Z")


def test_json_body_is_serialized(client, store):
    """A non-empty JSON object body should be kept verbatim."""

    client.post("/api/logs", json={"type": "info", "message": "hello"})

    records = _records_for(store, "POST")
    assert len(records) == 1
    assert records[0]["url"] == "/api/logs"
    assert json.loads(records[0]["body"]) == {"type": "info", "message": "hello"}


def test_empty_json_object_body_is_stored_as_blank(client, store):
    """An empty object carries no body worth storing."""

    client.put("/anything", json={})

    records = _records_for(store, "PUT")
    assert len(records) == 1
    assert records[0]["body"] == ""


def test_form_body_is_serialized(client, store):
    """Form submissions should be stored as a field mapping."""

    client.post("/login", data={"username": "admin"})

    records = _records_for(store, "POST")
    assert json.loads(records[0]["body"]) == {"username": "admin"}


def test_unrouted_paths_and_methods_are_recorded(client, store):
    """Requests are logged even when no handler accepts them."""

    assert client.get("/missing").status_code == 404
    assert client.patch("/login").status_code == 405

    store.flush(timeout=5)
    seen = {(record["method"], record["url"]) for record in store.query()}
    assert ("GET", "/missing") in seen
    assert ("PATCH", "/login") in seen


def test_logging_errors_never_fail_the_request(client, store, monkeypatch):
    """A broken store must not turn into a failed response."""

    def explode(record):
        raise RuntimeError("queue unavailable")

    monkeypatch.setattr(store, "append", explode)

    response = client.get("/login")

    assert response.status_code == 200


def test_closed_store_does_not_fail_the_request(client, store):
    """Requests proceed after the store stops accepting writes."""

    store.close()

    assert client.get("/").status_code == 200


def test_json_array_body_is_serialized(client, store):
    """Non-empty JSON arrays are request bodies too."""

    client.post("/collect", json=[{"event": "click"}, {"event": "key"}])

    records = _records_for(store, "POST")
    assert json.loads(records[0]["body"]) == [{"event": "click"}, {"event": "key"}]


def test_empty_json_array_body_is_stored_as_blank(client, store):
    """An empty array carries nothing worth storing."""

    client.post("/collect", json=[])

    assert _records_for(store, "POST")[0]["body"] == ""
