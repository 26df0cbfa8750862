"""Tests for the request context middleware.

Every response gets an X-Request-ID header (generated or echoed back).
"""

from __future__ import annotations

import logging
import uuid

from fastapi.testclient import TestClient


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)  # raises ValueError if invalid


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    custom_id = "my-custom-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": custom_id})
    assert resp.headers.get("x-request-id") == custom_id


def test_request_id_present_on_404(client: TestClient) -> None:
    resp = client.get("/oauth/servers/ghost")
    assert resp.status_code == 404
    assert resp.headers.get("x-request-id") is not None


def test_request_summary_logged(client: TestClient, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="oauth_registry.middleware.request_context"):
        client.get("/health", headers={"X-Request-ID": "trace-me"})

    records = [r for r in caplog.records if getattr(r, "request_id", None) == "trace-me"]
    assert records
    assert records[0].path == "/health"
    assert records[0].status_code == 200
