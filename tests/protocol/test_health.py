from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from capturechess.protocol.http.app import create_app
from capturechess.protocol.http.logging_middleware import puzzle_context


def test_healthz() -> None:
    client = TestClient(create_app())
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert r.headers.get("x-request-id")


def test_request_id_is_echoed() -> None:
    client = TestClient(create_app())
    r = client.get("/healthz", headers={"x-request-id": "abc123"})
    assert r.headers["x-request-id"] == "abc123"


def test_puzzle_context_from_path() -> None:
    assert puzzle_context("/api/puzzles/abc/move") == {"puzzle_id": "abc", "action": "move"}
    assert puzzle_context("/api/puzzles/abc") == {"puzzle_id": "abc"}
    assert puzzle_context("/api/puzzles/generate") == {}
    assert puzzle_context("/api/puzzles") == {}
    assert puzzle_context("/api/solve") == {}


def test_session_requests_log_puzzle_id(caplog: pytest.LogCaptureFixture) -> None:
    client = TestClient(create_app())
    pid = client.post("/api/puzzles", json={"fen": "8/8/8/p7/8/8/8/R7"}).json()["puzzle_id"]
    caplog.set_level(logging.INFO, logger="capturechess.protocol.http.logging_middleware")
    caplog.clear()
    client.get(f"/api/puzzles/{pid}/hint")
    records = [r for r in caplog.records if r.name.endswith("logging_middleware")]
    assert [r.getMessage() for r in records] == ["request", "response"]
    for r in records:
        assert getattr(r, "puzzle_id") == pid
        assert getattr(r, "action") == "hint"
    assert getattr(records[1], "status_code") == 200
