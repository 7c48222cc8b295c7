from fastapi import FastAPI
from fastapi.testclient import TestClient

from timetabler.core.middleware import RequestSizeLimitMiddleware, RequestTimingMiddleware


def _echo_app(max_bytes):
    app = FastAPI()
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=max_bytes)

    @app.post("/echo")
    def echo(payload: dict) -> dict:
        return payload

    return app


def test_oversized_body_is_rejected():
    with TestClient(_echo_app(16)) as client:
        response = client.post("/echo", json={"entries": ["x" * 64]})

    assert response.status_code == 413
    assert response.json()["details"]["max_bytes"] == 16


def test_small_body_passes_through():
    with TestClient(_echo_app(1024)) as client:
        response = client.post("/echo", json={"ok": True})

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_timing_header_is_added(client):
    response = client.get("/api/health")

    assert response.headers["X-Process-Time"].endswith("ms")


def test_timing_middleware_on_a_bare_app():
    app = FastAPI()
    app.add_middleware(RequestTimingMiddleware)

    @app.get("/ping")
    def ping() -> dict:
        return {"pong": True}

    with TestClient(app) as client:
        assert "X-Process-Time" in client.get("/ping").headers
