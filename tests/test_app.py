from datetime import datetime

import pytest
from fastapi import APIRouter
from pydantic import BaseModel

from backend.config import Environment
from backend.database import DatabaseConnector
from backend.errors import HandlerError
from backend.main import ExecutionMode
from backend.registry import RouteEntry
from conftest import FakeConnector
from test_registry import MOUNT_NAMES

ALLOWED = "http://localhost:5173"
NOT_ALLOWED = "https://not-allowed.example"


class Echo(BaseModel):
    text: str


def _sample_table(calls):
    router = APIRouter()

    @router.post("/echo")
    def echo(body: Echo):
        calls.append(body.text)
        return {"text": body.text}

    @router.get("/crash")
    def crash():
        raise RuntimeError("secret internals")

    @router.get("/teapot")
    def teapot():
        raise HandlerError("short and stout", status_code=418)

    return [RouteEntry("sample", lambda: router)]


# ---------- health ----------

def test_health_reports_disconnected_with_timestamp(make_client):
    client = make_client(FakeConnector(connected=False))
    resp = client.get("/api/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "API is running"
    assert body["dbStatus"] == "Disconnected"
    datetime.fromisoformat(body["timestamp"])


def test_health_reports_connected(client):
    assert client.get("/api/health").json()["dbStatus"] == "Connected"


def test_root_reports_environment(make_client, connector):
    client = make_client(connector, environment=Environment.PRODUCTION)
    assert client.get("/").json() == {
        "status": "Healthcare Database API",
        "dbStatus": "Connected",
        "environment": "production",
    }


def test_production_serverless_without_uri_still_answers(make_client):
    connector = DatabaseConnector(None)
    client = make_client(
        connector,
        mode=ExecutionMode.PER_INVOCATION,
        environment=Environment.PRODUCTION,
    )

    health = client.get("/api/health")
    assert health.status_code == 200
    assert health.json()["dbStatus"] == "Disconnected"

    resp = client.get("/api/hospitals")
    assert resp.status_code == 503
    assert resp.json() == {"error": "Database unavailable", "message": "Please try again later"}


# ---------- routing ----------

@pytest.mark.parametrize("mount", MOUNT_NAMES)
def test_unregistered_sibling_path_returns_404(client, mount):
    resp = client.get(f"/api/{mount}-missing/anything")
    assert resp.status_code == 404
    assert resp.json() == {
        "error": "API endpoint not found",
        "path": f"/api/{mount}-missing/anything",
        "attemptedRoute": f"{mount}-missing",
    }


def test_failed_route_module_falls_through_to_404(make_client, connector):
    def broken():
        raise ImportError("cannot import doctors")

    table = [
        RouteEntry.for_module("hospitals", "hospitals"),
        RouteEntry("doctors", broken),
        RouteEntry.for_module("faqs", "faqs"),
    ]
    client = make_client(connector, route_table=table)

    assert client.app.state.startup_report.failed == ["doctors"]
    assert client.get("/api/hospitals").status_code == 200
    assert client.get("/api/faqs").status_code == 200
    resp = client.get("/api/doctors")
    assert resp.status_code == 404
    assert resp.json()["attemptedRoute"] == "doctors"


def test_static_roots(make_client, connector, tmp_path):
    client = make_client(connector)
    (tmp_path / "public").mkdir()
    (tmp_path / "uploads").mkdir()
    (tmp_path / "public" / "robots.txt").write_text("User-agent: *")
    (tmp_path / "uploads" / "photo.png").write_bytes(b"png")

    assert client.get("/robots.txt").text == "User-agent: *"
    assert client.get("/uploads/photo.png").content == b"png"
    missing = client.get("/nothing-here.html")
    assert missing.status_code == 404
    assert "error" in missing.json()


def test_missing_static_dirs_are_not_created_and_answer_404(make_client, connector, tmp_path):
    client = make_client(connector)

    assert not (tmp_path / "public").exists()
    assert not (tmp_path / "uploads").exists()
    assert client.get("/api/health").status_code == 200
    page = client.get("/index.html")
    assert page.status_code == 404
    assert "error" in page.json()
    assert client.get("/uploads/photo.png").status_code == 404


# ---------- body limit ----------

def test_oversized_body_is_rejected_before_the_route(make_client, connector):
    calls = []
    client = make_client(connector, route_table=_sample_table(calls), max_body_bytes=64)

    resp = client.post("/api/sample/echo", json={"text": "x" * 200})

    assert resp.status_code == 413
    assert resp.json()["error"] == "Payload too large"
    assert calls == []


def test_oversized_streamed_body_is_rejected_before_the_route(make_client, connector):
    calls = []
    client = make_client(connector, route_table=_sample_table(calls), max_body_bytes=64)

    # sin Content-Length: el cliente lo manda con Transfer-Encoding: chunked
    resp = client.post(
        "/api/sample/echo",
        content=iter([b'{"text": "', b"x" * 200, b'"}']),
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 413
    assert resp.json()["error"] == "Payload too large"
    assert calls == []


def test_streamed_body_within_limit_reaches_route(make_client, connector):
    calls = []
    client = make_client(connector, route_table=_sample_table(calls), max_body_bytes=64)
    resp = client.post(
        "/api/sample/echo",
        content=iter([b'{"text": ', b'"hi"}']),
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 200
    assert calls == ["hi"]


def test_body_within_limit_reaches_route(make_client, connector):
    calls = []
    client = make_client(connector, route_table=_sample_table(calls), max_body_bytes=64)
    resp = client.post("/api/sample/echo", json={"text": "hi"})
    assert resp.status_code == 200
    assert calls == ["hi"]


# ---------- errors ----------

def test_unhandled_error_shows_message_in_development(make_client, connector):
    client = make_client(connector, route_table=_sample_table([]))
    resp = client.get("/api/sample/crash")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error", "message": "secret internals"}


def test_unhandled_error_is_redacted_in_production(make_client, connector):
    client = make_client(
        connector,
        route_table=_sample_table([]),
        environment=Environment.PRODUCTION,
    )
    resp = client.get("/api/sample/crash")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error", "message": "Please try again later"}


def test_handler_error_keeps_declared_status(make_client, connector):
    client = make_client(connector, route_table=_sample_table([]))
    resp = client.get("/api/sample/teapot")
    assert resp.status_code == 418
    assert resp.json()["message"] == "short and stout"


def test_validation_error_is_json(make_client, connector):
    client = make_client(connector, route_table=_sample_table([]))
    resp = client.post("/api/sample/echo", json={"wrong": 1})
    assert resp.status_code == 422
    assert resp.json()["error"] == "Validation failed"
    assert resp.json()["details"][0]["loc"] == ["body", "text"]


def test_database_unavailable_is_503(make_client):
    client = make_client(FakeConnector(connected=False))
    resp = client.get("/api/hospitals")
    assert resp.status_code == 503
    assert resp.json()["error"] == "Database unavailable"


# ---------- CORS ----------

def test_cors_production_allows_listed_origin(make_client, connector):
    client = make_client(connector, environment=Environment.PRODUCTION)
    resp = client.get("/api/health", headers={"Origin": ALLOWED})
    assert resp.headers["access-control-allow-origin"] == ALLOWED
    assert resp.headers["access-control-allow-credentials"] == "true"


def test_cors_production_does_not_echo_unknown_origin(make_client, connector):
    client = make_client(connector, environment=Environment.PRODUCTION)
    resp = client.get("/api/health", headers={"Origin": NOT_ALLOWED})
    assert resp.status_code == 200
    assert "access-control-allow-origin" not in resp.headers


def test_cors_production_rejects_unknown_preflight(make_client, connector):
    client = make_client(connector, environment=Environment.PRODUCTION)
    resp = client.options(
        "/api/hospitals",
        headers={"Origin": NOT_ALLOWED, "Access-Control-Request-Method": "GET"},
    )
    assert resp.status_code == 400
    assert "access-control-allow-origin" not in resp.headers


def test_cors_development_echoes_any_origin(make_client, connector):
    client = make_client(connector)
    resp = client.get("/api/health", headers={"Origin": NOT_ALLOWED})
    assert resp.headers["access-control-allow-origin"] == NOT_ALLOWED


def test_frontend_url_origin_is_allowed(make_client, connector):
    client = make_client(
        connector,
        environment=Environment.PRODUCTION,
        allowed_origins=("https://app.example.com",),
    )
    resp = client.get("/api/health", headers={"Origin": "https://app.example.com"})
    assert resp.headers["access-control-allow-origin"] == "https://app.example.com"


# ---------- execution modes ----------

def test_per_invocation_mode_reconnects_before_each_request(make_client):
    connector = FakeConnector(connected=False, connects_on_demand=True)
    client = make_client(connector, mode=ExecutionMode.PER_INVOCATION)

    assert client.get("/api/health").json()["dbStatus"] == "Connected"
    assert connector.ensure_calls == 1
    client.get("/api/health")
    assert connector.ensure_calls == 1


def test_persistent_mode_in_development_does_not_reconnect_per_request(make_client):
    connector = FakeConnector(connected=False, connects_on_demand=True)
    client = make_client(connector)
    client.get("/api/health")
    assert connector.ensure_calls == 0


def test_persistent_mode_disconnects_on_shutdown(make_client, connector):
    client = make_client(connector)
    with client:
        client.get("/api/health")
    assert connector.disconnect_calls == 1
