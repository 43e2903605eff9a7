"""The bundled example app logs every status class to stdout."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from chrona.main import app
from chrona.middleware.error_handler import HTTPError, setup_error_handlers
from chrona.middleware.request_logger import RequestLoggerMiddleware


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("CHRONA_COLORS", "false")
    app.middleware_stack = None  # rebuild so the middleware sees the patched settings
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
    app.middleware_stack = None


def _access_lines(out: str) -> list[str]:
    return [line for line in out.splitlines() if "INCOMING" in line or "OUTGOING" in line]


@pytest.mark.parametrize(
    "path, status, connector",
    [
        ("/200", "200", "-->"),
        ("/301", "301", "-->"),
        ("/304", "304", "-->"),
        ("/404", "404", "-X-"),
        ("/500", "500", "xxx"),
        ("/500-boom", "500", "xxx"),
        ("/error", "500", "xxx"),
    ],
)
def test_routes_are_logged(client, capsys, path, status, connector):
    response = client.get(path, follow_redirects=False)
    assert response.status_code == int(status)

    request_line, response_line = _access_lines(capsys.readouterr().out)
    assert request_line.startswith("[INCOMING] [")
    assert f"<-- GET {path} testclient HTTP/1.1" in request_line
    assert response_line.startswith("[OUTGOING] [")
    assert f"{connector} GET {path} {status} " in response_line


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "version": "1.0.0"}


def test_boom_body_hides_server_message(client):
    response = client.get("/500-boom")
    assert response.json() == {
        "statusCode": 500,
        "error": "Internal Server Error",
        "message": "An internal server error occurred",
    }


def test_client_http_error_keeps_message_and_logged_status(sink):
    demo = FastAPI()
    setup_error_handlers(demo)
    demo.add_middleware(RequestLoggerMiddleware, format=":status", transporter=sink, colors=False)

    @demo.get("/missing")
    async def missing() -> None:
        raise HTTPError.not_found("No such widget")

    response = TestClient(demo).get("/missing")

    assert response.status_code == 404
    assert response.json() == {"statusCode": 404, "error": "Not Found", "message": "No such widget"}
    assert sink.lines == ["", "404"]


def test_http_error_defaults_to_reason_phrase():
    assert HTTPError(403).message == "Forbidden"
    assert HTTPError(599).error == "Unknown"
