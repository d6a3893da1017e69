from fastapi import HTTPException
from fastapi.testclient import TestClient

from gateway.utils.errors import _sanitize_error_message, api_error, invalid_body_error


def _raise_from_dispatcher(app, monkeypatch, exc):
    async def fail(request):
        raise exc

    monkeypatch.setattr(app.state.dispatcher, "dispatch", fail)


def test_api_error_detail_is_unwrapped(app, monkeypatch):
    """Errors built by api_error carry 'error' at the root, not under 'detail'."""
    with TestClient(app) as client:
        _raise_from_dispatcher(app, monkeypatch, api_error("My Message", code="my_code"))
        response = client.get("/weather/current")

    assert response.status_code == 400
    assert response.json() == {"error": {"message": "My Message", "code": "my_code"}}


def test_plain_http_exception_keeps_detail_wrapper(app, monkeypatch):
    with TestClient(app) as client:
        _raise_from_dispatcher(app, monkeypatch, HTTPException(status_code=404, detail="Not Found"))
        response = client.get("/weather/current")

    assert response.status_code == 404
    assert response.json() == {"detail": "Not Found"}


def test_api_error_sanitizes_message():
    exc = api_error("upstream rejected api_key=abc123", status_code=502, code="upstream")

    assert exc.status_code == 502
    assert exc.detail == {"error": {"message": "upstream rejected [REDACTED]", "code": "upstream"}}


def test_api_error_without_sanitizing():
    exc = api_error("token=visible", sanitize=False)
    assert exc.detail["error"]["message"] == "token=visible"


def test_sanitize_truncates_long_messages():
    sanitized = _sanitize_error_message("x" * 600)
    assert sanitized == "x" * 500 + "... [truncated]"


def test_invalid_body_error():
    exc = invalid_body_error("Request body is not valid JSON", ValueError("Expecting value"))

    assert exc.status_code == 400
    assert exc.detail == {"error": {"message": "Request body is not valid JSON", "code": "invalid_body"}}
