"""Tests for the dispatcher gates: resolve, method check, negotiate, document or proxy."""

import re

import pytest

from gateway.services.dispatcher import (
    DispatchOutcome,
    InboundRequest,
    decorate_payload,
    utc_timestamp,
)

from .conftest import DECLARED_PATHS

ALL_VERBS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]
JSON = "application/json"
HTML = "text/html"


def _request(path, method="GET", accept=JSON, **kwargs):
    return InboundRequest(method=method, path=path, accept=accept, **kwargs)


class TestResolving:
    @pytest.mark.asyncio
    async def test_unknown_path_defers(self, dispatcher, upstream):
        assert await dispatcher.dispatch(_request("/nonexistent")) is None
        assert upstream.requests == []


class TestMethodCheck:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", DECLARED_PATHS)
    async def test_method_validation_is_symmetric(self, dispatcher, catalog, path):
        allowed = catalog.find_by_path(path).endpoint.allowed_methods
        for verb in ALL_VERBS:
            result = await dispatcher.dispatch(_request(path, method=verb, accept=HTML))
            if verb in allowed:
                assert result.outcome is DispatchOutcome.DOCUMENTATION
            else:
                assert result.status_code == 405
                assert result.outcome is DispatchOutcome.METHOD_NOT_ALLOWED
                assert verb not in result.content["allowedMethods"]

    @pytest.mark.asyncio
    async def test_405_lists_allowed_methods(self, dispatcher, upstream):
        result = await dispatcher.dispatch(_request("/weather/current", method="POST"))

        assert result.status_code == 405
        assert result.content == {
            "error": "Method Not Allowed",
            "message": "This endpoint only accepts GET requests",
            "endpoint": "/weather/current",
            "allowedMethods": ["GET"],
        }
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_verb_match_is_case_sensitive(self, dispatcher):
        result = await dispatcher.dispatch(_request("/weather/current", method="get"))
        assert result.status_code == 405


class TestDocumentation:
    @pytest.mark.asyncio
    async def test_html_accept_renders_page_without_upstream_call(self, dispatcher, upstream):
        result = await dispatcher.dispatch(_request("/weather/current", accept=HTML))

        assert result.status_code == 200
        assert result.is_html
        assert "Current Weather" in result.html
        assert "/weather/current" in result.html
        assert "http://gateway.test/weather/current?city=berlin" in result.html
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_both_tokens_select_data(self, dispatcher, upstream):
        upstream.add("https://wx.example.com/current", json_body={"temp": 72})

        result = await dispatcher.dispatch(_request("/weather/current", accept=f"{HTML}, {JSON}"))

        assert result.outcome is DispatchOutcome.PROXIED
        assert not result.is_html


class TestProxying:
    @pytest.mark.asyncio
    async def test_success_envelope(self, dispatcher, upstream):
        upstream.add("https://wx.example.com/current", json_body={"temp": 72})

        result = await dispatcher.dispatch(_request("/weather/current", accept=None))

        assert result.status_code == 200
        assert result.outcome is DispatchOutcome.PROXIED
        assert result.content["endpoint"] == "/weather/current"
        assert result.content["agent"] == "Weather Agent"
        assert result.content["temp"] == 72
        assert "timestamp" in result.content

    @pytest.mark.asyncio
    async def test_upstream_keys_win_on_collision(self, dispatcher, upstream):
        upstream.add("https://wx.example.com/current", json_body={"agent": "upstream", "endpoint": "/x"})

        result = await dispatcher.dispatch(_request("/weather/current"))

        assert result.content["agent"] == "upstream"
        assert result.content["endpoint"] == "/x"

    @pytest.mark.asyncio
    async def test_list_payload_wrapped(self, dispatcher, upstream):
        upstream.add("https://echo.example.com/v1/list", json_body=[1, 2, 3])

        result = await dispatcher.dispatch(_request("/echo/list"))

        assert result.content["data"] == [1, 2, 3]
        assert result.content["agent"] == "Echo Agent"

    @pytest.mark.asyncio
    async def test_upstream_status_relayed(self, dispatcher, upstream):
        upstream.add("https://wx.example.com/current", status_code=429, json_body={"error": "slow down"})

        result = await dispatcher.dispatch(_request("/weather/current"))

        assert result.status_code == 429
        assert result.content["error"] == "slow down"

    @pytest.mark.asyncio
    async def test_query_and_body_forwarded(self, dispatcher, upstream):
        upstream.add("https://echo.example.com/v1/echo", json_body={"ok": True})

        await dispatcher.dispatch(
            _request("/echo", method="POST", query_params=(("a", "1"), ("b", "2")), body={"x": 1})
        )

        assert upstream.last.url.params.multi_items() == [("a", "1"), ("b", "2")]
        assert upstream.last_json() == {"x": 1}

    @pytest.mark.asyncio
    async def test_absolute_override_ignores_group_base(self, dispatcher, upstream):
        upstream.add("https://alerts.example.org/x", json_body={"alerts": []})

        result = await dispatcher.dispatch(_request("/weather/alerts"))

        assert result.status_code == 200
        assert str(upstream.last.url) == "https://alerts.example.org/x"
        assert "wx.example.com" not in str(upstream.last.url)

    @pytest.mark.asyncio
    async def test_upstream_failure_is_502(self, dispatcher, upstream):
        result = await dispatcher.dispatch(_request("/weather/current"))

        assert result.status_code == 502
        assert result.outcome is DispatchOutcome.UPSTREAM_FAILURE
        assert result.content["error"] == "Bad Gateway"
        assert result.content["message"] == "Failed to proxy request to upstream service"
        assert "Connection refused" in result.content["details"]
        assert result.content["endpoint"] == "/weather/current"
        assert result.content["upstream"] == "https://wx.example.com/current"

    @pytest.mark.asyncio
    async def test_missing_base_url_is_configuration_error(self, dispatcher, upstream, caplog):
        with caplog.at_level("ERROR", logger="gateway.dispatcher"):
            result = await dispatcher.dispatch(_request("/broken"))

        assert result.status_code == 500
        assert result.outcome is DispatchOutcome.CONFIGURATION_ERROR
        assert result.content["error"] == "Configuration Error"
        assert result.content["endpoint"] == "/broken"
        assert upstream.requests == []
        assert "/broken" in caplog.text

    @pytest.mark.asyncio
    async def test_configuration_error_page_still_renders(self, dispatcher):
        result = await dispatcher.dispatch(_request("/broken", accept=HTML))
        assert result.status_code == 200


def test_decorate_payload_scalar():
    envelope = decorate_payload("/p", "Agent", "text")
    assert envelope["data"] == "text"
    assert envelope["endpoint"] == "/p"


def test_utc_timestamp_format():
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", utc_timestamp())
