"""
Test configuration and fixtures for the Agent API Gateway tests.

Upstream services are replaced by an in-process ``httpx.MockTransport`` so no
test touches the network.
"""

from __future__ import annotations

import copy
import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from gateway.config import Settings
from gateway.main import create_app
from gateway.services.catalog import Catalog
from gateway.services.dispatcher import Dispatcher
from gateway.services.proxy import ProxyExecutor
from gateway.utils.http_client import HttpClient

PUBLIC_URL = "http://gateway.test"

SAMPLE_CATALOG: Dict[str, Any] = {
    "agents": [
        {
            "id": "weather-agent",
            "name": "Weather Agent",
            "description": "Weather data",
            "icon": "W",
            "groups": [
                {
                    "name": "Weather API",
                    "baseUrl": "https://wx.example.com",
                    "endpoints": [
                        {
                            "id": "current",
                            "name": "Current Weather",
                            "description": "Current conditions",
                            "path": "/weather/current",
                            "upstreamUrl": "/current",
                            "method": "GET",
                            "parameters": "city=berlin",
                            "exampleResponse": {"temp": 72},
                        },
                        {
                            "id": "alerts",
                            "name": "Weather Alerts",
                            "description": "Alerts from another provider",
                            "path": "/weather/alerts",
                            "upstreamUrl": "https://alerts.example.org/x",
                            "method": "GET",
                            "exampleResponse": {"alerts": []},
                        },
                    ],
                }
            ],
        },
        {
            "id": "echo-agent",
            "name": "Echo Agent",
            "description": "Echoes requests",
            "icon": "E",
            "groups": [
                {
                    "name": "Echo",
                    "baseUrl": "https://echo.example.com/v1/",
                    "endpoints": [
                        {
                            "id": "echo",
                            "name": "Echo",
                            "description": "Echo the request",
                            "path": "/echo",
                            "upstreamUrl": "echo",
                            "method": ["GET", "POST"],
                            "exampleResponse": {},
                        },
                        {
                            "id": "list",
                            "name": "Echo List",
                            "path": "/echo/list",
                            "upstreamUrl": "/list",
                            "method": "GET",
                        },
                    ],
                },
                {
                    "name": "Broken",
                    "endpoints": [
                        {
                            "id": "broken",
                            "name": "Broken",
                            "path": "/broken",
                            "upstreamUrl": "/nowhere",
                            "method": "GET",
                        }
                    ],
                },
            ],
        },
    ]
}

DECLARED_PATHS = ["/weather/current", "/weather/alerts", "/echo", "/echo/list", "/broken"]


class UpstreamStub:
    """Records outbound requests and answers them from registered factories.

    Unregistered URLs behave like an unreachable host.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def add(
        self,
        url: str,
        *,
        status_code: int = 200,
        json_body: Any = None,
        content: Optional[bytes] = None,
    ) -> None:
        def factory(request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status_code, content=content)
            return httpx.Response(status_code, json=json_body)

        self._routes[url] = factory

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        factory = self._routes.get(key)
        if factory is None:
            raise httpx.ConnectError("Connection refused", request=request)
        return factory(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def catalog_data() -> Dict[str, Any]:
    return copy.deepcopy(SAMPLE_CATALOG)


@pytest.fixture
def catalog(catalog_data) -> Catalog:
    return Catalog.from_dict(catalog_data)


@pytest.fixture
def upstream() -> UpstreamStub:
    return UpstreamStub()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(PUBLIC_URL=f"{PUBLIC_URL}/", ENVIRONMENT="development", CORS_ALLOWED_ORIGINS="*")


@pytest_asyncio.fixture
async def executor(upstream):
    client = HttpClient(transport=httpx.MockTransport(upstream.handler))
    yield ProxyExecutor(client)
    await client.close()


@pytest.fixture
def dispatcher(catalog, executor) -> Dispatcher:
    return Dispatcher(catalog, executor, PUBLIC_URL)


@pytest.fixture
def app(test_settings, catalog, upstream):
    return create_app(
        settings=test_settings,
        catalog=catalog,
        upstream_transport=httpx.MockTransport(upstream.handler),
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests that exercise the full HTTP surface"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
