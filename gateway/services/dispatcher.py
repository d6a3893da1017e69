"""
Request dispatch for declared endpoints.

A request goes through these gates, any of which may end it early:

    resolve path -> check method -> negotiate -> document | proxy -> respond

An unknown path is not an error here: ``dispatch`` returns None and the
HTTP layer answers with its generic 404.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..utils.errors import ConfigurationError
from .catalog import Catalog, ResolvedRoute
from .negotiation import wants_documentation
from .pages import render_endpoint_page
from .proxy import ProxyExecutor
from .routing import build_upstream_url, resolve

logger = logging.getLogger("gateway.dispatcher")


class DispatchOutcome(str, Enum):
    METHOD_NOT_ALLOWED = "method_not_allowed"
    DOCUMENTATION = "documentation"
    PROXIED = "proxied"
    UPSTREAM_FAILURE = "upstream_failure"
    CONFIGURATION_ERROR = "configuration_error"


@dataclass(frozen=True, slots=True)
class InboundRequest:
    method: str
    path: str
    accept: Optional[str] = None
    query_params: Tuple[Tuple[str, str], ...] = ()
    body: Any = None


@dataclass(frozen=True, slots=True)
class GatewayResponse:
    status_code: int
    outcome: DispatchOutcome
    content: Dict[str, Any] = field(default_factory=dict)
    html: Optional[str] = None

    @property
    def is_html(self) -> bool:
        return self.html is not None


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with milliseconds, e.g. 2026-01-02T03:04:05.678Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def decorate_payload(endpoint_path: str, agent_name: str, data: Any) -> Dict[str, Any]:
    """Merge gateway metadata with the upstream payload; upstream keys win."""
    envelope: Dict[str, Any] = {
        "endpoint": endpoint_path,
        "agent": agent_name,
        "timestamp": utc_timestamp(),
    }
    if isinstance(data, dict):
        envelope.update(data)
    else:
        envelope["data"] = data
    return envelope


class Dispatcher:
    def __init__(self, catalog: Catalog, executor: ProxyExecutor, public_url: str) -> None:
        self.catalog = catalog
        self.executor = executor
        self.public_url = public_url

    async def dispatch(self, request: InboundRequest) -> Optional[GatewayResponse]:
        route = resolve(self.catalog, request.path)
        if route is None:
            return None

        endpoint = route.endpoint
        if not endpoint.allows(request.method):
            allowed: List[str] = list(endpoint.allowed_methods)
            return GatewayResponse(
                status_code=405,
                outcome=DispatchOutcome.METHOD_NOT_ALLOWED,
                content={
                    "error": "Method Not Allowed",
                    "message": f"This endpoint only accepts {', '.join(allowed)} requests",
                    "endpoint": endpoint.path,
                    "allowedMethods": allowed,
                },
            )

        if wants_documentation(request.accept):
            return GatewayResponse(
                status_code=200,
                outcome=DispatchOutcome.DOCUMENTATION,
                html=render_endpoint_page(route.agent, endpoint, self.public_url),
            )

        return await self._proxy(route, request)

    async def _proxy(self, route: ResolvedRoute, request: InboundRequest) -> GatewayResponse:
        agent, group, endpoint = route.agent, route.group, route.endpoint

        try:
            upstream_url = build_upstream_url(group, endpoint)
        except ConfigurationError as exc:
            logger.error("Configuration error for %s: %s", endpoint.path, exc)
            return GatewayResponse(
                status_code=500,
                outcome=DispatchOutcome.CONFIGURATION_ERROR,
                content={
                    "error": "Configuration Error",
                    "message": str(exc),
                    "endpoint": endpoint.path,
                },
            )

        logger.info(
            "Proxying %s %s -> %s (agent=%s, group=%s)",
            request.method,
            endpoint.path,
            upstream_url,
            agent.name,
            group.name,
        )
        if request.query_params:
            logger.info("  Query params: %s", request.query_params)
        if request.method == "POST" and request.body:
            logger.info("  Body: %s", request.body)

        result = await self.executor.execute(
            upstream_url,
            request.method,
            request.query_params,
            request.body,
        )

        if result.success:
            return GatewayResponse(
                status_code=result.status_code,
                outcome=DispatchOutcome.PROXIED,
                content=decorate_payload(endpoint.path, agent.name, result.data),
            )

        return GatewayResponse(
            status_code=502,
            outcome=DispatchOutcome.UPSTREAM_FAILURE,
            content={
                "error": "Bad Gateway",
                "message": "Failed to proxy request to upstream service",
                "details": result.error,
                "endpoint": endpoint.path,
                "upstream": result.upstream_url,
            },
        )
