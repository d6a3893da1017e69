from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence, Tuple

import httpx

from ..utils.http_client import HttpClient

logger = logging.getLogger("gateway.proxy")

USER_AGENT = "Agent-Gateway/1.0"
UPSTREAM_HEADERS = {
    "Content-Type": "application/json",
    "User-Agent": USER_AGENT,
}

QueryItems = Sequence[Tuple[str, str]]


@dataclass(frozen=True, slots=True)
class ProxyResult:
    success: bool
    upstream_url: str
    status_code: Optional[int] = None
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, upstream_url: str, status_code: int, data: Any) -> "ProxyResult":
        return cls(success=True, upstream_url=upstream_url, status_code=status_code, data=data)

    @classmethod
    def failed(cls, upstream_url: str, error: str) -> "ProxyResult":
        return cls(success=False, upstream_url=upstream_url, error=error)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def strict_json_loads(content: bytes) -> Any:
    """Strict JSON decode: NaN, Infinity and -Infinity are rejected."""
    return json.loads(content, parse_constant=_reject_constant)


def append_query(upstream_url: str, query_params: Iterable[Tuple[str, str]]) -> httpx.URL:
    """Append query pairs to the upstream URL, keeping its own query and repeated keys."""
    url = httpx.URL(upstream_url)
    items = list(url.params.multi_items()) + [(str(k), str(v)) for k, v in query_params]
    if not items:
        return url
    return url.copy_with(params=httpx.QueryParams(items))


class ProxyExecutor:
    """Sends one request to an upstream and folds the outcome into a ProxyResult.

    Nothing raised by the transport or by JSON decoding escapes ``execute``.
    """

    def __init__(self, client: HttpClient) -> None:
        self._client = client

    async def execute(
        self,
        upstream_url: str,
        method: str,
        query_params: Optional[QueryItems] = None,
        body: Any = None,
    ) -> ProxyResult:
        try:
            url = append_query(upstream_url, query_params or ())
            kwargs: dict[str, Any] = {"headers": UPSTREAM_HEADERS}
            # Only POST forwards a body
            if method == "POST" and body:
                kwargs["json"] = body

            response = await self._client.request(method, str(url), **kwargs)
            data = strict_json_loads(response.content)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            message = str(exc) or exc.__class__.__name__
            logger.warning("Upstream %s %s failed: %s", method, upstream_url, message)
            return ProxyResult.failed(upstream_url, message)

        logger.debug("Upstream %s %s -> %s", method, upstream_url, response.status_code)
        return ProxyResult.ok(upstream_url, response.status_code, data)
