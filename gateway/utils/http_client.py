from __future__ import annotations
import logging
from threading import Lock
from typing import Dict, Optional

import httpx

logger = logging.getLogger("gateway.http")


class HttpClient:
    """
    Thin wrapper around a shared httpx.AsyncClient.

    Clients are shared per name so that every request of the process reuses
    one connection pool. Passing a transport (tests) gives a private client.
    Requests are sent exactly once: no retries, httpx default timeouts.
    """

    _shared_clients: Dict[str, httpx.AsyncClient] = {}
    _lock = Lock()

    def __init__(
        self,
        name: str = "upstream",
        follow_redirects: bool = True,
        headers: Optional[dict] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.name = name
        self._private = transport is not None

        if self._private:
            self._client = httpx.AsyncClient(
                follow_redirects=follow_redirects,
                headers=headers or {},
                transport=transport,
            )
            return

        with HttpClient._lock:
            client = HttpClient._shared_clients.get(name)
            if client is None or client.is_closed:
                client = httpx.AsyncClient(
                    follow_redirects=follow_redirects,
                    headers=headers or {},
                )
                HttpClient._shared_clients[name] = client
            self._client = client

    async def close(self) -> None:
        if not self._private:
            with HttpClient._lock:
                if HttpClient._shared_clients.get(self.name) is self._client:
                    del HttpClient._shared_clients[self.name]
        await self._client.aclose()

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        logger.debug("%s %s", method, url)
        return await self._client.request(method, url, **kwargs)


__all__ = ["HttpClient"]
