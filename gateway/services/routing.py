"""Path resolution and upstream URL construction."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional
from urllib.parse import urlsplit

from ..schemas import Endpoint, Group
from ..utils.errors import ConfigurationError

if TYPE_CHECKING:
    from .catalog import Catalog, ResolvedRoute


def is_absolute_url(value: str) -> bool:
    parts = urlsplit(value)
    return bool(parts.scheme and parts.netloc)


def resolve(catalog: "Catalog", request_path: str) -> Optional["ResolvedRoute"]:
    """Map a request path to its declared (agent, group, endpoint).

    The HTTP method is not considered here, so an unknown path (404) and a
    known path with the wrong verb (405) stay distinguishable.
    """
    return catalog.find_by_path(request_path)


def build_upstream_url(group: Group, endpoint: Endpoint) -> str:
    """Compose the upstream URL for an endpoint.

    An absolute ``upstreamUrl`` is used as is and the group base is ignored.
    A relative one is joined to the group's ``baseUrl`` with exactly one
    slash between them.

    Raises:
        ConfigurationError: relative ``upstreamUrl`` and no group ``baseUrl``
    """
    upstream = endpoint.upstream_url
    if is_absolute_url(upstream):
        return upstream

    if not group.base_url:
        raise ConfigurationError(
            f"Endpoint {endpoint.path} has relative upstream URL {upstream!r} "
            f"but group {group.name!r} declares no baseUrl",
            endpoint_path=endpoint.path,
        )

    return group.base_url.rstrip("/") + "/" + upstream.lstrip("/")
