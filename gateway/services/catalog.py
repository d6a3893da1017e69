from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from pydantic import ValidationError

from ..config import get_settings
from ..schemas import Agent, CatalogDocument, Endpoint, Group
from ..utils.errors import CatalogError
from .routing import is_absolute_url

logger = logging.getLogger("gateway.catalog")

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "agents.json"


@dataclass(frozen=True, slots=True)
class ResolvedRoute:
    agent: Agent
    group: Group
    endpoint: Endpoint


@dataclass(frozen=True, slots=True)
class ListedEndpoint:
    """An endpoint annotated with its owning agent, for listings."""

    endpoint: Endpoint
    agent_id: str
    agent_name: str
    agent_icon: str

    @property
    def path(self) -> str:
        return self.endpoint.path


class Catalog:
    """Read-only registry of agents, their groups and endpoints.

    Built once; every lookup works on the same immutable snapshot, so any
    number of requests can share one instance without coordination.
    """

    def __init__(self, agents: Iterable[Agent]) -> None:
        self._agents: Tuple[Agent, ...] = tuple(agents)
        self._by_id: Dict[str, Agent] = {}
        self._routes: list[ResolvedRoute] = []

        for agent in self._agents:
            if agent.id in self._by_id:
                raise CatalogError(f"Duplicate agent id: {agent.id}")
            self._by_id[agent.id] = agent
            for group in agent.groups:
                for endpoint in group.endpoints:
                    self._routes.append(ResolvedRoute(agent=agent, group=group, endpoint=endpoint))

        seen: Dict[str, str] = {}
        for route in self._routes:
            path = route.endpoint.path
            if path in seen:
                raise CatalogError(
                    f"Duplicate endpoint path {path} (agents {seen[path]} and {route.agent.id})"
                )
            seen[path] = route.agent.id

        self._listed: Tuple[ListedEndpoint, ...] = tuple(
            ListedEndpoint(
                endpoint=route.endpoint,
                agent_id=route.agent.id,
                agent_name=route.agent.name,
                agent_icon=route.agent.icon,
            )
            for route in self._routes
        )

        for route in self._routes:
            if not route.group.base_url and not is_absolute_url(route.endpoint.upstream_url):
                logger.warning(
                    "Endpoint %s has relative upstream %s but group %r of agent %s has no baseUrl",
                    route.endpoint.path,
                    route.endpoint.upstream_url,
                    route.group.name,
                    route.agent.id,
                )

    @classmethod
    def from_dict(cls, data: Union[Dict[str, Any], list]) -> "Catalog":
        if isinstance(data, list):
            data = {"agents": data}
        try:
            document = CatalogDocument.model_validate(data)
        except ValidationError as exc:
            raise CatalogError(f"Invalid catalog: {exc}") from exc
        return cls(document.agents)

    def list_agents(self) -> Tuple[Agent, ...]:
        return self._agents

    def get_agent_by_id(self, agent_id: str) -> Optional[Agent]:
        return self._by_id.get(agent_id)

    def list_all_endpoints(self) -> Tuple[ListedEndpoint, ...]:
        return self._listed

    def endpoint_count(self, agent: Agent) -> int:
        return agent.endpoint_count

    def find_by_path(self, path: str) -> Optional[ResolvedRoute]:
        # Exact, case-sensitive; "/a/" and "/a" are different paths
        for route in self._routes:
            if route.endpoint.path == path:
                return route
        return None

    def __len__(self) -> int:
        return len(self._agents)


def load_catalog(path: Union[str, Path, None] = None) -> Catalog:
    """Load a catalog from a JSON file (``{"agents": [...]}`` or a bare list)."""
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
    try:
        raw = json.loads(catalog_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CatalogError(f"Cannot read catalog {catalog_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Catalog {catalog_path} is not valid JSON: {exc}") from exc

    catalog = Catalog.from_dict(raw)
    logger.info(
        "Catalog loaded from %s: %d agents, %d endpoints",
        catalog_path,
        len(catalog.list_agents()),
        len(catalog.list_all_endpoints()),
    )
    return catalog


@lru_cache
def get_catalog() -> Catalog:
    return load_catalog(get_settings().catalog_path)
