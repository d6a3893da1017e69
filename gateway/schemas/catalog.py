from __future__ import annotations

import re
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

AGENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9._~-]+$")


class Endpoint(BaseModel):
    """One routable path, served either as documentation or as proxied data."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    description: str = ""
    path: str
    upstream_url: str = Field(..., alias="upstreamUrl")
    # Declared as "method": a single verb or a list of verbs
    allowed_methods: Tuple[str, ...] = Field(..., alias="method")
    parameters: Optional[str] = None
    example_response: Any = Field(default=None, alias="exampleResponse")

    @field_validator("path")
    @classmethod
    def _path_is_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError(f"endpoint path must start with '/': {value!r}")
        return value

    @field_validator("allowed_methods", mode="before")
    @classmethod
    def _normalize_methods(cls, value: Any) -> Tuple[str, ...]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError("method must be a verb or a list of verbs")

        methods: List[str] = []
        for item in value:
            if not isinstance(item, str) or not item.strip():
                raise ValueError(f"invalid HTTP method: {item!r}")
            verb = item.strip()
            if verb not in methods:
                methods.append(verb)
        if not methods:
            raise ValueError("at least one HTTP method is required")
        return tuple(methods)

    @property
    def primary_method(self) -> str:
        return self.allowed_methods[0]

    def allows(self, method: str) -> bool:
        return method in self.allowed_methods


class Group(BaseModel):
    """Endpoints of one agent sharing an upstream base URL."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    base_url: Optional[str] = Field(default=None, alias="baseUrl")
    endpoints: Tuple[Endpoint, ...] = ()


class Agent(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    description: str = ""
    icon: str = ""
    groups: Tuple[Group, ...] = ()

    @field_validator("id")
    @classmethod
    def _id_is_url_safe(cls, value: str) -> str:
        if not AGENT_ID_PATTERN.match(value):
            raise ValueError(f"agent id must be a URL-safe token: {value!r}")
        return value

    @property
    def endpoints(self) -> Tuple[Endpoint, ...]:
        return tuple(endpoint for group in self.groups for endpoint in group.endpoints)

    @property
    def endpoint_count(self) -> int:
        return sum(len(group.endpoints) for group in self.groups)


class CatalogDocument(BaseModel):
    """Top-level shape of a catalog file."""

    agents: List[Agent] = Field(default_factory=list)
