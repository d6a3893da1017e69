"""Pydantic schema exports."""

from .catalog import Agent, CatalogDocument, Endpoint, Group

__all__ = [
    "Agent",
    "CatalogDocument",
    "Endpoint",
    "Group",
]
