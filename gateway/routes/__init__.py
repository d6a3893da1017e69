"""
Gateway routes

Route Modules:
- health: liveness probe with catalog counts
- home: gateway overview (HTML or JSON)
- agents: agent listing and details
- endpoints: catch-all dispatch for declared endpoint paths (register last)
"""

from . import agents, endpoints, health, home

__all__ = ["agents", "endpoints", "health", "home"]
