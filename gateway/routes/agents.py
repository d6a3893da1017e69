from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import HTMLResponse, JSONResponse

from ..schemas import Agent
from ..services.catalog import Catalog
from ..services.negotiation import wants_documentation
from ..services.pages import render_agent_page, render_agents_page
from .deps import get_app_catalog

router = APIRouter(prefix="/agents", tags=["Agents"])


def _agent_summary(catalog: Catalog, agent: Agent) -> Dict[str, Any]:
    return {
        "id": agent.id,
        "name": agent.name,
        "description": agent.description,
        "icon": agent.icon,
        "endpointCount": catalog.endpoint_count(agent),
        "link": f"/agents/{agent.id}",
    }


def _agent_detail(agent: Agent) -> Dict[str, Any]:
    # Groups are internal; endpoints are listed flat
    endpoints: List[Dict[str, Any]] = [
        {
            "id": endpoint.id,
            "name": endpoint.name,
            "description": endpoint.description,
            "path": endpoint.path,
            "method": list(endpoint.allowed_methods),
            "link": endpoint.path,
        }
        for endpoint in agent.endpoints
    ]
    return {
        "id": agent.id,
        "name": agent.name,
        "description": agent.description,
        "icon": agent.icon,
        "endpoints": endpoints,
    }


@router.get("", summary="List agents")
async def list_agents(
    accept: Optional[str] = Header(None),
    catalog: Catalog = Depends(get_app_catalog),
):
    if wants_documentation(accept):
        return HTMLResponse(render_agents_page(catalog))
    return JSONResponse(content={
        "agents": [_agent_summary(catalog, agent) for agent in catalog.list_agents()],
    })


@router.get("/{agent_id}", summary="Agent details")
async def get_agent(
    agent_id: str,
    accept: Optional[str] = Header(None),
    catalog: Catalog = Depends(get_app_catalog),
):
    agent = catalog.get_agent_by_id(agent_id)
    if agent is None:
        return JSONResponse(
            content={"error": "Agent not found"},
            status_code=status.HTTP_404_NOT_FOUND,
        )

    if wants_documentation(accept):
        return HTMLResponse(render_agent_page(agent))
    return JSONResponse(content={"agent": _agent_detail(agent)})
