from fastapi import APIRouter, Depends, Header
from fastapi.responses import HTMLResponse, JSONResponse
from typing import Optional

from .. import __version__
from ..services.catalog import Catalog
from ..services.negotiation import wants_documentation
from ..services.pages import render_home_page
from .deps import get_app_catalog

router = APIRouter(tags=["Gateway"])


@router.get("/", summary="Gateway overview")
async def gateway_home(
    accept: Optional[str] = Header(None),
    catalog: Catalog = Depends(get_app_catalog),
):
    if wants_documentation(accept):
        return HTMLResponse(render_home_page(catalog))

    return JSONResponse(content={
        "message": "Agent API Gateway",
        "version": __version__,
        "description": "Dynamic routing with content negotiation",
        "agents": len(catalog.list_agents()),
        "endpoints": len(catalog.list_all_endpoints()),
        "links": {
            "health": "/health",
            "agents": "/agents",
            "documentation": "Visit any endpoint with Accept: text/html header",
        },
    })
