import logging
import time

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from ..config import Settings
from ..services.catalog import Catalog
from ..services.dispatcher import utc_timestamp
from .deps import get_app_catalog, get_app_settings

router = APIRouter()

logger = logging.getLogger("gateway.health")


@router.get(
    "/health",
    tags=["Monitoring"],
    summary="Health check endpoint",
)
@router.get(
    "/healthz",
    tags=["Monitoring"],
    summary="Kubernetes style health check endpoint",
    include_in_schema=False,
)
async def health_check(
    request: Request,
    catalog: Catalog = Depends(get_app_catalog),
    settings: Settings = Depends(get_app_settings),
):
    logger.debug("Health probe received")
    uptime = time.monotonic() - request.app.state.started_at
    return JSONResponse(
        content={
            "status": "OK",
            "timestamp": utc_timestamp(),
            "uptime": round(uptime, 3),
            "environment": settings.environment,
            "agentCount": len(catalog.list_agents()),
            "endpointCount": len(catalog.list_all_endpoints()),
        },
        status_code=status.HTTP_200_OK,
    )
