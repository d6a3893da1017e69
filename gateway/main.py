from contextlib import asynccontextmanager
import logging
import os
import time
import traceback
from typing import Optional

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, get_settings
from .services.catalog import Catalog, get_catalog
from .services.dispatcher import Dispatcher
from .services.proxy import ProxyExecutor
from .utils.errors import _sanitize_error_message
from .utils.http_client import HttpClient
from .utils.logging_middleware import LoggingMiddleware
from .utils.security_headers import SecurityHeadersMiddleware
from .utils.logging_setup import setup_logging

from .routes.agents import router as agents_router
from .routes.endpoints import router as endpoints_router
from .routes.health import router as health_router
from .routes.home import router as home_router

logger = logging.getLogger("gateway.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    catalog: Catalog = app.state.catalog

    client = HttpClient(transport=app.state.upstream_transport)
    app.state.dispatcher = Dispatcher(catalog, ProxyExecutor(client), settings.public_url)

    logger.info("Gateway ready | public URL %s | environment %s | pid %d",
                settings.public_url, settings.environment, os.getpid())
    logger.info("Serving %d agents, %d endpoints",
                len(catalog.list_agents()), len(catalog.list_all_endpoints()))

    yield

    await client.close()
    logger.info("Gateway stopped")


def create_app(
    settings: Optional[Settings] = None,
    catalog: Optional[Catalog] = None,
    upstream_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(
        title="Agent API Gateway",
        lifespan=lifespan,
        redirect_slashes=False,  # paths match exactly, no 307 on trailing slash
    )
    app.state.settings = settings
    app.state.catalog = catalog if catalog is not None else get_catalog()
    app.state.upstream_transport = upstream_transport
    app.state.started_at = time.monotonic()

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.error("Request validation error on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.errors()},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict) and "error" in exc.detail:
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.detail,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        logger.error(stack)

        content = {"error": _sanitize_error_message(str(exc)) or "Internal Server Error"}
        if settings.is_development:
            content["stack"] = stack
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content,
        )

    allowed_origins = settings.allowed_origins
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials="*" not in allowed_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(
        SecurityHeadersMiddleware,
        hsts=settings.public_url.startswith("https://"),
    )
    app.add_middleware(LoggingMiddleware)

    app.include_router(health_router, tags=["Monitoring"])
    app.include_router(home_router)
    app.include_router(agents_router)
    # Catch-all: must stay last
    app.include_router(endpoints_router)

    return app


# Uvicorn entry: uvicorn gateway.main:app
app = create_app()
