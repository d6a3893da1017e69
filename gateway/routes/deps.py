from fastapi import Request

from ..config import Settings
from ..services.catalog import Catalog
from ..services.dispatcher import Dispatcher


def get_app_catalog(request: Request) -> Catalog:
    return request.app.state.catalog


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher
