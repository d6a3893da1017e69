"""Catch-all route: every declared endpoint path is served from here."""

from __future__ import annotations

from typing import Any, Dict, List, Union
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, Response

from ..services.catalog import Catalog
from ..services.dispatcher import Dispatcher, InboundRequest
from ..services.negotiation import wants_documentation
from ..services.pages import render_not_found_page
from ..services.proxy import strict_json_loads
from ..utils.errors import invalid_body_error
from .deps import get_app_catalog, get_dispatcher

router = APIRouter(tags=["Endpoints"])

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def parse_form(raw: bytes) -> Dict[str, Union[str, List[str]]]:
    """Decode a form body; a key given more than once maps to a list of its values."""
    form: Dict[str, Union[str, List[str]]] = {}
    pairs = parse_qsl(raw.decode("utf-8"), keep_blank_values=True)
    for key, value in pairs:
        if key not in form:
            form[key] = value
        elif isinstance(form[key], list):
            form[key].append(value)
        else:
            form[key] = [form[key], value]
    return form


async def read_body(request: Request) -> Any:
    """Parse a JSON or form-encoded request body; anything else is ignored."""
    raw = await request.body()
    if not raw:
        return None

    content_type = request.headers.get("content-type", "")
    if "application/x-www-form-urlencoded" in content_type:
        try:
            return parse_form(raw)
        except UnicodeDecodeError as exc:
            raise invalid_body_error("Request body is not valid UTF-8 form data", exc) from exc
    if "json" in content_type:
        try:
            return strict_json_loads(raw)
        except ValueError as exc:
            raise invalid_body_error("Request body is not valid JSON", exc) from exc
    return None


def not_found_response(request: Request, catalog: Catalog) -> Response:
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"

    if wants_documentation(request.headers.get("accept")):
        return HTMLResponse(render_not_found_page(url), status_code=status.HTTP_404_NOT_FOUND)

    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "Not Found",
            "message": f"Route {url} not found",
            "method": request.method,
            "availableEndpoints": [item.path for item in catalog.list_all_endpoints()],
        },
    )


@router.api_route("/{full_path:path}", methods=PROXY_METHODS, include_in_schema=False)
async def dispatch_endpoint(
    request: Request,
    full_path: str,
    catalog: Catalog = Depends(get_app_catalog),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    body = await read_body(request) if request.method == "POST" else None
    inbound = InboundRequest(
        method=request.method,
        path=request.url.path,
        accept=request.headers.get("accept"),
        query_params=tuple(request.query_params.multi_items()),
        body=body,
    )

    result = await dispatcher.dispatch(inbound)
    if result is None:
        return not_found_response(request, catalog)

    if result.is_html:
        return HTMLResponse(result.html, status_code=result.status_code)
    return JSONResponse(content=result.content, status_code=result.status_code)
