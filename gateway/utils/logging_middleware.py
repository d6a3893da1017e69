import logging
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp

logger = logging.getLogger("gateway.access")


def get_client_ip(request: Request) -> str:
    """Return the originating client address.

    X-Forwarded-For is "client, proxy1, proxy2"; the leftmost entry wins.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client:
        return request.client.host
    return "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID", str(uuid.uuid4()))
        request.state.correlation_id = correlation_id
        client_ip = get_client_ip(request)
        start_time = time.time()

        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000
        response.headers["X-Correlation-ID"] = correlation_id
        logger.info(
            f"{client_ip} \"{request.method} {request.url.path}\" | "
            f"Status: {response.status_code} | "
            f"Latency: {process_time:.2f}ms | "
            f"Correlation-ID: {correlation_id}",
            extra={
                "correlation_id": correlation_id,
                "client_ip": client_ip,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "latency_ms": f"{process_time:.2f}",
                "user_agent": request.headers.get("User-Agent", ""),
            }
        )
        return response
