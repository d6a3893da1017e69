from __future__ import annotations

import logging
import re
from typing import Optional

from fastapi import HTTPException, status

logger = logging.getLogger("gateway.errors")

# Patterns that might leak sensitive information
SENSITIVE_PATTERNS = [
    r"api[_-]?key[=:\s]+\S+",
    r"password[=:\s]+\S+",
    r"token[=:\s]+\S+",
    r"secret[=:\s]+\S+",
    r"bearer\s+\S+",
    r"/home/\S+",
    r"/var/\S+",
    r"/etc/\S+",
]


class GatewayError(Exception):
    """Base class for errors raised by the gateway itself."""


class CatalogError(GatewayError):
    """The agent catalog could not be loaded or violates an invariant."""


class ConfigurationError(GatewayError):
    """A declared endpoint cannot be resolved to an upstream URL."""

    def __init__(self, message: str, *, endpoint_path: Optional[str] = None) -> None:
        super().__init__(message)
        self.endpoint_path = endpoint_path


def _sanitize_error_message(message: str) -> str:
    """Remove potentially sensitive information from error messages.

    Secrets and filesystem paths are replaced with ``[REDACTED]`` and very
    long messages are truncated.
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, "[REDACTED]", sanitized, flags=re.IGNORECASE)

    if len(sanitized) > 500:
        sanitized = sanitized[:500] + "... [truncated]"

    return sanitized


def api_error(
    message: str,
    *,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    code: str = "bad_request",
    sanitize: bool = True,
) -> HTTPException:
    """HTTPException whose detail the app returns unwrapped as ``{"error": {...}}``."""
    user_message = _sanitize_error_message(message) if sanitize else message
    return HTTPException(
        status_code=status_code,
        detail={"error": {"message": user_message, "code": code}},
    )


def invalid_body_error(message: str, reason: Exception) -> HTTPException:
    """400 for a request body the gateway cannot turn into a forwardable payload."""
    logger.info("Rejected request body: %s (%s)", message, reason)
    return api_error(message, code="invalid_body")
