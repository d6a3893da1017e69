from __future__ import annotations

from typing import Optional

HTML_MEDIA_TYPE = "text/html"
JSON_MEDIA_TYPE = "application/json"


def wants_documentation(accept: Optional[str]) -> bool:
    """Return True when the client asked for HTML and not for JSON.

    A header naming both resolves to JSON, as does a missing or empty one.
    """
    if not accept:
        return False
    return HTML_MEDIA_TYPE in accept and JSON_MEDIA_TYPE not in accept
