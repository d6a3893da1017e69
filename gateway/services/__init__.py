"""Service layer exports."""

from . import catalog, dispatcher, negotiation, pages, proxy, routing

__all__ = ["catalog", "dispatcher", "negotiation", "pages", "proxy", "routing"]
