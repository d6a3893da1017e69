"""Shared helpers: errors, HTTP client, logging."""
