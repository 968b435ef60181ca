"""Exceptions raised by adapters and their HTTP collaborator."""

from typing import Optional


class AdapterError(Exception):
    """Base class for adapter failures."""


class ArrConnectionError(AdapterError):
    """The backend could not be reached (DNS, refused, TLS, timeout)."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Cannot reach {url}: {message}")


class ArrAPIError(AdapterError):
    """The backend answered with a non-success HTTP status."""

    def __init__(self, method: str, path: str, status: int, body: Optional[str] = None):
        self.method = method
        self.path = path
        self.status = status
        self.body = body or ""
        detail = f": {self.body[:200]}" if self.body else ""
        super().__init__(f"{method} {path} returned {status}{detail}")


class UnsupportedResourceError(AdapterError):
    """An adapter was asked to apply a resource type it does not handle."""
