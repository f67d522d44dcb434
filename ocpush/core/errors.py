"""Exception hierarchy for the push exporter.

Registration and construction errors are raised to the caller. Push
errors are raised by single-view pushes and logged by the push cycle.
"""

from __future__ import annotations

from typing import Optional


class OcPushError(Exception):
    """Base class for all exporter errors."""


class InvalidViewError(OcPushError, ValueError):
    """A view or aggregation definition is malformed."""


class InvalidTagError(OcPushError, ValueError):
    """A tag key or value is not allowed."""


class DuplicateViewError(OcPushError):
    """A view with the same name is already registered."""

    def __init__(self, view_name: str):
        self.view_name = view_name
        super().__init__(f"View {view_name!r} is already registered")


class UnknownViewError(OcPushError, KeyError):
    """No view with the given name is registered."""

    def __init__(self, view_name: str):
        self.view_name = view_name
        super().__init__(view_name)

    def __str__(self) -> str:
        return f"View {self.view_name!r} is not registered"


class SerializationError(OcPushError):
    """Rows of a view could not be rendered."""


class PushError(OcPushError):
    """Pushing a view to the collector failed."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(message)


class TransportError(PushError):
    """The request could not be built or sent."""


class NonSuccessStatusError(PushError):
    """The collector answered with a non-2xx status."""

    def __init__(self, status_code: int, url: str, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Collector returned HTTP {status_code} for {url}", url=url)


__all__ = [
    "OcPushError",
    "InvalidViewError",
    "InvalidTagError",
    "DuplicateViewError",
    "UnknownViewError",
    "SerializationError",
    "PushError",
    "TransportError",
    "NonSuccessStatusError",
]
