from __future__ import annotations

from typing import Optional


class ApiError(Exception):
    """Base class for failures talking to the MediaBrowser API."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class TransportError(ApiError):
    """The request could not complete (connection, timeout or non-2xx status)."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None) -> None:
        super().__init__(message, url)
        self.status_code = status_code


class DecodeError(ApiError):
    """The server answered but the body was not valid gzip-compressed JSON."""
