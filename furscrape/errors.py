"""Exceptions raised at the transport boundary."""

from __future__ import annotations

from typing import Optional

# Response bodies are kept for diagnostics, trimmed to this many characters.
MAX_BODY_SNIPPET = 500


def _snippet(body: Optional[str]) -> str:
    if not body:
        return ""
    if len(body) > MAX_BODY_SNIPPET:
        return body[:MAX_BODY_SNIPPET] + "...[truncated]"
    return body


class FurscrapeError(Exception):
    """Base class for all errors raised by this package."""


class NotLoggedInError(FurscrapeError):
    """The request worked but the session cookies are anonymous."""

    def __init__(self) -> None:
        super().__init__("not logged in")


class TransportError(FurscrapeError):
    """A request could not be completed."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url


class HTTPStatusError(TransportError):
    """The site answered with something other than 200 OK."""

    def __init__(self, url: str, status_code: int, body: Optional[str] = None) -> None:
        super().__init__(url, f"HTTP response {status_code} not expected")
        self.status_code = status_code
        self.body = _snippet(body)


class ContentTypeError(TransportError):
    """A page fetch returned something other than HTML."""

    def __init__(self, url: str, content_type: str, body: Optional[str] = None) -> None:
        super().__init__(url, f"response content-type {content_type!r} not expected")
        self.content_type = content_type
        self.body = _snippet(body)
