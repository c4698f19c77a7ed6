"""
Exceptions raised while normalizing URLs and fetching pages.
"""
from __future__ import annotations

from typing import Optional


class CrawlError(Exception):
    """Base class for all crawler errors."""


class MalformedURLError(CrawlError, ValueError):
    """URL is not syntactically valid."""

    def __init__(self, url: str, detail: str = "invalid URL") -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"{detail}: {url!r}")


class FetchError(CrawlError):
    """A page could not be retrieved as HTML."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(message)


class NetworkError(FetchError):
    """Transport-level failure (DNS, refused connection, timeout...)."""

    def __init__(self, url: str, cause: object) -> None:
        super().__init__(url, f"Got network error: {cause}")


class HTTPStatusError(FetchError):
    """Response received with a status code >= 400."""

    def __init__(self, url: str, status_code: int, reason: Optional[str] = None) -> None:
        self.status_code = status_code
        self.reason = reason or ""
        super().__init__(url, f"Got HTTP error: {status_code} {self.reason}".rstrip())


class UnsupportedContentTypeError(FetchError):
    """Response is not an HTML document."""

    def __init__(self, url: str, content_type: Optional[str]) -> None:
        self.content_type = content_type
        super().__init__(url, f"Got non-HTML response: {content_type}")
