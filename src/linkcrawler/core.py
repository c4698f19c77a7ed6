"""
Core crawling logic and data structures.
"""
from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import SplitResult, urljoin, urlsplit

import requests
from bs4 import BeautifulSoup, SoupStrainer

from linkcrawler.errors import (
    FetchError,
    HTTPStatusError,
    MalformedURLError,
    NetworkError,
    UnsupportedContentTypeError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 15.0
DEFAULT_USER_AGENT = "LinkCrawler/1.0"

HTML_CONTENT_TYPES: frozenset[str] = frozenset(("text/html", "application/xhtml+xml"))

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)

# "scheme://..." or "//..." already carries an authority
_AUTHORITY_RE = re.compile(r"^(?:[a-z][a-z0-9+.\-]*:)?//", re.IGNORECASE)
# "mailto:", "javascript:" etc. but not "host:8080"
_OPAQUE_RE = re.compile(r"^[a-z][a-z0-9+.\-]*:(?!\d)", re.IGNORECASE)

Fetcher = Callable[[str], str]
VisitTable = Dict[str, int]


@dataclass(slots=True)
class CrawlStats:
    """Statistics collected during crawl for summary output."""
    pages_crawled: int = 0
    revisits: int = 0
    offsite_skipped: int = 0
    malformed_skipped: int = 0
    error_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def record_error(self, error: Exception) -> None:
        """Record a failure by kind."""
        if isinstance(error, HTTPStatusError):
            self.error_counts[str(error.status_code)] += 1
        elif isinstance(error, UnsupportedContentTypeError):
            self.error_counts["non_html"] += 1
        elif isinstance(error, MalformedURLError):
            self.error_counts["malformed_url"] += 1
        else:
            self.error_counts["connection_error"] += 1


def _split(url: str) -> SplitResult:
    if not isinstance(url, str) or not url.strip():
        raise MalformedURLError(str(url), "empty URL")

    candidate = url.strip()
    if not _AUTHORITY_RE.match(candidate):
        if _OPAQUE_RE.match(candidate):
            raise MalformedURLError(url, "URL has no host")
        # Bare "host/path" form, which is also the shape of a canonical key
        candidate = "//" + candidate

    try:
        parts = urlsplit(candidate)
        parts.port  # raises on a non-numeric or out-of-range port
    except ValueError as exc:
        raise MalformedURLError(url, str(exc)) from exc

    if not parts.hostname:
        raise MalformedURLError(url, "URL has no host")
    return parts


def normalize_url(url: str) -> str:
    """
    Canonicalize a URL into the key used to deduplicate pages.

    - Drops the scheme (http and https are the same page)
    - Drops the port
    - Removes one leading "www." host label
    - Removes one trailing "/" from the path
    - Keeps query strings and fragments
    - Lowercases everything

    A key re-normalizes to itself, except when the host starts with
    "www.www." or the path ends in "//": only one label or slash is removed
    per call, so a second pass removes another.

    Raises MalformedURLError if the URL cannot be parsed or has no host.
    """
    parts = _split(url)

    hostname = parts.hostname or ""
    if hostname.startswith("www."):
        hostname = hostname[4:]
    if ":" in hostname:
        # IPv6 literal, bracketed so the key parses back to the same host
        hostname = f"[{hostname}]"

    path = parts.path
    if path.endswith("/"):
        path = path[:-1]

    key = hostname + path
    if parts.query:
        key += "?" + parts.query
    if parts.fragment:
        key += "#" + parts.fragment
    return key.lower()


def host_of(url: str) -> str:
    """
    Return the raw host of an absolute URL, or "" if it has none.

    No "www." folding: this is the origin check, not the dedup key.
    """
    try:
        return urlsplit(url.strip()).hostname or ""
    except ValueError as exc:
        raise MalformedURLError(url, str(exc)) from exc


def is_same_host(url: str, seed_host: str) -> bool:
    """Check if URL has the same host as the seed (scheme-insensitive)."""
    return host_of(url) == seed_host


def extract_links(html: str, base_url: str) -> List[str]:
    """
    Extract absolute URLs from every <a href> in document order.

    Each href is resolved against base_url. Hrefs that do not resolve to a
    valid URL are logged and skipped.
    """
    soup = BeautifulSoup(html or "", "lxml", parse_only=LINK_STRAINER)

    links: List[str] = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        try:
            absolute = urljoin(base_url, href)
            urlsplit(absolute).port
        except ValueError as exc:
            logger.warning("Skipping unresolvable link %r: %s", href, exc)
            continue
        links.append(absolute)
    return links


def _is_html(content_type: Optional[str]) -> bool:
    if not content_type:
        return False
    mime = content_type.split(";", 1)[0].strip().lower()
    return mime in HTML_CONTENT_TYPES


def fetch_html(
    url: str,
    session: Optional[requests.Session] = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    user_agent: str = DEFAULT_USER_AGENT,
) -> str:
    """
    Fetch a page and return its HTML text.

    Raises:
        NetworkError: the request could not be completed.
        HTTPStatusError: the response status is 400 or above.
        UnsupportedContentTypeError: the response is not HTML. The body is
            not downloaded in that case.
    """
    if session is None:
        with requests.Session() as own_session:
            own_session.headers["User-Agent"] = user_agent
            return fetch_html(url, session=own_session, timeout_s=timeout_s)

    try:
        resp = session.get(url, timeout=timeout_s, allow_redirects=True, stream=True)
    except requests.RequestException as exc:
        raise NetworkError(url, exc) from exc

    try:
        if resp.status_code >= 400:
            raise HTTPStatusError(url, resp.status_code, resp.reason)

        content_type = resp.headers.get("content-type")
        if not _is_html(content_type):
            raise UnsupportedContentTypeError(url, content_type)

        try:
            return resp.text
        except requests.RequestException as exc:
            raise NetworkError(url, exc) from exc
    finally:
        resp.close()


def make_fetcher(
    timeout_s: float = DEFAULT_TIMEOUT_S,
    user_agent: str = DEFAULT_USER_AGENT,
    session: Optional[requests.Session] = None,
) -> Fetcher:
    """
    Build a fetch callable sharing one HTTP session across a crawl.

    user_agent is only applied to a session created here; a session passed
    in keeps its own headers. The caller owns closing a passed session.
    """
    if session is None:
        session = requests.Session()
        session.headers["User-Agent"] = user_agent

    def fetch(url: str) -> str:
        return fetch_html(url, session=session, timeout_s=timeout_s)

    return fetch


def crawl_with_stats(
    seed_url: str,
    fetch: Optional[Fetcher] = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    user_agent: str = DEFAULT_USER_AGENT,
    strict: bool = False,
) -> Tuple[VisitTable, CrawlStats]:
    """
    Crawl every page on the seed's host reachable through <a href> links.

    Traversal is depth-first in anchor order. Each page is fetched at most
    once; every further link to it only bumps its count. Relative links are
    always resolved against the seed URL.

    Args:
        seed_url: Absolute http(s) URL to start from.
        fetch: Callable returning HTML for a URL or raising FetchError.
               Defaults to fetch_html over a shared requests session,
               closed when the crawl ends.
        timeout_s: HTTP request timeout in seconds (default fetcher only).
        user_agent: User-Agent header (default fetcher only).
        strict: Propagate MalformedURLError for discovered URLs instead of
                skipping that branch.

    Returns:
        Tuple of (visit table, crawl statistics).

    Raises:
        MalformedURLError: the seed URL is invalid, or strict is set and a
            discovered URL is invalid.
    """
    seed_parts = _split(seed_url)
    if seed_parts.scheme.lower() not in ("http", "https"):
        raise MalformedURLError(seed_url, "seed URL must be absolute http(s)")
    seed_url = seed_url.strip()
    seed_host = host_of(seed_url)

    if fetch is not None:
        return _traverse(seed_url, seed_host, fetch, strict)

    with requests.Session() as session:
        session.headers["User-Agent"] = user_agent
        fetch = make_fetcher(timeout_s=timeout_s, session=session)
        return _traverse(seed_url, seed_host, fetch, strict)


def _traverse(seed_url: str, seed_host: str, fetch: Fetcher, strict: bool) -> Tuple[VisitTable, CrawlStats]:
    pages: VisitTable = {}
    stats = CrawlStats()
    stack: List[str] = [seed_url]

    while stack:
        current_url = stack.pop()

        try:
            if not is_same_host(current_url, seed_host):
                logger.debug("Skipping offsite %s", current_url)
                stats.offsite_skipped += 1
                continue
            key = normalize_url(current_url)
        except MalformedURLError as exc:
            if strict:
                raise
            logger.warning("Skipping malformed URL: %s", exc)
            stats.malformed_skipped += 1
            stats.record_error(exc)
            continue

        if key in pages:
            pages[key] += 1
            stats.revisits += 1
            logger.debug("Already visited %s (%d)", key, pages[key])
            continue

        # Mark before fetching so cycles back to this page only count
        pages[key] = 1

        logger.info("crawling %s", current_url)
        stats.pages_crawled += 1
        try:
            html = fetch(current_url)
        except FetchError as exc:
            logger.warning("%s (%s)", exc, current_url)
            stats.record_error(exc)
            continue

        links = extract_links(html, seed_url)
        # Reverse so the first anchor is popped first
        stack.extend(reversed(links))

    return pages, stats


def crawl(
    seed_url: str,
    fetch: Optional[Fetcher] = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    user_agent: str = DEFAULT_USER_AGENT,
    strict: bool = False,
) -> VisitTable:
    """Crawl from seed_url and return the visit table (canonical key -> count)."""
    pages, _ = crawl_with_stats(
        seed_url,
        fetch=fetch,
        timeout_s=timeout_s,
        user_agent=user_agent,
        strict=strict,
    )
    return pages
