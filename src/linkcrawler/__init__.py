"""
Web crawler that follows same-host links depth-first from a seed URL and
counts how many times each internal page is linked.
"""
from linkcrawler.core import CrawlStats, crawl, crawl_with_stats, extract_links, fetch_html, normalize_url
from linkcrawler.errors import (
    CrawlError,
    FetchError,
    HTTPStatusError,
    MalformedURLError,
    NetworkError,
    UnsupportedContentTypeError,
)
from linkcrawler.report import print_report, sort_pages

__version__ = "1.0.0"
__all__ = [
    "crawl",
    "crawl_with_stats",
    "normalize_url",
    "extract_links",
    "fetch_html",
    "sort_pages",
    "print_report",
    "CrawlStats",
    "CrawlError",
    "MalformedURLError",
    "FetchError",
    "NetworkError",
    "HTTPStatusError",
    "UnsupportedContentTypeError",
]
