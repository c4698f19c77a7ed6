"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from linkcrawler.core import DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT, CrawlStats, crawl_with_stats
from linkcrawler.errors import MalformedURLError
from linkcrawler.report import format_report, report_json


def print_summary(stats: CrawlStats, unique_pages: int) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Unique pages found:     {unique_pages}\n")
    sys.stderr.write(f"Pages fetched:          {stats.pages_crawled}\n")
    sys.stderr.write(f"Repeat links:           {stats.revisits}\n")
    sys.stderr.write(f"Offsite links skipped:  {stats.offsite_skipped}\n")
    if stats.malformed_skipped:
        sys.stderr.write(f"Malformed URLs skipped: {stats.malformed_skipped}\n")
    sys.stderr.write("\n")

    if stats.error_counts:
        sys.stderr.write("Errors by type:\n")
        for error_type, count in sorted(stats.error_counts.items()):
            if error_type == "connection_error":
                label = "Connection errors"
            elif error_type == "non_html":
                label = "Non-HTML responses"
            elif error_type == "malformed_url":
                label = "Malformed URLs"
            else:
                label = f"HTTP {error_type}"
            sys.stderr.write(f"  {label}: {count}\n")
    else:
        sys.stderr.write("No errors encountered.\n")

    sys.stderr.write("\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkcrawler",
        description="Crawl a website from a seed URL and report how often each internal page is linked.",
    )
    parser.add_argument("seed_url", help="Seed URL (e.g. https://example.com)")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_S,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT_S:g})",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Abort the crawl on a malformed discovered URL instead of skipping it",
    )
    parser.add_argument("--format", choices=["text", "json"], default="text", help="Report format (default: text)")
    parser.add_argument("--out", help="Output file path, or '-' for stdout (default: stdout)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--verbose", action="store_true", help="Show progress and summary")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        pages, stats = crawl_with_stats(
            args.seed_url,
            timeout_s=args.timeout,
            user_agent=args.user_agent,
            strict=args.strict,
        )
    except MalformedURLError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1

    if args.verbose:
        print_summary(stats, len(pages))

    if args.format == "json":
        text = report_json(pages, pretty=args.pretty) + "\n"
    else:
        text = format_report(pages)

    if args.out and args.out != "-":
        output_path = Path(args.out)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
        if args.verbose:
            sys.stderr.write(f"Report written to: {output_path}\n")
    else:
        sys.stdout.write(text)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
