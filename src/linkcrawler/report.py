"""
Ranked report of internal link counts.
"""
from __future__ import annotations

import json
import sys
from typing import Dict, List, Mapping, Optional, TextIO, Tuple

SEPARATOR = "=========="


def sort_pages(pages: Mapping[str, int]) -> List[Tuple[str, int]]:
    """Sort (url, count) pairs by count descending, then url ascending."""
    return sorted(pages.items(), key=lambda item: (-item[1], item[0]))


def format_report(pages: Mapping[str, int]) -> str:
    """Render the report as text, one line per page."""
    lines = [SEPARATOR, "REPORT", SEPARATOR]
    for url, count in sort_pages(pages):
        lines.append(f"Found {count} internal links to {url}")
    lines.append(SEPARATOR)
    return "\n".join(lines) + "\n"


def print_report(pages: Mapping[str, int], stream: Optional[TextIO] = None) -> None:
    """Write the text report to stream (stdout by default)."""
    (stream or sys.stdout).write(format_report(pages))


def report_json(pages: Mapping[str, int], pretty: bool = False) -> str:
    """Render the sorted report as a JSON array of {url, count} objects."""
    payload: List[Dict[str, object]] = [
        {"url": url, "count": count} for url, count in sort_pages(pages)
    ]
    return json.dumps(payload, ensure_ascii=False, indent=2 if pretty else None)
