"""
SecScan Report Formats

Maps each supported output format to its file extension and renderer.
"""

from __future__ import annotations

from typing import Callable

from secscan.core.vulnerability import ScanReport
from secscan.reporting.html import to_html
from secscan.reporting.json_reporter import to_json
from secscan.reporting.markdown import to_markdown

REPORT_FORMATS: dict[str, tuple[str, Callable[[ScanReport], str]]] = {
    "markdown": ("md", to_markdown),
    "json": ("json", to_json),
    "html": ("html", to_html),
}


def get_renderer(fmt: str) -> tuple[str, Callable[[ScanReport], str]]:
    """Return (extension, renderer), raising ValueError for unknown formats."""
    try:
        return REPORT_FORMATS[fmt]
    except KeyError:
        raise ValueError(
            f"Unsupported report format {fmt!r}; expected one of {', '.join(REPORT_FORMATS)}"
        ) from None
