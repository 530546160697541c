"""
Data models for the SiteMirror crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

HTML_TYPES = ("text/html", "application/xhtml+xml")


@dataclass(slots=True)
class PageData:
    """Raw response of a fetched URL."""

    url: str
    content: bytes
    content_type: str = ""
    encoding: Optional[str] = None

    @property
    def is_html(self) -> bool:
        """True for HTML responses and for responses without a content type."""
        return not self.content_type or self.content_type in HTML_TYPES


@dataclass(slots=True)
class CrawlReport:
    """What a run produced: written files, resumed URLs, failures and flat copies."""

    saved: Dict[str, Path] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    flattened: List[Path] = field(default_factory=list)
    duration: float = 0.0

    @property
    def pages(self) -> int:
        return len(self.saved)
