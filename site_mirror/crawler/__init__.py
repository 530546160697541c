"""site_mirror.crawler: scope filter, path mapper, link extraction and the crawl engine."""

from .crawler import MirrorCrawler
from .link_extractor import extract_links
from .models import CrawlReport, PageData
from .paths import url_to_file_path
from .scope import Scope, ScopeViolationError, derive_base_path, derive_domain, is_allowed
from .visited import VisitedSet

__all__ = [
    "MirrorCrawler",
    "CrawlReport",
    "PageData",
    "Scope",
    "ScopeViolationError",
    "VisitedSet",
    "derive_base_path",
    "derive_domain",
    "extract_links",
    "is_allowed",
    "url_to_file_path",
]
