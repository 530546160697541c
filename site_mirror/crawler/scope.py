"""
Crawl scope: which discovered URLs are eligible for fetching.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import SplitResult, urlsplit

__all__ = ("Scope", "ScopeViolationError", "is_allowed", "derive_base_path", "derive_domain")

UrlLike = Union[str, SplitResult]


class ScopeViolationError(ValueError):
    """The start URL lies outside the configured scope."""

    def __init__(self, url: str, scope: Scope) -> None:
        super().__init__(
            f"Start URL {url} does not satisfy base path {scope.base_path!r} / domain {scope.domain!r}"
        )
        self.url = url
        self.scope = scope


def _split(url: UrlLike) -> SplitResult:
    return url if isinstance(url, SplitResult) else urlsplit(url)


def url_path(url: UrlLike) -> str:
    """Path component of *url*, ``/`` when the URL has none."""
    return _split(url).path or "/"


def is_allowed(url: UrlLike, base_path: str, domain: str) -> bool:
    """Check *url* against the base path prefix and the hostname restriction."""
    parts = _split(url)
    if domain and parts.hostname != domain:
        return False
    if base_path and not url_path(parts).startswith(base_path):
        return False
    return True


def derive_base_path(url: UrlLike) -> str:
    """
    Directory part of the URL path with leading and trailing slashes.

    A last segment containing a dot is treated as a file name and dropped:
    ``/docs/guide/intro.html`` gives ``/docs/guide/``.
    """
    items = url_path(url).split("/")
    if "." in items[-1]:
        items = items[:-1]
    base_path = "/".join(items)
    if not base_path.startswith("/"):
        base_path = "/" + base_path
    if not base_path.endswith("/"):
        base_path += "/"
    return base_path


def derive_domain(url: UrlLike) -> str:
    return _split(url).hostname or ""


def normalize_domain(domain: str) -> str:
    """Hostname of a bare domain override such as ``Example.com:8080``."""
    if "://" not in domain:
        domain = f"http://{domain}"
    return derive_domain(domain)


@dataclass(frozen=True, slots=True)
class Scope:
    """Immutable (base_path, domain) pair; empty strings mean unrestricted."""

    base_path: str = ""
    domain: str = ""

    @classmethod
    def from_start_url(
        cls,
        start_url: str,
        base_path: Optional[str] = None,
        domain: Optional[str] = None,
    ) -> Scope:
        """Derive the scope of a crawl, honouring explicit overrides."""
        if base_path and base_path.startswith("/"):
            resolved_path = base_path
        else:
            resolved_path = derive_base_path(start_url)
        resolved_domain = normalize_domain(domain) if domain else derive_domain(start_url)
        return cls(base_path=resolved_path, domain=resolved_domain)

    def allows(self, url: UrlLike) -> bool:
        return is_allowed(url, self.base_path, self.domain)

    def ensure_allowed(self, url: str) -> None:
        """Raise :class:`ScopeViolationError` if *url* is outside the scope."""
        if not self.allows(url):
            raise ScopeViolationError(url, self)
