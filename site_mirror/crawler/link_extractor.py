"""
Link extraction for SiteMirror: in-scope absolute links from a fetched page.
"""
from __future__ import annotations

from typing import AbstractSet, List, Optional, Union
from urllib.parse import urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup
from bs4.element import Tag
from yarl import URL

from site_mirror.crawler.scope import is_allowed

DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(url: str) -> str:
    """
    Canonical form of an absolute URL, as a browser would serialize it.

    Dot segments are removed, scheme and host lowercased, the default port
    and the fragment dropped and an empty path becomes ``/``. Raises
    ValueError for URLs that cannot be parsed.
    """
    parts = urlsplit(url)
    if not parts.path:
        url = urlunsplit(parts._replace(path="/"))
    parsed = URL(url).with_fragment(None)
    if not parsed.is_absolute():
        raise ValueError(f"not an absolute URL: {url}")
    if parsed.port is not None and parsed.port == DEFAULT_PORTS.get(parsed.scheme):
        parsed = parsed.with_port(None)
    return str(parsed)


def resolve_link(base_url: str, href: str) -> Optional[str]:
    """Normalized absolute http(s) URL for *href*, or None if it cannot be resolved."""
    raw = href.strip()
    if not raw:
        return None
    try:
        joined = urljoin(base_url, raw)
        if urlsplit(joined).scheme not in ("http", "https"):
            return None
        return normalize_url(joined)
    except ValueError:
        return None


def extract_links(
    base_url: str,
    html: Union[str, bytes],
    ignore_set: AbstractSet[str],
    base_path: str,
    domain: str,
    encoding: Optional[str] = None,
) -> List[str]:
    """
    Collect the links of *html* that are worth fetching.

    Every ``<a href>`` is resolved against *base_url*; non-http(s) links,
    links whose lowercased path ends with an ignored extension and links
    outside the (base_path, domain) scope are dropped. The result has no
    duplicates. *encoding* is a charset hint for byte input.
    """
    if isinstance(html, bytes):
        soup = BeautifulSoup(html, "html.parser", from_encoding=encoding)
    else:
        soup = BeautifulSoup(html, "html.parser")
    links: List[str] = []
    seen: set[str] = set()
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        absolute = resolve_link(base_url, href_val)
        if absolute is None or absolute in seen:
            continue
        parts = urlsplit(absolute)
        pathname = parts.path.lower()
        if any(pathname.endswith(ext) for ext in ignore_set):
            continue
        if not is_allowed(parts, base_path, domain):
            continue
        seen.add(absolute)
        links.append(absolute)
    return links
