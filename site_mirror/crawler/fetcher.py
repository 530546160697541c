"""
Fetcher module: HTTP GET requests behind a global concurrency permit pool.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_mirror.config import CrawlerConfig
from site_mirror.crawler.models import PageData
from site_mirror.logger import get_logger

log = get_logger("fetcher")


def create_session(config: CrawlerConfig) -> ClientSession:
    """Client session carrying the crawl-wide timeout and User-Agent."""
    return ClientSession(
        timeout=ClientTimeout(total=config.timeout),
        headers={"User-Agent": config.user_agent},
        raise_for_status=False,
    )


class FetchError(Exception):
    """A response that cannot be used (non-2xx status)."""


class Fetcher:
    """Bounded HTTP fetching: one permit per in-flight request, no retries."""

    def __init__(self, session: ClientSession, config: CrawlerConfig) -> None:
        self.session = session
        self.config = config
        self._permits = asyncio.Semaphore(config.concurrency)

    async def fetch(self, url: str) -> Optional[PageData]:
        """
        GET *url* and return its body as bytes.

        Returns None on network errors, timeouts, too many redirects and
        non-2xx statuses; the reason is logged as a warning.
        """
        try:
            async with self._permits:
                return await self._get(url)
        except (ClientError, asyncio.TimeoutError, FetchError) as exc:
            log.warning("Failed %s: %s", url, str(exc) or type(exc).__name__)
            return None

    async def _get(self, url: str) -> PageData:
        max_redirects = self.config.max_redirects
        async with self.session.get(
            url,
            allow_redirects=max_redirects > 0,
            max_redirects=max_redirects,
        ) as resp:
            if not 200 <= resp.status < 300:
                raise FetchError(f"HTTP {resp.status}")
            mime = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
            body = await resp.read()
            return PageData(str(resp.url), body, mime, resp.charset)
