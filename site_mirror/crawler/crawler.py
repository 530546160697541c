from __future__ import annotations

import asyncio
import contextlib
import os
import tempfile
import time
from pathlib import Path
from typing import AbstractSet, Optional, Union

from aiohttp import ClientSession

from site_mirror.config import CrawlerConfig
from site_mirror.crawler.fetcher import Fetcher, create_session
from site_mirror.crawler.link_extractor import extract_links, normalize_url
from site_mirror.crawler.models import CrawlReport, PageData
from site_mirror.crawler.paths import origin_dir, url_to_file_path
from site_mirror.crawler.scope import Scope
from site_mirror.crawler.visited import VisitedSet
from site_mirror.logger import get_logger

__all__ = ("MirrorCrawler", "write_page")

log = get_logger("crawler")


def write_page(path: Path, content: bytes) -> None:
    """
    Write *content* verbatim, creating parent directories.

    The bytes go to a temporary sibling first and are moved into place with
    ``os.replace``, so *path* either holds the whole body or does not exist.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".part")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise


class MirrorCrawler:
    """
    Asynchronous same-site mirror.

    A frontier queue is drained by ``config.concurrency`` workers. Every URL
    is claimed in the visited set when it is scheduled, so concurrent
    discoveries of the same link lead to a single fetch.
    """

    def __init__(
        self,
        config: CrawlerConfig,
        scope: Optional[Scope] = None,
        root_dir: Union[str, Path, None] = None,
        ignore_set: Optional[AbstractSet[str]] = None,
        visited: Optional[VisitedSet] = None,
    ) -> None:
        self.config = config
        if scope is None:
            scope = (
                Scope.from_start_url(str(config.start_url), config.base_path, config.domain)
                if config.start_url is not None
                else Scope()
            )
        self.scope = scope
        self.root_dir = Path(root_dir) if root_dir is not None else origin_dir(config.output_root, config.out_dir)
        self.ignore_set = config.ignore_set if ignore_set is None else frozenset(ignore_set)
        self.visited = visited if visited is not None else VisitedSet()
        self.session: Optional[ClientSession] = None
        self.fetcher: Optional[Fetcher] = None

    async def __aenter__(self) -> MirrorCrawler:
        self.session = create_session(self.config)
        self.fetcher = Fetcher(self.session, self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def crawl(self) -> CrawlReport:
        if self.config.start_url is None:
            raise ValueError("start_url is not configured")
        return await self.fetch_and_save(str(self.config.start_url))

    async def fetch_and_save(self, url: str) -> CrawlReport:
        """Mirror *url* and everything reachable from it inside the scope."""
        if not self.fetcher:
            raise RuntimeError("Session not initialized")
        url = normalize_url(url)
        log.info("Crawl started: %s -> %s", url, self.root_dir)
        start = time.monotonic()
        report = CrawlReport()
        queue: asyncio.Queue[str] = asyncio.Queue()
        self._schedule(queue, url)
        workers = [asyncio.create_task(self._worker(queue, report)) for _ in range(self.config.concurrency)]
        try:
            await queue.join()
        finally:
            for w in workers:
                w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
        report.duration = time.monotonic() - start
        log.info(
            "Finished: %d saved, %d skipped, %d failed in %.2f s",
            len(report.saved), len(report.skipped), len(report.failed), report.duration,
        )
        return report

    def _schedule(self, queue: asyncio.Queue[str], url: str) -> bool:
        if not self.visited.claim(url):
            return False
        queue.put_nowait(url)
        return True

    async def _worker(self, queue: asyncio.Queue[str], report: CrawlReport) -> None:
        while True:
            url = await queue.get()
            try:
                await self._process(url, queue, report)
            except Exception as exc:
                log.exception("Unexpected error on %s", url)
                report.failed[url] = str(exc) or type(exc).__name__
            finally:
                queue.task_done()

    async def _process(self, url: str, queue: asyncio.Queue[str], report: CrawlReport) -> None:
        if self.fetcher is None:
            raise RuntimeError("Session not initialized")
        try:
            path = url_to_file_path(self.root_dir, url)
        except ValueError as exc:
            log.warning("Skipping %s: %s", url, exc)
            report.failed[url] = str(exc)
            return
        if path.exists():
            log.debug("Already on disk, skipping %s (%s)", url, path)
            report.skipped.append(url)
            return

        page = await self.fetcher.fetch(url)
        if page is None:
            report.failed[url] = "fetch failed"
            return

        try:
            await asyncio.to_thread(write_page, path, page.content)
        except OSError as exc:
            log.warning("Cannot write %s to %s: %s", url, path, exc)
            report.failed[url] = str(exc)
            return
        report.saved[url] = path
        log.info("%s -> %s", url, path)

        for link in self._links(page):
            self._schedule(queue, link)

    def _links(self, page: PageData) -> list[str]:
        if not page.is_html:
            return []
        return extract_links(
            page.url, page.content, self.ignore_set, self.scope.base_path, self.scope.domain, page.encoding
        )
