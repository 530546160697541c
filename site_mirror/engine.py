"""site_mirror.engine: orchestration of a full mirroring run (scope check, crawl, flatten)."""

from __future__ import annotations

import asyncio

from site_mirror.config import CrawlerConfig
from site_mirror.crawler.crawler import MirrorCrawler
from site_mirror.crawler.models import CrawlReport
from site_mirror.crawler.paths import flatten_dir, origin_dir
from site_mirror.crawler.scope import Scope
from site_mirror.flatten import flatten_tree
from site_mirror.logger import logger

__all__ = ["build_scope", "run_mirror", "origin_dir", "flatten_dir"]


def build_scope(config: CrawlerConfig) -> Scope:
    """Scope of the run; raises ScopeViolationError if the start URL is outside it."""
    if config.start_url is None:
        raise ValueError("start_url is not configured")
    start_url = str(config.start_url)
    scope = Scope.from_start_url(start_url, config.base_path, config.domain)
    scope.ensure_allowed(start_url)
    return scope


async def run_mirror(config: CrawlerConfig) -> CrawlReport:
    """Crawl ``config.start_url`` into the origin tree, then flatten it."""
    scope = build_scope(config)
    origin = origin_dir(config.output_root, config.out_dir)
    logger.info("Mirroring %s (base path %r, domain %r)", config.start_url, scope.base_path, scope.domain)

    async with MirrorCrawler(config, scope=scope, root_dir=origin) as crawler:
        report = await crawler.crawl()

    if config.flatten:
        target = flatten_dir(config.output_root, config.out_dir)
        logger.info("Flattening %s -> %s", origin, target)
        report.flattened = await asyncio.to_thread(flatten_tree, origin, target)
    return report
