# File: tests/conftest.py
from collections import Counter
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable

import pytest
import pytest_asyncio
from aiohttp import web

from site_mirror.config import CrawlerConfig
from site_mirror.logger import logger

ServeT = Callable[[web.Application], Awaitable[str]]


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop handlers installed by CLI runs so later tests do not log into closed streams."""
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel("NOTSET")


@pytest.fixture()
def config(tmp_path: Path) -> CrawlerConfig:
    """
    Return a basic CrawlerConfig writing below tmp_path.
    """
    return CrawlerConfig(
        output_root=tmp_path / "output",
        out_dir="test",
        timeout=2.0,
        concurrency=4,
        user_agent="TestAgent/1.0",
    )


@pytest.fixture()
def hits() -> Counter:
    """Request counter keyed by path, shared with the test server handlers."""
    return Counter()


@pytest.fixture()
def counting(hits: Counter):
    """Middleware recording every request path in *hits*."""

    @web.middleware
    async def middleware(request: web.Request, handler):
        hits[request.path] += 1
        return await handler(request)

    return middleware


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory) -> AsyncIterator[ServeT]:
    """Start an aiohttp app on a free port, return its base URL, clean up afterwards."""
    runners: list[web.AppRunner] = []

    async def _serve(app: web.Application) -> str:
        runner = web.AppRunner(app)
        await runner.setup()
        runners.append(runner)
        port = unused_tcp_port_factory()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        return f"http://127.0.0.1:{port}"

    yield _serve
    for runner in runners:
        await runner.cleanup()


def html(body: str) -> web.Response:
    return web.Response(text=f"<html><body>{body}</body></html>", content_type="text/html")


def page(body: str):
    """Handler returning a static HTML page."""

    async def handler(_):
        return html(body)

    return handler
