# File: tests/test_cli.py
"""CLI tests (`site_mirror.cli`) using click.testing.CliRunner.
Cover `crawl`, `flatten`, `config`, `--version` and the error exits.
"""
import asyncio
import importlib
import json

import pytest
from click.testing import CliRunner

from site_mirror.cli import cli
from site_mirror.config import IgnoreCategory
from site_mirror.crawler.models import CrawlReport

cli_module = importlib.import_module("site_mirror.cli")


@pytest.fixture()
def calls(monkeypatch):
    """Patch run_mirror so that no network I/O happens; record received configs."""
    received = []

    async def fake_run(cfg):
        received.append(cfg)
        return CrawlReport(saved={str(cfg.start_url): cfg.output_root / "x.html"})

    monkeypatch.setattr(cli_module, "run_mirror", fake_run)
    return received


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "SiteMirror" in result.output


def test_crawl_passes_options(calls, tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, [
        "crawl", "https://example.com/docs/guide.html",
        "-o", "guide",
        "--output-root", str(tmp_path),
        "--ignore-js", "--ignore-image",
        "--concurrency", "3",
        "--no-flatten",
    ])
    assert result.exit_code == 0, result.output
    assert "Saved 1 pages" in result.output
    cfg = calls[0]
    assert str(cfg.start_url) == "https://example.com/docs/guide.html"
    assert cfg.out_dir == "guide"
    assert cfg.output_root == tmp_path
    assert cfg.ignore == [IgnoreCategory.JS, IgnoreCategory.IMAGE]
    assert cfg.concurrency == 3
    assert cfg.flatten is False


def test_crawl_scope_violation_exits_before_crawling(calls):
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", "https://example.com/blog/", "--base-path", "/docs/"])
    assert result.exit_code == 1
    assert "does not satisfy" in result.output
    assert calls == []


def test_crawl_domain_violation(calls):
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", "https://example.com/", "--domain", "other.com"])
    assert result.exit_code == 1
    assert calls == []


def test_crawl_requires_start_url(calls):
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl"])
    assert result.exit_code == 1
    assert "No start URL" in result.output


def test_crawl_rejects_invalid_url(calls):
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", "not-a-url"])
    assert result.exit_code == 1
    assert "Invalid settings" in result.output
    assert calls == []


def test_crawl_uses_config_file(calls, tmp_path):
    cfg_file = tmp_path / "mirror.yaml"
    cfg_file.write_text(
        "start_url: https://example.com/\nignore: [css]\nout_dir: from-file\n",
        encoding="utf-8",
    )
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "crawl", "--ignore-css", "--ignore-audio"])
    assert result.exit_code == 0, result.output
    cfg = calls[0]
    assert cfg.out_dir == "from-file"
    assert cfg.ignore == [IgnoreCategory.CSS, IgnoreCategory.AUDIO]


def test_crawl_timeout(monkeypatch):
    async def slow(cfg):
        await asyncio.sleep(2)
        return CrawlReport()

    monkeypatch.setattr(cli_module, "run_mirror", slow)
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", "https://example.com/", "--crawl-timeout", "0.1"])
    assert result.exit_code == 1
    assert "did not finish" in result.output


def test_bad_config_file(tmp_path):
    cfg_file = tmp_path / "bad.yaml"
    cfg_file.write_text("- a\n- b\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 1
    assert "Cannot load configuration" in result.output


def test_show_config(tmp_path):
    cfg_file = tmp_path / "mirror.json"
    cfg_file.write_text(json.dumps({"start_url": "https://example.com/", "concurrency": 2}), encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["start_url"] == "https://example.com/"
    assert data["concurrency"] == 2


def test_flatten_command(tmp_path):
    src = tmp_path / "origin" / "example.com"
    src.mkdir(parents=True)
    (src / "index.html").write_text("x", encoding="utf-8")
    dest = tmp_path / "flat"
    runner = CliRunner()
    result = runner.invoke(cli, ["flatten", str(tmp_path / "origin"), str(dest)])
    assert result.exit_code == 0, result.output
    assert (dest / "example.com_index.html").read_text(encoding="utf-8") == "x"
