#!/usr/bin/env python3
"""
Command line entry point for SiteMirror.

Commands:
  crawl START_URL   Mirror a site into <output-root>/<out-dir>/origin and flatten it
  flatten SRC DEST  Flatten an existing crawl tree
  config            Show the effective configuration

Common options:
  --config PATH       YAML/JSON config file (defaults to configs/default.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout only when omitted)
  --log-format FORMAT Logging format string

Example:
  site-mirror crawl https://docs.example.com/guide/ -o guide --ignore-image --ignore-js
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_mirror import __version__
from site_mirror.config import IgnoreCategory, load_config
from site_mirror.crawler.scope import ScopeViolationError
from site_mirror.engine import build_scope, run_mirror
from site_mirror.flatten import flatten_tree
from site_mirror.logger import DEFAULT_FORMAT, init_logging

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteMirror, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='YAML or JSON configuration file.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (stdout when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """SiteMirror: recursive same-site web crawler."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Cannot load configuration: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('start_url', required=False)
@click.option('--out-dir', '-o', 'out_dir', default=None, help='Run directory name [output]')
@click.option(
    '--output-root', 'output_root',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory holding all runs [output]'
)
@click.option('--base-path', 'base_path', default=None, help='Only crawl URLs under this path (e.g. /docs/)')
@click.option('--domain', 'domain', default=None, help='Only crawl URLs on this domain (e.g. example.com)')
@click.option('--ignore-js', is_flag=True, help='Ignore JavaScript files')
@click.option('--ignore-css', is_flag=True, help='Ignore CSS files')
@click.option('--ignore-image', is_flag=True, help='Ignore image files')
@click.option('--ignore-video', is_flag=True, help='Ignore video files')
@click.option('--ignore-audio', is_flag=True, help='Ignore audio files')
@click.option('--ignore-xml', is_flag=True, help='Ignore XML files')
@click.option('--concurrency', type=click.IntRange(min=1), default=None, help='Simultaneous requests [8]')
@click.option('--timeout', type=float, default=None, help='Timeout per request in seconds [10]')
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Abort the whole crawl after this many seconds'
)
@click.option('--no-flatten', 'no_flatten', is_flag=True, help='Skip the flattened copy')
@click.pass_context
def crawl(ctx, start_url, out_dir, output_root, base_path, domain,
          ignore_js, ignore_css, ignore_image, ignore_video, ignore_audio, ignore_xml,
          concurrency, timeout, crawl_timeout, no_flatten):
    """Mirror START_URL and every in-scope page reachable from it."""
    flags = {
        IgnoreCategory.JS: ignore_js,
        IgnoreCategory.CSS: ignore_css,
        IgnoreCategory.IMAGE: ignore_image,
        IgnoreCategory.VIDEO: ignore_video,
        IgnoreCategory.AUDIO: ignore_audio,
        IgnoreCategory.XML: ignore_xml,
    }
    base_cfg = ctx.obj['config']
    ignore = list(dict.fromkeys([*base_cfg.ignore, *(c for c, on in flags.items() if on)]))
    try:
        cfg = base_cfg.with_overrides(
            start_url=start_url,
            out_dir=out_dir,
            output_root=output_root,
            base_path=base_path,
            domain=domain,
            ignore=ignore,
            concurrency=concurrency,
            timeout=timeout,
            flatten=False if no_flatten else None,
        )
    except ValidationError as e:
        print_error(f'Invalid settings: {e}')
    if cfg.start_url is None:
        print_error('No start URL given (argument or start_url in the config file).')

    try:
        build_scope(cfg)
    except ScopeViolationError as e:
        print_error(f'{e}; nothing was crawled.')

    try:
        if crawl_timeout:
            report = asyncio.run(asyncio.wait_for(run_mirror(cfg), timeout=crawl_timeout))
        else:
            report = asyncio.run(run_mirror(cfg))
    except asyncio.TimeoutError:
        print_error(f'Crawl did not finish within {crawl_timeout} seconds')

    click.echo(
        f'Saved {len(report.saved)} pages, skipped {len(report.skipped)}, '
        f'failed {len(report.failed)}, flattened {len(report.flattened)} files.'
    )


@cli.command('flatten', context_settings=CONTEXT_SETTINGS)
@click.argument('src', type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument('dest', type=click.Path(file_okay=False, path_type=Path))
def flatten(src, dest):
    """Copy the files of SRC into DEST with path-encoded names."""
    try:
        copied = flatten_tree(src, dest)
    except OSError as e:
        print_error(f'Flattening failed: {e}')
    click.echo(f'Copied {len(copied)} files into {dest}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(json.dumps(cfg.model_dump(mode='json'), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
