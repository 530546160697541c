"""
Mapping of crawled URLs onto the local output tree.
"""
from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Union
from urllib.parse import SplitResult, urlsplit


def url_to_file_path(root_dir: Union[str, Path], url: Union[str, SplitResult]) -> Path:
    """
    Local file path mirroring *url* under ``root_dir/<hostname>/``.

    ``/`` and other directory URLs become ``index.html``; paths without an
    extension get ``.html``. Query strings and fragments are not part of the
    mapping, so such URLs share one file. Paths with ``.`` or ``..``
    segments are rejected with ValueError so that nothing lands outside
    *root_dir*.
    """
    parts = url if isinstance(url, SplitResult) else urlsplit(url)
    pathname = parts.path or "/"
    if any(segment in (".", "..") for segment in pathname.split("/")):
        raise ValueError(f"refusing dot segments in {pathname!r}")
    if pathname.endswith("/"):
        pathname += "index"
    if not posixpath.splitext(pathname)[1]:
        pathname += ".html"
    pathname = pathname.lstrip("/")
    return Path(root_dir) / (parts.hostname or "") / pathname


def origin_dir(output_root: Union[str, Path], out_dir: str) -> Path:
    """Absolute directory receiving the raw crawl output of run *out_dir*."""
    return (Path(output_root) / out_dir / "origin").resolve()


def flatten_dir(output_root: Union[str, Path], out_dir: str) -> Path:
    """Absolute directory receiving the flattened copy of run *out_dir*."""
    return (Path(output_root) / out_dir / "flatten").resolve()
