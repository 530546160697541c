"""
Flattening of a crawl output tree into a single directory.
"""
from __future__ import annotations

import re
import shutil
from pathlib import Path
from typing import List, Union

from site_mirror.logger import get_logger

log = get_logger("flatten")

_SEPARATORS = re.compile(r"[/\\]")


def flat_name(relative: Union[str, Path]) -> str:
    """``example.com/docs/index.html`` -> ``example.com_docs_index.html``."""
    return _SEPARATORS.sub("_", Path(relative).as_posix())


def flatten_tree(src_dir: Union[str, Path], dest_dir: Union[str, Path]) -> List[Path]:
    """
    Copy every file below *src_dir* into *dest_dir* under a path-encoded name.

    Contents are copied unchanged; names collide only if two relative paths
    differ just in ``_`` versus ``/``, in which case the later copy wins.
    """
    src = Path(src_dir)
    dest = Path(dest_dir)
    if not src.is_dir():
        log.warning("Nothing to flatten, %s does not exist", src)
        return []
    dest.mkdir(parents=True, exist_ok=True)

    copied: List[Path] = []
    for file in sorted(p for p in src.rglob("*") if p.is_file()):
        target = dest / flat_name(file.relative_to(src))
        shutil.copyfile(file, target)
        log.debug("Copied: %s -> %s", file, target)
        copied.append(target)
    log.info("Flattened %d files into %s", len(copied), dest)
    return copied
