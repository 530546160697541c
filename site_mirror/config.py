"""
Loading and validation of SiteMirror crawl settings.
Pydantic describes the schema; YAML or JSON files supply the values.
"""
from __future__ import annotations

import errno
import json
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; SimpleCrawler/1.0)"


class IgnoreCategory(str, Enum):
    """Content categories that can be excluded from a crawl."""

    JS = "js"
    CSS = "css"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    XML = "xml"


# lowercase suffixes per category
IGNORE_EXTENSIONS: Dict[IgnoreCategory, Tuple[str, ...]] = {
    IgnoreCategory.JS: (".js", ".mjs", ".cjs"),
    IgnoreCategory.CSS: (".css", ".scss", ".sass", ".less"),
    IgnoreCategory.IMAGE: (".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".ico", ".bmp", ".tiff"),
    IgnoreCategory.VIDEO: (".mp4", ".mov", ".avi", ".mkv", ".flv", ".webm", ".3gp", ".wmv"),
    IgnoreCategory.AUDIO: (".mp3", ".wav", ".flac", ".aac", ".ogg", ".wma", ".m4a"),
    IgnoreCategory.XML: (".xml",),
}


def build_ignore_set(categories: Iterable[Union[IgnoreCategory, str]]) -> FrozenSet[str]:
    """Union of the extension tables for the selected *categories*."""
    extensions: set[str] = set()
    for category in categories:
        extensions.update(IGNORE_EXTENSIONS[IgnoreCategory(category)])
    return frozenset(extensions)


class CrawlerConfig(BaseModel):
    """Settings for a single mirroring run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    start_url: Optional[HttpUrl] = Field(None, description="URL the crawl starts from.")
    out_dir: str = Field("output", min_length=1, description="Name of the run directory.")
    output_root: Path = Field(Path("output"), description="Directory holding all runs.")
    base_path: Optional[str] = Field(None, description="Only crawl paths under this prefix.")
    domain: Optional[str] = Field(None, description="Only crawl this hostname.")
    ignore: List[IgnoreCategory] = Field(default_factory=list, description="Skipped content categories.")
    concurrency: int = Field(8, ge=1, description="Simultaneous HTTP requests.")
    timeout: float = Field(10.0, gt=0, description="Timeout per request (seconds).")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="User-Agent header.")
    max_redirects: int = Field(10, ge=0, description="Redirect hops followed per request.")
    flatten: bool = Field(True, description="Produce the flattened copy after the crawl.")

    @field_validator("domain", "base_path", mode="before")
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def ignore_set(self) -> FrozenSet[str]:
        return build_ignore_set(self.ignore)

    def with_overrides(self, **overrides: Any) -> CrawlerConfig:
        """Return a re-validated copy; ``None`` values leave the field untouched."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return CrawlerConfig(**data)


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> CrawlerConfig:
    """
    Read YAML or JSON and return a validated CrawlerConfig.

    With *path* ``None`` the default ``configs/default.yaml`` is used when it
    exists, otherwise the built-in defaults.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return CrawlerConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return CrawlerConfig(**data)
