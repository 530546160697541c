"""
Set of URLs whose fetch has already been scheduled.
"""
from __future__ import annotations

import threading
from typing import Iterable, Iterator, Optional, Set


class VisitedSet:
    """Thread-safe URL set whose only write is an atomic test-and-set."""

    def __init__(self, urls: Optional[Iterable[str]] = None) -> None:
        self._urls: Set[str] = set(urls or ())
        self._lock = threading.Lock()

    def claim(self, url: str) -> bool:
        """Mark *url* as visited; False if another caller got there first."""
        with self._lock:
            if url in self._urls:
                return False
            self._urls.add(url)
            return True

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._urls

    def __len__(self) -> int:
        with self._lock:
            return len(self._urls)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._urls))
