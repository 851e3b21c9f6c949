"""Unique, stable identifiers for nodes, edges and placed items."""

from __future__ import annotations

import itertools
from typing import Container, Dict, Iterator


class IdAllocator:
    """Hand out ``<prefix><n>`` ids from a monotonic counter per prefix.

    Ids listed in ``taken`` (for example after importing a document) are skipped, so
    an id is never reused while it is still present.
    """

    def __init__(self) -> None:
        self._counters: Dict[str, Iterator[int]] = {}

    def allocate(self, prefix: str = "", taken: Container[str] = ()) -> str:
        counter = self._counters.setdefault(prefix, itertools.count(1))
        while True:
            candidate = f"{prefix}{next(counter)}"
            if candidate not in taken:
                return candidate
