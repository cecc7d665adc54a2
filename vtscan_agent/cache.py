from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from .models import ScanSummary


@dataclass(frozen=True)
class CachePolicy:
    ttl_s: int = 24 * 60 * 60
    max_entries: int = 1000
    evict_batch: int = 100


@dataclass(frozen=True)
class CacheEntry:
    result: ScanSummary
    stored_at_ms: int


class ResultCache:
    """In-process scan results keyed by the raw URL string.

    Not shared across processes and not locked; two concurrent scans of the
    same URL both run and the later put wins.
    """

    def __init__(self, policy: CachePolicy | None = None, clock: Callable[[], float] = time.time):
        self.policy = policy or CachePolicy()
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._now_ms() - entry.stored_at_ms < self.policy.ttl_s * 1000

    def get(self, url: str) -> ScanSummary | None:
        entry = self._entries.get(url)
        if entry is None:
            return None
        if self._is_fresh(entry):
            return entry.result
        # Another worker may have dropped it already.
        self._entries.pop(url, None)
        return None

    def put(self, url: str, summary: ScanSummary) -> None:
        self._entries[url] = CacheEntry(result=summary, stored_at_ms=self._now_ms())
        if len(self._entries) > self.policy.max_entries:
            self._evict_oldest(self.policy.evict_batch)

    def _evict_oldest(self, count: int) -> None:
        oldest = sorted(self._entries.items(), key=lambda kv: kv[1].stored_at_ms)[:count]
        for url, _ in oldest:
            self._entries.pop(url, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, url: object) -> bool:
        """True only for an entry `get` would still return; never evicts."""
        entry = self._entries.get(url)
        return entry is not None and self._is_fresh(entry)
