"""Cached access to merged match data."""

import copy
import logging
import time
from typing import Any, Callable, Optional

from matchlog import MatchRecord, MergeFilter
from matchlog.merging import DEFAULT_SHEET_RANGE, fetch_and_merge
from matchlog.opponents import DEFAULT_THRESHOLD
from matchlog.sources import MatchStore, SheetSource

log = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


class MergedDataCache:
    """TTL cache owned by a single service instance."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: dict[Any, tuple[float, Any]] = {}

    def get(self, key: Any) -> Optional[Any]:
        """Return the cached value, None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self.clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return value

    def put(self, key: Any, value: Any) -> None:
        """Store a value and drop all expired entries."""
        now = self.clock()
        expired = [k for k, (stored_at, _) in self._entries.items()
                   if now - stored_at >= self.ttl_seconds]
        for k in expired:
            del self._entries[k]
        self._entries[key] = (now, value)

    def __len__(self) -> int:
        return len(self._entries)

    def invalidate(self, key: Any = None) -> None:
        """Drop one entry, or all entries when key is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)


class MergedDataService:
    """Merged match data for one pair of sources, optionally cached."""

    def __init__(
        self,
        match_store: MatchStore,
        sheet_source: Optional[SheetSource] = None,
        sheet_range: str = DEFAULT_SHEET_RANGE,
        threshold: float = DEFAULT_THRESHOLD,
        cache: Optional[MergedDataCache] = None,
    ):
        self.match_store = match_store
        self.sheet_source = sheet_source
        self.sheet_range = sheet_range
        self.threshold = threshold
        self.cache = cache

    def get_merged_match_data(self, match_filter: Optional[MergeFilter] = None) -> list[MatchRecord]:
        match_filter = match_filter or MergeFilter()
        key = (match_filter, self.sheet_range)

        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                log.debug("Zusammengefuehrte Daten aus Cache: %s", key)
                return copy.deepcopy(cached)

        records = fetch_and_merge(
            self.match_store, self.sheet_source, match_filter,
            self.sheet_range, self.threshold,
        )
        if self.cache is not None:
            # Callers own their records; keep a private copy
            self.cache.put(key, copy.deepcopy(records))
        return records

    def invalidate(self) -> None:
        """Forget cached results, e.g. after a match was written."""
        if self.cache is not None:
            self.cache.invalidate()
