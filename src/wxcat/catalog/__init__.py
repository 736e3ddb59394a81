"""In-memory catalog of WeChat files with a time-bounded snapshot cache."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from wxcat.config.models import ScanOptions
from wxcat.discovery import InclusionFilter, PathResolver, Traverser
from wxcat.discovery.models import CatalogEntry

from .cache import DEFAULT_TTL_SECONDS, SnapshotCache
from .models import CatalogSnapshot, CatalogStats, ScanSettings
from .query import ALL_TYPES, compute_stats, filter_entries, search_entries, sort_entries

LOGGER = logging.getLogger(__name__)


def build_snapshot(
    settings: ScanSettings,
    *,
    resolver: PathResolver,
    traverser: Traverser,
) -> CatalogSnapshot:
    """Run one full scan for ``settings`` and return the resulting snapshot.

    Args:
        settings: Root selection inputs for the scan.
        resolver: Resolver producing the roots to walk.
        traverser: Traverser that walks the roots.

    Returns:
        CatalogSnapshot: Entries found, stamped with the settings fingerprint.
    """
    roots = resolver.resolve_roots(settings.custom_path, settings.use_default_paths)
    if not roots:
        LOGGER.warning(
            "No WeChat folders found (custom path=%r, defaults=%s)",
            settings.custom_path,
            settings.use_default_paths,
        )
        return CatalogSnapshot(fingerprint=settings.fingerprint())

    entries = traverser.scan(roots)
    return CatalogSnapshot(entries=tuple(entries), fingerprint=settings.fingerprint())


class Catalog:
    """Scan entry point and query surface over the latest snapshot."""

    def __init__(
        self,
        settings: ScanSettings | None = None,
        *,
        options: ScanOptions | None = None,
        resolver: PathResolver | None = None,
        traverser: Traverser | None = None,
        cache: SnapshotCache | None = None,
    ) -> None:
        options = options or ScanOptions()
        self._settings = settings or ScanSettings()
        self._resolver = resolver or PathResolver()
        self._traverser = traverser or Traverser(
            InclusionFilter(options.min_file_size_bytes), workers=options.workers
        )
        self._cache = cache if cache is not None else SnapshotCache(options.cache_ttl_seconds)
        self._lock = threading.Lock()
        self._snapshot = CatalogSnapshot()

    @property
    def settings(self) -> ScanSettings:
        """Return the settings the next scan will use."""
        return self._settings

    @property
    def snapshot(self) -> CatalogSnapshot:
        """Return the most recently published snapshot."""
        with self._lock:
            return self._snapshot

    @property
    def entries(self) -> tuple[CatalogEntry, ...]:
        """Return the entries of the current snapshot."""
        return self.snapshot.entries

    def scan(self) -> list[CatalogEntry]:
        """Return the catalog, rescanning only when no fresh snapshot is cached."""
        settings = self._settings
        key = settings.fingerprint()
        cached = self._cache.get(key)
        if cached is not None:
            LOGGER.info("Using cached file list (%d entries)", len(cached.entries))
            self._publish(cached)
            return list(cached.entries)

        LOGGER.info(
            "Scanning WeChat files (custom path=%r, defaults=%s)",
            settings.custom_path,
            settings.use_default_paths,
        )
        snapshot = build_snapshot(settings, resolver=self._resolver, traverser=self._traverser)
        self._cache.put(key, snapshot)
        self._publish(snapshot)
        LOGGER.info("Scan complete, %d file(s) found", len(snapshot.entries))
        return list(snapshot.entries)

    def search(self, keyword: str | None) -> list[CatalogEntry]:
        """Return entries whose name contains ``keyword`` (case-insensitive)."""
        return search_entries(self.entries, keyword)

    def filter_by_type(self, file_type: str) -> list[CatalogEntry]:
        """Return entries of ``file_type``, or everything for ``"all"``."""
        return filter_entries(self.entries, file_type)

    def sort_by_time(self, ascending: bool = False) -> list[CatalogEntry]:
        """Return entries ordered by modification time without touching the snapshot."""
        return sort_entries(self.entries, ascending=ascending)

    def get_stats(self) -> CatalogStats:
        """Return totals and per-type, per-user and per-month counts."""
        return compute_stats(self.entries)

    def set_custom_path(self, path: str | Path | None) -> None:
        """Change the custom root and invalidate cached snapshots."""
        self._settings = self._settings.model_copy(update={"custom_path": str(path or "")})
        self.clear_cache()

    def set_use_default_paths(self, use: bool) -> None:
        """Toggle default root probing and invalidate cached snapshots."""
        self._settings = self._settings.model_copy(update={"use_default_paths": bool(use)})
        self.clear_cache()

    def clear_cache(self) -> None:
        """Force the next :meth:`scan` to walk the filesystem."""
        self._cache.clear()

    def _publish(self, snapshot: CatalogSnapshot) -> None:
        with self._lock:
            self._snapshot = snapshot


__all__ = [
    "ALL_TYPES",
    "Catalog",
    "CatalogSnapshot",
    "CatalogStats",
    "DEFAULT_TTL_SECONDS",
    "ScanSettings",
    "SnapshotCache",
    "build_snapshot",
]
