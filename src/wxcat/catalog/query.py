"""Read-only queries over catalog entries."""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from wxcat.discovery.models import CatalogEntry

from .models import CatalogStats

ALL_TYPES = "all"


def search_entries(entries: Sequence[CatalogEntry], keyword: str | None) -> list[CatalogEntry]:
    """Return entries whose name contains ``keyword``, ignoring case."""
    if not keyword:
        return list(entries)
    needle = keyword.casefold()
    return [entry for entry in entries if needle in entry.name.casefold()]


def filter_entries(entries: Sequence[CatalogEntry], file_type: str) -> list[CatalogEntry]:
    """Return entries of ``file_type``; ``"all"`` keeps everything."""
    if file_type == ALL_TYPES:
        return list(entries)
    return [entry for entry in entries if entry.type == file_type]


def sort_entries(entries: Sequence[CatalogEntry], *, ascending: bool = False) -> list[CatalogEntry]:
    """Return a new list ordered by modification time; ties keep their order."""
    return sorted(entries, key=lambda entry: entry.modify_time, reverse=not ascending)


def compute_stats(entries: Sequence[CatalogEntry]) -> CatalogStats:
    """Count entries overall and per type, user and month."""
    return CatalogStats(
        total=len(entries),
        by_type=dict(Counter(entry.type for entry in entries)),
        by_user=dict(Counter(entry.user for entry in entries)),
        by_month=dict(Counter(entry.year_month for entry in entries)),
    )


__all__ = ["ALL_TYPES", "compute_stats", "filter_entries", "search_entries", "sort_entries"]
