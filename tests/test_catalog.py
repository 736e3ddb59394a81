"""Tests for the catalog, its snapshot cache and queries."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from wxcat.catalog import Catalog, CatalogSnapshot, ScanSettings, SnapshotCache, build_snapshot
from wxcat.config.models import ScanOptions
from wxcat.discovery import PathResolver, Traverser
from wxcat.discovery.models import CatalogEntry


class CountingResolver(PathResolver):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.calls = 0

    def resolve_roots(self, custom_path, use_defaults):
        self.calls += 1
        return super().resolve_roots(custom_path, use_defaults)


class CountingTraverser(Traverser):
    def __init__(self) -> None:
        super().__init__(workers=1)
        self.calls = 0

    def scan(self, roots):
        self.calls += 1
        return super().scan(roots)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _entry(name: str, *, minutes: int, type_: str = "image", user: str = "wxid_a") -> CatalogEntry:
    modified = datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes)
    return CatalogEntry(
        id=f"id-{name}",
        name=name,
        path=Path("/data") / name,
        size=2048,
        type=type_,
        create_time=modified,
        modify_time=modified,
        user=user,
        year_month=modified.strftime("%Y-%m"),
    )


def _catalog_with(entries: list[CatalogEntry]) -> Catalog:
    catalog = Catalog()
    catalog._publish(CatalogSnapshot(entries=tuple(entries)))
    return catalog


@pytest.fixture
def spies(tmp_path: Path):
    resolver = CountingResolver(home=tmp_path / "home", env={})
    traverser = CountingTraverser()
    return resolver, traverser


def test_scan_returns_entries_from_custom_root(wechat_root: Path, spies) -> None:
    resolver, traverser = spies
    catalog = Catalog(
        ScanSettings(custom_path=str(wechat_root)), resolver=resolver, traverser=traverser
    )

    entries = catalog.scan()

    assert len(entries) == 7
    assert catalog.snapshot.entries == tuple(entries)
    assert catalog.snapshot.fingerprint == catalog.settings.fingerprint()


def test_second_scan_within_ttl_uses_cache(wechat_root: Path, spies) -> None:
    resolver, traverser = spies
    catalog = Catalog(
        ScanSettings(custom_path=str(wechat_root)), resolver=resolver, traverser=traverser
    )

    first = catalog.scan()
    second = catalog.scan()

    assert first == second
    assert resolver.calls == 1
    assert traverser.calls == 1


def test_setters_force_a_fresh_walk(wechat_root: Path, spies) -> None:
    resolver, traverser = spies
    catalog = Catalog(
        ScanSettings(custom_path=str(wechat_root)), resolver=resolver, traverser=traverser
    )
    catalog.scan()

    catalog.set_custom_path(str(wechat_root))
    catalog.scan()
    catalog.set_use_default_paths(False)
    catalog.scan()

    assert resolver.calls == 3
    assert traverser.calls == 3
    assert catalog.settings.use_default_paths is False


def test_expired_snapshot_is_rescanned(wechat_root: Path, spies) -> None:
    resolver, traverser = spies
    clock = FakeClock()
    catalog = Catalog(
        ScanSettings(custom_path=str(wechat_root)),
        resolver=resolver,
        traverser=traverser,
        cache=SnapshotCache(300, clock=clock),
    )

    catalog.scan()
    clock.now += 299
    catalog.scan()
    clock.now += 1
    catalog.scan()

    assert traverser.calls == 2


def test_scan_without_roots_is_empty(spies) -> None:
    resolver, traverser = spies
    catalog = Catalog(ScanSettings(use_default_paths=False), resolver=resolver, traverser=traverser)

    assert catalog.scan() == []
    assert traverser.calls == 0
    assert catalog.get_stats().total == 0


def test_options_configure_default_collaborators(tmp_path: Path, make_file) -> None:
    make_file(tmp_path / "wxid_a" / "msg" / "x" / "small.pdf", 10)
    options = ScanOptions(min_file_size_bytes=0, workers=1)
    catalog = Catalog(
        ScanSettings(custom_path=str(tmp_path), use_default_paths=False), options=options
    )

    assert [entry.name for entry in catalog.scan()] == ["small.pdf"]


def test_build_snapshot_is_stateless(wechat_root: Path, spies) -> None:
    resolver, traverser = spies
    settings = ScanSettings(custom_path=str(wechat_root), use_default_paths=False)

    first = build_snapshot(settings, resolver=resolver, traverser=traverser)
    second = build_snapshot(settings, resolver=resolver, traverser=traverser)

    assert len(first.entries) == len(second.entries) == 7
    assert first.fingerprint == second.fingerprint == settings.fingerprint()


def test_search_is_case_insensitive() -> None:
    catalog = _catalog_with(
        [_entry("Holiday.JPG", minutes=1), _entry("report.pdf", minutes=2, type_="file")]
    )

    assert [e.name for e in catalog.search("holi")] == ["Holiday.JPG"]
    assert [e.name for e in catalog.search("PDF")] == ["report.pdf"]
    assert len(catalog.search("")) == 2
    assert len(catalog.search(None)) == 2
    assert catalog.search("missing") == []


def test_filter_all_returns_snapshot_unchanged() -> None:
    entries = [
        _entry("b.png", minutes=5),
        _entry("a.mp4", minutes=1, type_="video"),
        _entry("c.png", minutes=3),
    ]
    catalog = _catalog_with(entries)

    assert catalog.filter_by_type("all") == entries
    assert [e.name for e in catalog.filter_by_type("image")] == ["b.png", "c.png"]
    assert catalog.filter_by_type("audio") == []


def test_sort_directions_are_reversed() -> None:
    entries = [_entry(f"{i}.png", minutes=m) for i, m in enumerate([5, 1, 9, 3])]
    catalog = _catalog_with(entries)

    ascending = catalog.sort_by_time(True)
    descending = catalog.sort_by_time(False)

    assert [e.name for e in ascending] == ["1.png", "3.png", "0.png", "2.png"]
    assert descending == list(reversed(ascending))
    assert catalog.sort_by_time() == descending
    assert list(catalog.entries) == entries


def test_sort_is_stable_for_equal_times() -> None:
    entries = [_entry("first.png", minutes=1), _entry("second.png", minutes=1)]
    catalog = _catalog_with(entries)

    assert [e.name for e in catalog.sort_by_time(True)] == ["first.png", "second.png"]
    assert [e.name for e in catalog.sort_by_time(False)] == ["first.png", "second.png"]


def test_stats_totals_match_tables(wechat_root: Path, spies) -> None:
    resolver, traverser = spies
    catalog = Catalog(
        ScanSettings(custom_path=str(wechat_root)), resolver=resolver, traverser=traverser
    )
    catalog.scan()

    stats = catalog.get_stats()

    assert stats.total == 7
    assert sum(stats.by_type.values()) == stats.total
    assert sum(stats.by_user.values()) == stats.total
    assert sum(stats.by_month.values()) == stats.total
    assert stats.by_user == {"wxid_alice": 5, "wxid_bob": 2}
    assert stats.by_type["image"] == 2
    assert stats.by_month["2023-06"] == 2


def test_queries_read_latest_snapshot_after_setter() -> None:
    catalog = _catalog_with([_entry("keep.png", minutes=1)])

    catalog.set_custom_path("/elsewhere")

    assert [e.name for e in catalog.search("keep")] == ["keep.png"]


def test_fingerprint_tracks_settings() -> None:
    base = ScanSettings(custom_path="/a")

    assert base.fingerprint() == ScanSettings(custom_path="/a").fingerprint()
    assert base.fingerprint() != ScanSettings(custom_path="/b").fingerprint()
    no_defaults = ScanSettings(custom_path="/a", use_default_paths=False)
    assert base.fingerprint() != no_defaults.fingerprint()


def test_snapshot_cache_keys_are_independent() -> None:
    clock = FakeClock()
    cache = SnapshotCache(10, clock=clock)
    snapshot = CatalogSnapshot(fingerprint="a")

    cache.put("a", snapshot)

    assert cache.get("a") is snapshot
    assert cache.get("b") is None
    clock.now += 10
    assert cache.get("a") is None
    assert len(cache) == 0


def test_snapshot_cache_clear() -> None:
    cache = SnapshotCache()
    cache.put("a", CatalogSnapshot())

    cache.clear()

    assert cache.get("a") is None


def test_injected_cache_is_used_even_when_empty() -> None:
    cache = SnapshotCache(10)

    catalog = Catalog(cache=cache)

    assert len(cache) == 0
    assert catalog._cache is cache
