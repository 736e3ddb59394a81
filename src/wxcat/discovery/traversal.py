"""Layout-aware traversal of WeChat profile folders.

WeChat has shipped several incompatible on-disk layouts. Each profile folder
under a root is walked with every strategy whose base folder exists:

* ``FileStorage/<Category>/<YYYY-MM>/<file>`` (category folders)
* ``FileStorage/MsgAttach/<group>/<Category>/<YYYY-MM>/<file>`` (attachment groups)
* ``msg/<folder>/**`` (generic message storage, walked recursively)
"""

from __future__ import annotations

import logging
import os
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, Iterator

from .classifier import classify
from .filters import InclusionFilter
from .models import CatalogEntry, ScanRoot
from .probe import (
    is_directory_entry,
    is_file_entry,
    list_entries,
    probe_directory,
    regular_files,
    stat_file,
    subdirectories,
)

LOGGER = logging.getLogger(__name__)

CATEGORY_FOLDERS = ("Image", "Video", "File", "Audio")

FILE_STORAGE = "file_storage"
MESSAGES = "messages"
ATTACHMENTS = "attachments"

STRATEGY_PATHS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (FILE_STORAGE, ("FileStorage",)),
    (MESSAGES, ("msg",)),
    (ATTACHMENTS, ("FileStorage", "MsgAttach")),
)


def _new_entry_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class ScanUnit:
    """One strategy applied to one profile; failures are isolated per unit."""

    root: ScanRoot
    profile: Path
    strategy: str
    base: Path

    @property
    def user(self) -> str:
        return self.profile.name


class Traverser:
    """Walk scan roots and emit catalog entries for accepted files."""

    def __init__(
        self,
        inclusion: InclusionFilter | None = None,
        *,
        workers: int = 4,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.inclusion = inclusion or InclusionFilter()
        self.workers = max(1, workers)
        self._id_factory = id_factory or _new_entry_id
        self._strategies: dict[str, Callable[[Path, str], Iterable[CatalogEntry]]] = {
            FILE_STORAGE: self.scan_file_storage,
            MESSAGES: self.scan_messages,
            ATTACHMENTS: self.scan_attachments,
        }

    def scan(self, roots: Iterable[ScanRoot]) -> list[CatalogEntry]:
        """Return entries for every accepted file found under ``roots``."""
        units = list(self.plan(roots))
        if not units:
            return []

        if self.workers == 1 or len(units) == 1:
            batches = [self._run_unit(unit) for unit in units]
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                batches = list(executor.map(self._run_unit, units))

        entries = [entry for batch in batches for entry in batch]
        LOGGER.info("Traversed %d unit(s), found %d file(s)", len(units), len(entries))
        return entries

    def plan(self, roots: Iterable[ScanRoot]) -> Iterator[ScanUnit]:
        """Yield the units of work for ``roots``: one per profile and strategy."""
        for root in roots:
            profiles = subdirectories(root.path)
            LOGGER.debug("Profiles under %s: %s", root.path, [p.name for p in profiles])
            for profile in profiles:
                for strategy, parts in STRATEGY_PATHS:
                    base = probe_directory(profile.joinpath(*parts))
                    if base is None:
                        LOGGER.debug("No %s folder for profile %s", strategy, profile.name)
                        continue
                    yield ScanUnit(root=root, profile=profile, strategy=strategy, base=base)

    # Strategies ---------------------------------------------------------

    def scan_file_storage(self, base: Path, user: str) -> Iterator[CatalogEntry]:
        """Walk ``FileStorage/<Category>/<YYYY-MM>`` folders."""
        yield from self._scan_category_folders(base, user)

    def scan_attachments(self, base: Path, user: str) -> Iterator[CatalogEntry]:
        """Walk ``MsgAttach/<group>`` folders, each holding category folders."""
        for group in subdirectories(base):
            yield from self._scan_category_folders(group, user)

    def scan_messages(self, base: Path, user: str) -> Iterator[CatalogEntry]:
        """Recursively walk every folder below ``msg``."""
        for folder in subdirectories(base):
            yield from self._walk(folder, user)

    # Internal helpers ---------------------------------------------------

    def _run_unit(self, unit: ScanUnit) -> list[CatalogEntry]:
        strategy = self._strategies[unit.strategy]
        try:
            entries = list(strategy(unit.base, unit.user))
        except Exception as exc:
            LOGGER.warning(
                "Skipping %s scan of profile %s under %s: %s",
                unit.strategy,
                unit.user,
                unit.root.path,
                exc,
            )
            return []
        LOGGER.debug("%s scan of %s yielded %d file(s)", unit.strategy, unit.user, len(entries))
        return entries

    def _scan_category_folders(self, parent: Path, user: str) -> Iterator[CatalogEntry]:
        for folder in CATEGORY_FOLDERS:
            category_dir = probe_directory(parent / folder)
            if category_dir is None:
                continue
            fallback = folder.lower()
            for month_dir in subdirectories(category_dir):
                for path in regular_files(month_dir):
                    entry = self._build_entry(path, user, fallback, year_month=month_dir.name)
                    if entry is not None:
                        yield entry

    def _walk(self, directory: Path, user: str) -> Iterator[CatalogEntry]:
        for item in list_entries(directory) or ():
            path = Path(item.path)
            if is_directory_entry(item):
                yield from self._walk(path, user)
            elif is_file_entry(item):
                entry = self._build_entry(path, user, "other")
                if entry is not None:
                    yield entry

    def _build_entry(
        self,
        path: Path,
        user: str,
        fallback: str,
        *,
        year_month: str | None = None,
    ) -> CatalogEntry | None:
        if not self.inclusion.should_include(path.name, path):
            return None
        stat = stat_file(path)
        if stat is None:
            return None

        modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        return CatalogEntry(
            id=self._id_factory(),
            name=path.name,
            path=path,
            size=stat.st_size,
            type=classify(path.name, fallback),
            create_time=_created_at(stat),
            modify_time=modified,
            user=user,
            year_month=year_month if year_month is not None else modified.strftime("%Y-%m"),
        )


def _created_at(stat: os.stat_result) -> datetime:
    timestamp = getattr(stat, "st_birthtime", None)
    if timestamp is None:
        timestamp = stat.st_ctime
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


__all__ = [
    "ATTACHMENTS",
    "CATEGORY_FOLDERS",
    "FILE_STORAGE",
    "MESSAGES",
    "STRATEGY_PATHS",
    "ScanUnit",
    "Traverser",
]
