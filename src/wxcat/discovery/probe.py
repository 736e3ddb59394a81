"""Found-or-absent filesystem lookups used during discovery.

Every helper here returns ``None`` (or an empty list) instead of raising when a
path is missing or unreadable, logging anything other than plain absence.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

LOGGER = logging.getLogger(__name__)


def probe_directory(path: Path) -> Path | None:
    """Return ``path`` when it is an existing directory, otherwise ``None``."""
    try:
        if path.is_dir():
            return path
    except OSError as exc:
        LOGGER.warning("Unable to probe %s: %s", path, exc)
    return None


def list_entries(directory: Path) -> list[os.DirEntry] | None:
    """Return the entries of ``directory`` sorted by name, or ``None`` if unreadable."""
    try:
        with os.scandir(directory) as entries:
            return sorted(entries, key=lambda entry: entry.name)
    except FileNotFoundError:
        LOGGER.debug("Directory not found: %s", directory)
    except NotADirectoryError:
        LOGGER.debug("Not a directory: %s", directory)
    except PermissionError:
        LOGGER.warning("Permission denied listing directory: %s", directory)
    except OSError as exc:
        LOGGER.error("Error listing directory %s: %s", directory, exc)
    return None


def subdirectories(directory: Path) -> list[Path]:
    """Return immediate subdirectories of ``directory``, ignoring symlinks."""
    entries = list_entries(directory) or ()
    return [Path(entry.path) for entry in entries if is_directory_entry(entry)]


def regular_files(directory: Path) -> list[Path]:
    """Return regular files directly inside ``directory``, ignoring symlinks."""
    return [Path(entry.path) for entry in list_entries(directory) or () if is_file_entry(entry)]


def stat_file(path: Path) -> os.stat_result | None:
    """Return stat information for ``path`` or ``None`` when it cannot be read."""
    try:
        return path.stat()
    except FileNotFoundError:
        LOGGER.warning("File disappeared during scan: %s", path)
    except PermissionError:
        LOGGER.warning("Permission denied: %s", path)
    except OSError as exc:
        LOGGER.error("Error reading metadata for %s: %s", path, exc)
    return None


def is_directory_entry(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def is_file_entry(entry: os.DirEntry) -> bool:
    try:
        return entry.is_file(follow_symlinks=False)
    except OSError:
        return False


__all__ = [
    "probe_directory",
    "list_entries",
    "subdirectories",
    "regular_files",
    "stat_file",
    "is_directory_entry",
    "is_file_entry",
]
