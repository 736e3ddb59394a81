"""Inclusion heuristics separating user content from cache noise."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .probe import stat_file

LOGGER = logging.getLogger(__name__)

EXCLUDED_EXTENSIONS = frozenset({".dat", ".ini", ".log", ".tmp", ".temp", ".db"})
EXCLUDED_NAMES = frozenset({"Thumbs.db", "desktop.ini", "config"})
MIN_FILE_SIZE_BYTES = 1024

# Cache-key file names such as ``123`` or ``123_456``.
_CACHE_KEY_NAME = re.compile(r"\d+(?:_\d+)*", re.ASCII)


def extension_of(file_name: str) -> str:
    """Return the lowercased extension of ``file_name`` including the dot.

    Names with a single leading dot (``.hidden``) have no extension.
    """
    dot_index = file_name.rfind(".")
    if dot_index <= 0:
        return ""
    return file_name[dot_index:].lower()


class InclusionFilter:
    """Decide whether a discovered file belongs in the catalog."""

    def __init__(self, min_size_bytes: int = MIN_FILE_SIZE_BYTES) -> None:
        self.min_size_bytes = min_size_bytes

    def matches_name(self, file_name: str) -> bool:
        """Apply the name-only rules (extension, reserved names, cache keys)."""
        if extension_of(file_name) in EXCLUDED_EXTENSIONS:
            return False
        if file_name in EXCLUDED_NAMES:
            return False
        if _CACHE_KEY_NAME.fullmatch(file_name):
            return False
        return True

    def should_include(self, file_name: str, file_path: Path) -> bool:
        """Return True when the file passes every name and size rule.

        A file whose size cannot be read is excluded.
        """
        if not self.matches_name(file_name):
            return False

        stat = stat_file(Path(file_path))
        if stat is None:
            LOGGER.debug("Excluding %s: size lookup failed", file_path)
            return False
        return stat.st_size >= self.min_size_bytes


__all__ = [
    "EXCLUDED_EXTENSIONS",
    "EXCLUDED_NAMES",
    "MIN_FILE_SIZE_BYTES",
    "InclusionFilter",
    "extension_of",
]
