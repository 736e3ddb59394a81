"""Persistence of the user-facing scan settings."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from wxcat.catalog.models import ScanSettings
from wxcat.config import DEFAULT_APP_DIR

LOGGER = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = DEFAULT_APP_DIR / "settings.json"


class SettingsError(Exception):
    """Raised when the settings file cannot be read or parsed."""


def settings_from_payload(payload: Mapping[str, Any] | None) -> ScanSettings:
    """Build settings from a ``{wechatPath, useDefaultPaths}`` mapping.

    A missing or empty ``wechatPath`` means no custom root; only an explicit
    ``false`` disables the default roots.

    Args:
        payload: Raw mapping received from the settings file or the app shell.

    Returns:
        ScanSettings: Normalized settings.
    """
    payload = payload or {}
    custom_path = payload.get("wechatPath") or ""
    return ScanSettings(
        custom_path=str(custom_path),
        use_default_paths=payload.get("useDefaultPaths") is not False,
    )


class SettingsStore:
    """Read and write the JSON settings file."""

    def __init__(self, path: Path | None = None) -> None:
        """Initialize the store.

        Args:
            path: Location of the settings file; defaults to ``~/.wxcat/settings.json``.
        """
        self._path = (path or DEFAULT_SETTINGS_PATH).expanduser()

    @property
    def path(self) -> Path:
        """Return the resolved settings file path."""
        return self._path

    def read(self) -> dict[str, Any]:
        """Return the raw settings mapping stored on disk.

        Returns:
            dict[str, Any]: Stored mapping, empty when no file exists.

        Raises:
            SettingsError: If the file cannot be read or is not a JSON object.
        """
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise SettingsError(f"Invalid settings data in {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise SettingsError(f"Settings file {self._path} must contain a JSON object.")
        return data

    def load(self) -> ScanSettings:
        """Return stored settings, falling back to defaults when unreadable."""
        try:
            data = self.read()
        except SettingsError as exc:
            LOGGER.error("Failed to read settings, using defaults: %s", exc)
            data = {}
        try:
            return settings_from_payload(data)
        except ValidationError as exc:
            LOGGER.error("Ignoring invalid settings in %s: %s", self._path, exc)
            return ScanSettings()

    def save(self, settings: ScanSettings) -> bool:
        """Rewrite the settings file with ``settings``.

        Args:
            settings: Settings to persist.

        Returns:
            bool: True when the file was written, False if the write failed.
        """
        payload = settings.model_dump(mode="json", by_alias=True)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            LOGGER.error("Failed to save settings to %s: %s", self._path, exc)
            return False
        LOGGER.info("Settings saved to %s", self._path)
        return True


__all__ = ["DEFAULT_SETTINGS_PATH", "SettingsError", "SettingsStore", "settings_from_payload"]
