"""Configuration management for wxcat.

The configuration file lives in the wxcat application directory
(``~/.wxcat`` by default) next to the persisted scan settings and the log
file. Values resolve as defaults < file < ``WXCAT__`` environment < CLI.
"""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .models import CLIOptions, LoggingSettings, ScanOptions, WxcatConfig
from .resolver import (
    ENV_PREFIX,
    ConfigError,
    flatten_for_env,
    nest_value,
    resolve_with_precedence,
)

DEFAULT_APP_DIR = Path("~/.wxcat")
CONFIG_FILENAME = "config.yaml"
DEFAULT_CONFIG_PATH = DEFAULT_APP_DIR / CONFIG_FILENAME
_HEADER = textwrap.dedent(
    """\
    # wxcat configuration file
    # Generated automatically; manage via `wxcat config set`.
    # Sections: scan (cache TTL, size threshold, workers), logging, cli.
    """
)


class ConfigManager:
    """Read, write and resolve the YAML configuration file."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the expanded configuration file path."""
        return self._config_path

    @property
    def app_dir(self) -> Path:
        """Return the directory holding the config, settings and log files."""
        return self._config_path.parent

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> WxcatConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Dotted-key overrides from the command line.
            include_env: Whether ``WXCAT__`` variables are applied.
            ensure_file: Create the file with defaults when it is missing.
            env_overrides: Environment mapping to read instead of the process env.

        Returns:
            WxcatConfig: Validated configuration.

        Raises:
            ConfigError: If the file is malformed or a value fails validation.
        """
        if ensure_file:
            self.ensure_exists()

        env_layer = None
        if include_env:
            env_layer = self.env_overrides(
                env_overrides if env_overrides is not None else self._env
            )

        return resolve_with_precedence(
            defaults=WxcatConfig(),
            file_overrides=self._read_file(),
            env_overrides=env_layer or None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored in the configuration file."""
        return self._read_file()

    def save(self, config: WxcatConfig | Mapping[str, Any]) -> None:
        """Rewrite the configuration file with ``config``."""
        if isinstance(config, WxcatConfig):
            config = config.model_dump(mode="python")
        self._write_file(config)

    def ensure_exists(self) -> Path:
        """Write a default configuration file unless one is present."""
        if not self._config_path.exists():
            self._write_file(WxcatConfig().model_dump(mode="python"))
        return self._config_path

    def read_text(self) -> str:
        """Return the configuration file text, or an empty string when absent."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    @staticmethod
    def env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
        """Return nested overrides parsed from ``WXCAT__SECTION__KEY`` variables.

        Values are parsed as YAML scalars so ``"8"`` becomes ``8`` and
        ``"false"`` becomes ``False``; unparsable values stay strings.
        """
        overrides: dict[str, Any] = {}
        for name, raw in env.items():
            if not name.startswith(ENV_PREFIX):
                continue
            path = [part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part]
            if not path:
                continue
            try:
                value: Any = yaml.safe_load(raw)
            except yaml.YAMLError:
                value = raw
            nest_value(overrides, path, value)
        return overrides

    def _read_file(self) -> dict[str, Any]:
        text = self.read_text()
        if not text:
            return {}
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {self._config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return data

    def _write_file(self, data: Mapping[str, Any]) -> None:
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        body = yaml.safe_dump(dict(data), sort_keys=False)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(f"{_HEADER}# Last updated: {stamp}\n{body}", encoding="utf-8")


__all__ = [
    "CLIOptions",
    "CONFIG_FILENAME",
    "ConfigError",
    "ConfigManager",
    "DEFAULT_APP_DIR",
    "DEFAULT_CONFIG_PATH",
    "LoggingSettings",
    "ScanOptions",
    "WxcatConfig",
    "flatten_for_env",
    "resolve_with_precedence",
]
