"""Resolution of the directories WeChat stores its per-profile files in."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from .models import RootSource, ScanRoot
from .probe import probe_directory

LOGGER = logging.getLogger(__name__)

STORE_PACKAGE = "TencentWeChatLimited.forWindows10_sdtnhv12zgd7a"


class PathResolver:
    """Combine a user-supplied root with the known WeChat install layouts."""

    def __init__(
        self,
        *,
        home: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._home = home
        self._env = env if env is not None else os.environ

    @property
    def home(self) -> Path:
        """Return the home directory the default layouts are derived from."""
        return self._home if self._home is not None else Path.home()

    def default_candidates(self) -> list[tuple[RootSource, Path]]:
        """Return the default layout locations in probing order."""
        documents = self.home / "Documents"
        local_app_data = self._env.get("LOCALAPPDATA")
        local = Path(local_app_data) if local_app_data else self.home / "AppData" / "Local"
        store = (
            local
            / "Packages"
            / STORE_PACKAGE
            / "LocalCache"
            / "Roaming"
            / "Tencent"
            / "WeChatAppStore"
            / "WeChatAppStore Files"
        )
        return [
            ("documents", documents / "WeChat Files"),
            ("store", store),
            ("xwechat", documents / "xwechat_files"),
        ]

    def resolve_roots(self, custom_path: str | Path | None, use_defaults: bool) -> list[ScanRoot]:
        """Return existing scan roots, custom path first and defaults after.

        Args:
            custom_path: Optional user-provided root; ignored when empty or missing.
            use_defaults: Whether the default install layouts should be probed.

        Returns:
            list[ScanRoot]: Existing, de-duplicated roots in probing order.
        """
        candidates: list[tuple[RootSource, Path]] = []
        if custom_path:
            candidates.append(("custom", Path(custom_path).expanduser()))
        if use_defaults:
            candidates.extend(self.default_candidates())

        roots: list[ScanRoot] = []
        seen: set[Path] = set()
        for source, candidate in candidates:
            found = probe_directory(candidate)
            if found is None:
                LOGGER.debug("Skipping missing %s root: %s", source, candidate)
                continue
            resolved = _resolve(found)
            if resolved in seen:
                LOGGER.debug("Skipping duplicate %s root: %s", source, resolved)
                continue
            seen.add(resolved)
            roots.append(ScanRoot(path=resolved, source=source))

        LOGGER.info("Resolved %d scan root(s): %s", len(roots), [str(r.path) for r in roots])
        return roots


def _resolve(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path.absolute()


__all__ = ["PathResolver", "STORE_PACKAGE"]
