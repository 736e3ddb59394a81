"""Catalog data models."""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from wxcat.discovery.models import CatalogEntry


class ScanSettings(BaseModel):
    """Inputs that decide which roots a scan walks.

    Serialized with the ``wechatPath``/``useDefaultPaths`` keys used by the
    persisted settings file.

    Attributes:
        custom_path: User-supplied root, empty when unset.
        use_default_paths: Whether the default install layouts are probed.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    custom_path: str = Field(default="", alias="wechatPath")
    use_default_paths: bool = Field(default=True, alias="useDefaultPaths")

    def fingerprint(self) -> str:
        """Return a stable hash of the settings used as the cache key."""
        payload = self.model_dump_json(by_alias=True)
        return hashlib.sha1(payload.encode("utf-8")).hexdigest()


class CatalogSnapshot(BaseModel):
    """Immutable result of one scan pass."""

    model_config = ConfigDict(frozen=True)

    entries: Tuple[CatalogEntry, ...] = ()
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    fingerprint: str = ""


class CatalogStats(BaseModel):
    """Aggregate counts over a snapshot."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int = 0
    by_type: Dict[str, int] = Field(default_factory=dict)
    by_user: Dict[str, int] = Field(default_factory=dict)
    by_month: Dict[str, int] = Field(default_factory=dict)


__all__ = ["CatalogSnapshot", "CatalogStats", "ScanSettings"]
