"""Data models produced by file discovery."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

FileCategory = Literal["image", "video", "audio", "file", "archive", "other"]
RootSource = Literal["custom", "documents", "store", "xwechat"]


class ScanRoot(BaseModel):
    """A directory believed to hold one or more WeChat profiles.

    Attributes:
        path: Existing directory to walk.
        source: Where the candidate came from (user override or a default layout).
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    source: RootSource


class CatalogEntry(BaseModel):
    """A single file discovered under a profile.

    Attributes:
        id: Token unique within the scan that produced the entry.
        name: File base name.
        path: Absolute path to the file.
        size: Size in bytes.
        type: Coarse content category.
        create_time: Creation (or inode change) time in UTC.
        modify_time: Last modification time in UTC.
        user: Profile folder the file was found under.
        year_month: ``YYYY-MM`` bucket used for grouping.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    path: Path
    size: int = Field(ge=0)
    type: str
    create_time: datetime
    modify_time: datetime
    user: str
    year_month: str


__all__ = ["CatalogEntry", "FileCategory", "RootSource", "ScanRoot"]
