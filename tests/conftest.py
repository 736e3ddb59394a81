"""Shared fixtures building fake WeChat folder layouts."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pytest

# 2023-06-15T00:00:00Z
MSG_MTIME = 1686787200


def write_file(path: Path, size: int, *, mtime: float | None = None) -> Path:
    """Create ``path`` with ``size`` bytes, optionally pinning its modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def make_file() -> Callable[..., Path]:
    return write_file


@pytest.fixture
def wechat_root(tmp_path: Path) -> Path:
    """Return a root holding two profiles that use every supported layout.

    Accepted files (7): photo.png, clip.mp4, report.pdf, notes.xyz and
    attach.jpg for ``wxid_alice``; song.mp3 and blob.bin for ``wxid_bob``.
    """
    root = tmp_path / "WeChat Files"
    alice = root / "wxid_alice" / "FileStorage"
    write_file(alice / "Image" / "2024-01" / "photo.png", 2000)
    write_file(alice / "Image" / "2024-01" / "9999", 500)
    write_file(alice / "Video" / "2024-02" / "clip.mp4", 4096)
    write_file(alice / "File" / "2024-02" / "report.pdf", 3000)
    write_file(alice / "File" / "2024-02" / "notes.xyz", 2048)
    write_file(alice / "File" / "2024-02" / "cache.dat", 4096)
    write_file(alice / "MsgAttach" / "abc123" / "Image" / "2024-03" / "attach.jpg", 2048)
    write_file(alice / "MsgAttach" / "abc123" / "File" / "2024-03" / "tiny.txt", 100)

    bob = root / "wxid_bob" / "msg"
    write_file(bob / "file" / "2024-04" / "deep" / "song.mp3", 5000, mtime=MSG_MTIME)
    write_file(bob / "attach" / "blob.bin", 3000, mtime=MSG_MTIME)
    write_file(bob / "attach" / "Thumbs.db", 3000)
    write_file(bob / "attach" / "123_456", 5000)

    # Loose files at profile level are not part of any layout.
    write_file(root / "wxid_bob" / "loose.png", 4096)
    (root / "All Users").mkdir()
    return root
