"""Extension-based content categories."""

from __future__ import annotations

from .filters import extension_of

CATEGORY_EXTENSIONS: tuple[tuple[str, frozenset[str]], ...] = (
    ("image", frozenset({".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"})),
    ("video", frozenset({".mp4", ".avi", ".mov", ".wmv", ".flv", ".mkv"})),
    ("audio", frozenset({".mp3", ".wav", ".aac", ".flac", ".ogg", ".amr"})),
    ("file", frozenset({".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".pdf", ".txt", ".md"})),
    ("archive", frozenset({".zip", ".rar", ".7z", ".tar", ".gz", ".bz2"})),
)
CATEGORIES = tuple(name for name, _ in CATEGORY_EXTENSIONS) + ("other",)


def classify(file_name: str, fallback: str = "other") -> str:
    """Return the category implied by the extension of ``file_name``.

    Unknown extensions map to ``fallback``, which lets callers supply a hint
    derived from the folder the file was found in.
    """
    extension = extension_of(file_name)
    for category, extensions in CATEGORY_EXTENSIONS:
        if extension in extensions:
            return category
    return fallback


__all__ = ["CATEGORIES", "CATEGORY_EXTENSIONS", "classify"]
