"""Tests for extension based classification."""

import pytest

from wxcat.discovery.classifier import CATEGORIES, classify


def test_extension_match_ignores_case() -> None:
    assert classify("a.JPG", "other") == "image"


def test_unknown_extension_uses_fallback() -> None:
    assert classify("a.xyz", "file") == "file"
    assert classify("no_extension", "video") == "video"
    assert classify("a.xyz") == "other"


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("pic.webp", "image"),
        ("movie.mkv", "video"),
        ("voice.amr", "audio"),
        ("slides.pptx", "file"),
        ("readme.md", "file"),
        ("bundle.7z", "archive"),
        ("backup.tar.gz", "archive"),
    ],
)
def test_known_extensions(name: str, expected: str) -> None:
    assert classify(name, "other") == expected


def test_extension_rules_win_over_folder_hint() -> None:
    assert classify("photo.png", "video") == "image"


def test_categories_are_closed() -> None:
    assert CATEGORIES == ("image", "video", "audio", "file", "archive", "other")
