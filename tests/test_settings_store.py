"""Settings store tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from wxcat.catalog import ScanSettings
from wxcat.settings import SettingsError, SettingsStore, settings_from_payload


def test_load_without_file_returns_defaults(tmp_path: Path) -> None:
    """Ensure a missing settings file yields the default settings.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    store = SettingsStore(tmp_path / "settings.json")

    settings = store.load()

    assert settings == ScanSettings()
    assert settings.custom_path == ""
    assert settings.use_default_paths is True


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    """Ensure saved settings are read back unchanged.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    store = SettingsStore(tmp_path / "nested" / "settings.json")
    settings = ScanSettings(custom_path="D:/WeChat Files", use_default_paths=False)

    assert store.save(settings) is True
    assert store.load() == settings
    assert json.loads(store.path.read_text(encoding="utf-8")) == {
        "wechatPath": "D:/WeChat Files",
        "useDefaultPaths": False,
    }


def test_read_invalid_json_raises(tmp_path: Path) -> None:
    """Verify corrupt JSON surfaces as SettingsError from read().

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    path = tmp_path / "settings.json"
    path.write_text("{not-json", encoding="utf-8")

    with pytest.raises(SettingsError):
        SettingsStore(path).read()


def test_read_non_object_raises(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(SettingsError):
        SettingsStore(path).read()


def test_load_falls_back_to_defaults_on_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not-json", encoding="utf-8")

    assert SettingsStore(path).load() == ScanSettings()


def test_save_reports_failure(tmp_path: Path) -> None:
    """Verify save returns False when the target cannot be written.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    blocker = tmp_path / "blocker"
    blocker.write_text("file in the way", encoding="utf-8")
    store = SettingsStore(blocker / "settings.json")

    assert store.save(ScanSettings()) is False


def test_unknown_keys_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"wechatPath": "/x", "useDefaultPaths": True, "theme": "dark"}),
        encoding="utf-8",
    )

    assert SettingsStore(path).load() == ScanSettings(custom_path="/x")


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        (None, ScanSettings()),
        ({}, ScanSettings()),
        ({"wechatPath": None}, ScanSettings()),
        (
            {"wechatPath": "/w", "useDefaultPaths": False},
            ScanSettings(custom_path="/w", use_default_paths=False),
        ),
        ({"useDefaultPaths": 0}, ScanSettings()),
        ({"useDefaultPaths": None}, ScanSettings()),
    ],
)
def test_settings_from_payload(payload, expected: ScanSettings) -> None:
    assert settings_from_payload(payload) == expected
