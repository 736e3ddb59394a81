"""CLI tests for configuration commands."""

import os
from pathlib import Path
from typing import Any

from click.testing import CliRunner

from wxcat.cli import cli
from wxcat.config import ConfigManager


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path)
    return env


def _config_path(tmp_path: Path) -> Path:
    return tmp_path / ".wxcat" / "config.yaml"


def test_config_view_creates_and_displays_config(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "view"], env=env)

    assert result.exit_code == 0
    assert "scan:" in result.output
    assert _config_path(tmp_path).exists()


def test_config_view_applies_env_unless_disabled(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    env["WXCAT__SCAN__WORKERS"] = "7"

    with_env = runner.invoke(cli, ["config", "view"], env=env)
    without_env = runner.invoke(cli, ["config", "view", "--no-env"], env=env)

    assert "workers: 7" in with_env.output
    assert "workers: 4" in without_env.output


def test_config_set_updates_value_and_writes_diff(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "scan.workers", "--value", "2"], env=env)

    assert result.exit_code == 0
    assert "Updated scan.workers" in result.output

    manager = ConfigManager(config_path=_config_path(tmp_path), env={})
    config = manager.load(include_env=False)
    assert config.scan.workers == 2


def test_config_set_same_value_reports_no_changes(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "scan.workers", "--value", "4"], env=env)

    assert result.exit_code == 0
    assert "No changes applied" in result.output


def test_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "scan.workers", "--value", "zero"], env=env)

    assert result.exit_code != 0
    manager = ConfigManager(config_path=_config_path(tmp_path), env={})
    assert manager.load(include_env=False).scan.workers == 4
