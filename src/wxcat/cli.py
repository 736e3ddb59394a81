"""Command line interface for wxcat."""

from __future__ import annotations

import difflib
import json
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from wxcat.bridge import (
    UPDATE_SETTINGS_REQUEST,
    BridgeError,
    RequestHandler,
    create_handler,
    format_entries,
)
from wxcat.catalog import Catalog
from wxcat.catalog.query import filter_entries, search_entries, sort_entries
from wxcat.config import ConfigError, ConfigManager, WxcatConfig, resolve_with_precedence
from wxcat.config.resolver import nest_value
from wxcat.logging_setup import LOG_FILENAME, configure_logging
from wxcat.settings import SettingsStore

console = Console()

REQUEST_ERROR = "request-error"
_NOTHING_FOUND = (
    "[yellow]No WeChat files found. Check the custom path "
    "(`wxcat settings set --path ...`) or enable the default paths.[/yellow]"
)


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return
    if summary_only and mode not in {"summary", "warning", "error"}:
        return
    console.print(message)


def _format_summary_line(command: str, metrics: dict[str, Any]) -> str:
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary: {parts}.[/green]"


def _load_config() -> WxcatConfig:
    manager = ConfigManager()
    manager.ensure_exists()
    config = manager.load()
    configure_logging(config.logging, manager.app_dir / LOG_FILENAME)
    return config


def _resolve_output_modes(
    ctx: click.Context,
    config: WxcatConfig,
    *,
    quiet: bool,
    summary_mode: bool,
    json_output: bool,
) -> tuple[bool, bool]:
    """Combine CLI flags with configured defaults into (quiet, summary_only).

    Raises:
        click.ClickException: If the resulting modes conflict.
    """
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _build_catalog(config: WxcatConfig, path: str | None, no_defaults: bool) -> Catalog:
    settings = SettingsStore().load()
    if path is not None:
        settings = settings.model_copy(update={"custom_path": path})
    if no_defaults:
        settings = settings.model_copy(update={"use_default_paths": False})
    return Catalog(settings, options=config.scan)


def _entries_table(rows: list[dict[str, Any]], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Name", overflow="fold")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("User")
    table.add_column("Path", overflow="fold")
    for row in rows:
        table.add_row(
            row["name"], row["type"], row["size"], row["modifyTime"], row["user"], row["path"]
        )
    return table


def _counts_table(title: str, counts: dict[str, int]) -> Table:
    table = Table(title=title)
    table.add_column("Key")
    table.add_column("Files", justify="right")
    for key, value in sorted(counts.items(), key=lambda item: (-item[1], item[0])):
        table.add_row(key, str(value))
    return table


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="wxcat")
def cli() -> None:
    """wxcat finds, catalogs and searches the files WeChat keeps on this computer."""


@cli.command()
@click.option("--path", "path", type=str, help="Scan this folder in addition to the defaults.")
@click.option("--no-defaults", is_flag=True, help="Skip the default WeChat folders.")
@click.option("--search", "keyword", type=str, help="Only list files whose name contains this.")
@click.option(
    "--type",
    "file_type",
    type=str,
    default="all",
    show_default=True,
    help="Only list files of this type (image, video, audio, file, archive, other).",
)
@click.option("--oldest-first", is_flag=True, help="Sort by modification time, oldest first.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of a table.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def scan(
    ctx: click.Context,
    path: str | None,
    no_defaults: bool,
    keyword: str | None,
    file_type: str,
    oldest_first: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Scan the WeChat folders and list the files found.

    Args:
        ctx: Click context used for parameter source inspection.
        path: Optional custom root overriding the persisted setting for this run.
        no_defaults: If True, the default install folders are not probed.
        keyword: Optional case-insensitive name filter.
        file_type: Category filter, ``all`` for every category.
        oldest_first: Sort ascending by modification time instead of newest first.
        json_output: If True, emit JSON rather than a table.
        summary_mode: When True, limit output to summary lines and warnings.
        quiet: When True, suppress non-error CLI output entirely.
    """

    try:
        config = _load_config()
        quiet_enabled, summary_only = _resolve_output_modes(
            ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
        )
        catalog = _build_catalog(config, path, no_defaults)
        entries = catalog.scan()

        matches = filter_entries(search_entries(entries, keyword), file_type)
        rows = format_entries(sort_entries(matches, ascending=oldest_first))
        counts = {"total": len(entries), "matches": len(rows)}

        if json_output:
            console.print_json(
                data={
                    "context": {
                        "custom_path": catalog.settings.custom_path,
                        "use_default_paths": catalog.settings.use_default_paths,
                        "search": keyword,
                        "type": file_type,
                    },
                    "counts": counts,
                    "files": rows,
                }
            )
            return

        if not entries:
            _emit_message(
                _NOTHING_FOUND, mode="warning", quiet=quiet_enabled, summary_only=summary_only
            )
        elif rows:
            limit = config.cli.table_limit
            title = "WeChat files" if len(rows) <= limit else f"WeChat files (first {limit})"
            _emit_message(
                _entries_table(rows[:limit], title),
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        _emit_message(
            _format_summary_line("Scan", counts),
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_output, original=exc)
    except Exception as exc:
        _handle_cli_error(
            f"Unexpected error while scanning: {exc}",
            code="internal_error",
            json_output=json_output,
            details={"exception": type(exc).__name__},
            original=exc,
        )


@cli.command()
@click.option("--path", "path", type=str, help="Scan this folder in addition to the defaults.")
@click.option("--no-defaults", is_flag=True, help="Skip the default WeChat folders.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of tables.")
def stats(path: str | None, no_defaults: bool, json_output: bool) -> None:
    """Show file counts by type, user and month."""

    try:
        config = _load_config()
        catalog = _build_catalog(config, path, no_defaults)
        catalog.scan()
        result = catalog.get_stats()
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return
    except Exception as exc:
        _handle_cli_error(
            f"Unexpected error while computing stats: {exc}",
            code="internal_error",
            json_output=json_output,
            details={"exception": type(exc).__name__},
            original=exc,
        )
        return

    if json_output:
        console.print_json(data=result.model_dump(mode="json", by_alias=True))
        return

    if result.total == 0:
        console.print(_NOTHING_FOUND)
        return
    console.print(_counts_table("By type", result.by_type))
    console.print(_counts_table("By user", result.by_user))
    console.print(_counts_table("By month", result.by_month))
    console.print(_format_summary_line("Stats", {"total": result.total}))


@cli.group()
def settings() -> None:
    """View or change which folders are scanned."""


@settings.command("show")
def settings_show() -> None:
    """Print the persisted scan settings."""
    store = SettingsStore()
    current = store.load()
    console.print(f"[cyan]Settings file: {store.path}[/cyan]")
    console.print_json(data=current.model_dump(mode="json", by_alias=True))


@settings.command("set")
@click.option(
    "--path", "path", type=str, help="Custom WeChat folder; pass an empty string to clear."
)
@click.option(
    "--use-defaults/--no-defaults",
    "use_defaults",
    default=None,
    help="Whether the default WeChat folders are scanned.",
)
def settings_set(path: str | None, use_defaults: bool | None) -> None:
    """Update and persist the scan settings."""
    if path is None and use_defaults is None:
        raise click.ClickException("Provide --path and/or --use-defaults/--no-defaults.")

    config = _load_config()
    store = SettingsStore()
    handler = create_handler(store, options=config.scan)
    payload = handler.catalog.settings.model_dump(mode="json", by_alias=True)
    if path is not None:
        payload["wechatPath"] = path
    if use_defaults is not None:
        payload["useDefaultPaths"] = use_defaults

    handler.handle(UPDATE_SETTINGS_REQUEST, payload)
    if handler.last_save_ok is False:
        console.print(
            f"[yellow]Settings applied for this run but not saved to {store.path}.[/yellow]"
        )
    else:
        console.print(f"[green]Updated settings in {store.path}.[/green]")
    console.print_json(data=handler.catalog.settings.model_dump(mode="json", by_alias=True))


@cli.command()
def serve() -> None:
    """Answer JSON-lines requests from stdin, one response line per request.

    Each input line is an object with ``channel`` and optional ``payload``.
    """
    config = _load_config()
    handler = create_handler(options=config.scan)
    _serve_lines(handler, click.get_text_stream("stdin"))


def _serve_lines(handler: RequestHandler, stream: Any) -> None:
    for line in stream:
        line = line.strip()
        if not line:
            continue
        try:
            request = json.loads(line)
            if not isinstance(request, dict) or not isinstance(request.get("channel"), str):
                raise BridgeError("Request must be an object with a string 'channel'.")
            response = handler.handle(request["channel"], request.get("payload"))
        except (json.JSONDecodeError, BridgeError) as exc:
            click.echo(json.dumps({"channel": REQUEST_ERROR, "payload": str(exc)}))
            continue
        if response is not None:
            click.echo(response.model_dump_json())


@cli.group()
def config() -> None:
    """Manage wxcat configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'scan.workers'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        nest_value(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=WxcatConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = list(
        difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    # The timestamp line always changes; only report real edits.
    changed = [
        line
        for line in diff[2:]
        if line.startswith(("+", "-")) and "Last updated" not in line
    ]
    if not changed:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
