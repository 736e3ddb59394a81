"""Logging configuration shared by the CLI and the bridge server."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from wxcat.config import DEFAULT_APP_DIR
from wxcat.config.models import LoggingSettings

LOG_FILENAME = "wxcat.log"
DEFAULT_LOG_PATH = DEFAULT_APP_DIR / LOG_FILENAME
_HANDLER_MARKER = "_wxcat_handler"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    settings: LoggingSettings | None = None,
    log_path: Path | None = DEFAULT_LOG_PATH,
) -> logging.Logger:
    """Attach console and rotating-file handlers to the ``wxcat`` logger.

    Calling this again replaces the handlers installed by a previous call.

    Args:
        settings: Level and rotation settings; defaults when omitted.
        log_path: Rotating log file location, or None to log to stderr only.

    Returns:
        logging.Logger: The configured package logger.
    """
    settings = settings or LoggingSettings()
    logger = logging.getLogger("wxcat")
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True), show_path=False, rich_tracebacks=True
    )
    setattr(console_handler, _HANDLER_MARKER, True)
    logger.addHandler(console_handler)

    if log_path is not None:
        path = Path(log_path).expanduser()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                path,
                maxBytes=max(settings.max_size_mb, 1) * 1024 * 1024,
                backupCount=settings.backup_count,
                encoding="utf-8",
            )
        except OSError as exc:
            logger.warning("File logging disabled, cannot open %s: %s", path, exc)
        else:
            file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
            setattr(file_handler, _HANDLER_MARKER, True)
            logger.addHandler(file_handler)

    return logger


__all__ = ["DEFAULT_LOG_PATH", "LOG_FILENAME", "configure_logging"]
