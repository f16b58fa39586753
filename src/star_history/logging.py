"""Logging for ghstars, built on loguru.

Console output shows the module and, while a repository is being
scraped, its full name:

    12:04:31 | INFO     | history [octocat/hello-world] - Saved 61 points

Standard library loggers (the governor, progress tracker, SQLAlchemy,
httpx) are routed through the same sinks.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger, Record

    from star_history.config import LoggingConfig

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Third-party loggers and the level they are held at unless running with -v
_NOISY_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}

_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{extra[name]}:{function}:{line} | {extra} | {message}"
)

_configured = False


def _short_name(record: Record) -> str:
    name = record["extra"].get("name") or record["name"] or "root"
    return name.rsplit(".", 1)[-1]


def _console_format(record: Record) -> str:
    repo = " [{extra[repo]}]" if "repo" in record["extra"] else ""
    return (
        "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | "
        f"<cyan>{_short_name(record)}</cyan>{repo} - <level>{{message}}</level>\n{{exception}}"
    )


class InterceptHandler(logging.Handler):
    """Forward standard library records to loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.bind(name=record.name).opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(
    level: LogLevel = "INFO",
    *,
    verbose: bool = False,
    quiet: bool = False,
    config: LoggingConfig | None = None,
) -> Logger:
    """Configure console (and optionally file) logging.

    ``verbose`` wins over ``quiet``. When ``config.log_file`` is set, a
    rotating file sink captures everything at DEBUG regardless of the
    console level.
    """
    global _configured

    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "WARNING"

    logger.remove()
    logger.configure(extra={"name": "root"})
    logger.add(sys.stderr, level=level, format=_console_format, colorize=True, diagnose=False)

    if config is not None and config.log_file:
        logger.add(
            Path(config.log_file),
            level="DEBUG",
            format=_FILE_FORMAT,
            rotation=config.rotation,
            retention=config.retention,
            compression="gz",
            serialize=config.serialize,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name, quiet_level in _NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else quiet_level)

    _configured = True
    return logger


def get_logger(name: str) -> Logger:
    """Module logger; use ``{}`` placeholders in messages."""
    return logger.bind(name=name)


def bind_repo(full_name: str, **extra: Any) -> Logger:
    """Logger tagged with the repository currently being scraped."""
    return logger.bind(name="history", repo=full_name, **extra)


@contextmanager
def run_context(**context: Any) -> Iterator[None]:
    """Attach context (run id, batch number) to every record logged inside the block."""
    with logger.contextualize(**context):
        yield


def is_configured() -> bool:
    return _configured


def reset_logging() -> None:
    """Remove all sinks (tests)."""
    global _configured
    logger.remove()
    _configured = False
