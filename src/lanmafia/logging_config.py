"""Logging setup for the engine and the CLI."""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(name)s: %(message)s"


def setup_logging(
    level: Union[int, str] = logging.WARNING,
    rich_console: bool = True,
    log_file: Optional[str] = None,
    console: Optional[Console] = None,
) -> None:
    """Configure root logging.

    Args:
        level: Log level name or number.
        rich_console: Render console logs with rich. Plain
            basicConfig output otherwise.
        log_file: Also write plain-text logs to this file.
        console: Rich console to log to (stderr by default).
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError("Unknown log level")

    handlers: list[logging.Handler] = []
    if rich_console:
        handlers.append(RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        ))
    else:
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(stream)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s " + LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT if not rich_console else "%(message)s",
        handlers=handlers,
        force=True,
    )
