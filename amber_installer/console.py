"""Tagged, colored status lines for the person running the installer.

Informational and success lines go to stdout, warnings and errors to stderr.
Each line is also written to the installer log.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.text import Text

logger = logging.getLogger(__name__)
# Keeps logging's last-resort stderr handler from repeating lines printed
# before configure_logging() ran.
logger.addHandler(logging.NullHandler())

stdout = Console(highlight=False)
stderr = Console(stderr=True, highlight=False)


def _emit(console: Console, tag: str, style: str, message: str) -> None:
    console.print(Text.assemble((tag, style), " ", message), soft_wrap=True)


def info(message: str) -> None:
    logger.info(message)
    _emit(stdout, "[INFO]", "bold blue", message)


def success(message: str) -> None:
    logger.info(message)
    _emit(stdout, "[ OK ]", "bold green", message)


def warn(message: str) -> None:
    logger.warning(message)
    _emit(stderr, "[WARN]", "bold yellow", message)


def error(message: str) -> None:
    logger.error(message)
    _emit(stderr, "[ERROR]", "bold red", message)


def plain(message: str, *, err: bool = False) -> None:
    (stderr if err else stdout).print(Text(message), soft_wrap=True)
