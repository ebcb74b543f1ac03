from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_LOG_PATH = "amber-installer.log"

_FILE_FORMAT = logging.Formatter(
    fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S%z",
)


def _open_log_file(log_path: str) -> logging.FileHandler:
    target = Path(log_path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(target)
    except OSError:
        # Read-only work dir: keep a log anyway.
        handler = logging.FileHandler(Path(tempfile.gettempdir()) / target.name)
    handler.setFormatter(_FILE_FORMAT)
    return handler


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.DEBUG,
    also_console: bool = False,
) -> str:
    """Send every command and decision to the installer log.

    The console only mirrors the log when ``also_console`` is set (``-verbose``);
    the regular status lines come from :mod:`amber_installer.console`.

    Safe to call more than once. Returns the log file actually in use, which
    is a file in the temp dir if ``log_path`` could not be opened.
    """

    root = logging.getLogger()
    root.setLevel(level)

    if getattr(root, "_amber_configured", False):
        return getattr(root, "_amber_log_path", log_path)

    file_handler = _open_log_file(log_path)
    root.addHandler(file_handler)
    chosen_path = file_handler.baseFilename

    if also_console:
        mirror = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            markup=False,
        )
        mirror.setLevel(level)
        root.addHandler(mirror)

    setattr(root, "_amber_configured", True)
    setattr(root, "_amber_log_path", chosen_path)

    logging.getLogger(__name__).info("Logging to %s", chosen_path)
    return chosen_path
