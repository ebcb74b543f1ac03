from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Mapping

from .command import run_cmd

logger = logging.getLogger(__name__)


def missing_archives(archives: Iterable[Path]) -> List[Path]:
    return [a for a in archives if not a.is_file()]


def extract_archive(
    archive: Path,
    *,
    cwd: Path,
    env: Mapping[str, str] | None = None,
    dry_run: bool = False,
) -> None:
    """Unpack a bzip2 tarball into ``cwd`` (the tarball carries its own top dir)."""

    run_cmd(["tar", "xjf", str(archive.absolute())], cwd=str(cwd), env=env, dry_run=dry_run)
