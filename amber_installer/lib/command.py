from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

from ..errors import ExternalToolError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    capture: bool = False,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - By default the tool's output goes straight to the terminal (builds run
      for a long time and the user wants to watch them). ``capture=True``
      collects stdout/stderr instead and logs them at debug level.
    - dry_run logs but does not execute.
    """

    argv_list = [str(a) for a in argv]
    logger.info("CMD %s%s", _fmt_argv(argv_list), f" (cwd={cwd})" if cwd else "")

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    try:
        p = subprocess.run(
            argv_list,
            text=True,
            stdout=subprocess.PIPE if capture else None,
            stderr=subprocess.PIPE if capture else None,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
        )
    except FileNotFoundError as e:
        # Executable (or cwd) missing: same outcome as a failing tool.
        raise ExternalToolError(argv_list, 127, str(e)) from e

    out = p.stdout or ""
    err = p.stderr or ""
    if out:
        logger.debug("STDOUT %s", out.strip())
    if err:
        logger.debug("STDERR %s", err.strip())

    if check and p.returncode != 0:
        raise ExternalToolError(argv_list, p.returncode, err.strip())

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=out, stderr=err)
