from __future__ import annotations

import ast
import logging
import os
from typing import List, Optional, Tuple

from .. import console
from ..errors import ExternalToolError
from .command import run_cmd

logger = logging.getLogger(__name__)

# Lmod ends its python output with a status flag; it carries no environment edit.
_STATUS_NAMES = {"_mlstatus"}


def _environ_key(node: ast.expr) -> Optional[str]:
    """``os.environ['NAME']`` -> ``'NAME'``; anything else -> None."""

    if not (
        isinstance(node, ast.Subscript)
        and isinstance(node.value, ast.Attribute)
        and node.value.attr == "environ"
        and isinstance(node.value.value, ast.Name)
        and node.value.value.id == "os"
    ):
        return None
    key = ast.literal_eval(node.slice)
    return key if isinstance(key, str) else None


def environ_edits(output: str) -> List[Tuple[str, Optional[str]]]:
    """Read Lmod's python-mode output without executing it.

    Returns ``(name, value)`` pairs in order; a value of None unsets the
    variable. Raises ValueError (SyntaxError for unparsable text) on any
    statement that is not a plain environment assignment or deletion.
    """

    edits: List[Tuple[str, Optional[str]]] = []
    for stmt in ast.parse(output).body:
        if isinstance(stmt, ast.Assign) and len(stmt.targets) == 1:
            target = stmt.targets[0]
            if isinstance(target, ast.Name) and target.id in _STATUS_NAMES:
                continue
            key = _environ_key(target)
            value = ast.literal_eval(stmt.value)
            if key is not None and isinstance(value, str):
                edits.append((key, value))
                continue
        elif isinstance(stmt, ast.Delete) and len(stmt.targets) == 1:
            key = _environ_key(stmt.targets[0])
            if key is not None:
                edits.append((key, None))
                continue
        raise ValueError(f"unexpected statement on line {stmt.lineno}")
    return edits


def purge_modules(*, dry_run: bool = False) -> bool:
    """Unload every Lmod module so site compilers/MPI don't leak into the build.

    Lmod's python mode prints ``os.environ`` edits; they are applied to this
    process only after the whole output has been read. Never fatal.
    Returns True if a purge was applied.
    """

    lmod_cmd = os.environ.get("LMOD_CMD")
    if not lmod_cmd:
        return False
    if not os.access(lmod_cmd, os.X_OK):
        logger.warning("LMOD_CMD=%s is not executable, skipping module purge", lmod_cmd)
        return False

    console.info("Detected Lmod environment. Purging loaded modules...")
    try:
        r = run_cmd([lmod_cmd, "python", "purge"], check=False, capture=True, dry_run=dry_run)
    except ExternalToolError as e:
        console.warn(f"module purge failed: {e}")
        return False
    if r.returncode != 0:
        console.warn(f"module purge failed ({r.returncode}), continuing with the current modules")
        return False

    try:
        edits = environ_edits(r.stdout)
    except (SyntaxError, ValueError) as e:
        console.warn(f"Could not apply module purge output: {e}")
        return False

    for name, value in edits:
        if value is None:
            os.environ.pop(name, None)
        else:
            os.environ[name] = value
    logger.info("Module purge changed %d environment variable(s)", len(edits))
    return True
