from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from ..errors import MissingInputError

logger = logging.getLogger(__name__)

COMMENT_MARKER = "# "


def comment_out_lines(
    path: Path,
    needles: Sequence[str],
    *,
    marker: str = COMMENT_MARKER,
    dry_run: bool = False,
) -> int:
    """Prefix ``marker`` to every line containing one of ``needles``.

    Same result as running ``sed -i '/<needle>/s/^/# /'`` once per needle:
    plain substring match, every matching line, already-commented lines
    included. Bytes and line endings are otherwise preserved.

    Returns the number of prefixes written.
    """

    if not path.is_file():
        raise MissingInputError(f"Patch target not found: {path}")

    lines = path.read_bytes().decode("utf-8", errors="surrogateescape").split("\n")
    count = 0
    for needle in needles:
        for i, line in enumerate(lines):
            if needle in line:
                lines[i] = marker + line
                count += 1

    if dry_run:
        logger.info("Would comment out %d line(s) in %s", count, path)
        return count

    path.write_bytes("\n".join(lines).encode("utf-8", errors="surrogateescape"))
    logger.info("Commented out %d line(s) in %s", count, path)
    return count
