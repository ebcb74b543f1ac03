from __future__ import annotations

import logging
from typing import Optional

from .. import console
from ..errors import MissingInputError
from ..lib.archive import extract_archive
from ..pipeline import ComponentCtx, ComponentState, ComponentStep

logger = logging.getLogger(__name__)


class ExtractSourcesStep(ComponentStep):
    step_id = "20_extract"
    reaches = ComponentState.EXTRACTED

    def skip_reason(self, ctx: ComponentCtx) -> Optional[str]:
        if ctx.source_dir.is_dir():
            return f"{ctx.source_dir.name} already extracted"
        return None

    def run(self, ctx: ComponentCtx) -> None:
        console.info(f"Extracting {ctx.spec.title}...")
        for archive in ctx.archives:
            extract_archive(archive, cwd=ctx.work_dir, env=ctx.tool_env, dry_run=ctx.dry_run)

        if not ctx.dry_run and not ctx.source_dir.is_dir():
            raise MissingInputError(
                f"Extracting {', '.join(a.name for a in ctx.archives)} did not produce {ctx.source_dir}"
            )
