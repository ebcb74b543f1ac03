from __future__ import annotations

import logging
from typing import Optional

from ..lib.patch import comment_out_lines
from ..pipeline import ComponentCtx, ComponentState, ComponentStep

logger = logging.getLogger(__name__)


class PatchSourcesStep(ComponentStep):
    step_id = "40_patch"
    reaches = ComponentState.PATCHED

    def skip_reason(self, ctx: ComponentCtx) -> Optional[str]:
        if not ctx.spec.patches:
            return "nothing to patch"
        return None

    def run(self, ctx: ComponentCtx) -> None:
        # Applied on every run; see DESIGN.md.
        for patch in ctx.spec.patches:
            target = ctx.source_dir / patch.path
            if ctx.dry_run and not target.is_file():
                logger.info("Would patch %s (not extracted yet)", target)
                continue
            comment_out_lines(target, patch.comment_out, dry_run=ctx.dry_run)
