from __future__ import annotations

import logging

from ..errors import MissingInputError
from ..lib.archive import missing_archives
from ..pipeline import ComponentCtx, ComponentState, ComponentStep

logger = logging.getLogger(__name__)


class VerifyArchivesStep(ComponentStep):
    step_id = "10_verify"
    reaches = ComponentState.VERIFIED

    def run(self, ctx: ComponentCtx) -> None:
        missing = missing_archives(ctx.archives)
        if missing:
            name = missing[0].name
            raise MissingInputError(
                f"{name} not found in {ctx.work_dir}",
                hint=f"Please download {name} from {ctx.cfg.release.download_url}",
            )
