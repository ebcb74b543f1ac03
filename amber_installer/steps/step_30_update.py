from __future__ import annotations

from .. import console
from ..lib.command import run_cmd
from ..pipeline import ComponentCtx, ComponentStep


class UpdateSourcesStep(ComponentStep):
    """Apply the vendor's bugfix patches (``update_amber --update``)."""

    step_id = "30_update"

    def run(self, ctx: ComponentCtx) -> None:
        console.info(f"Updating {ctx.spec.title} sources...")
        run_cmd(
            ["./update_amber", "--update"],
            cwd=str(ctx.source_dir),
            env=ctx.tool_env,
            dry_run=ctx.dry_run,
        )
