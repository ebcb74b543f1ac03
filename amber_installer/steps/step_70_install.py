from __future__ import annotations

from .. import console
from ..lib.cmake import make_argv
from ..lib.command import run_cmd
from ..pipeline import ComponentCtx, ComponentState, ComponentStep


class InstallStep(ComponentStep):
    step_id = "70_install"
    reaches = ComponentState.INSTALLED

    def run(self, ctx: ComponentCtx) -> None:
        run_cmd(make_argv("install"), cwd=str(ctx.build_dir), env=ctx.tool_env, dry_run=ctx.dry_run)
        console.success(f"{ctx.spec.title} build complete.")
