from __future__ import annotations

from .. import console
from ..lib.cmake import make_argv
from ..lib.command import run_cmd
from ..pipeline import ComponentCtx, ComponentState, ComponentStep


class BuildStep(ComponentStep):
    step_id = "60_build"
    reaches = ComponentState.BUILT

    def run(self, ctx: ComponentCtx) -> None:
        jobs = ctx.cfg.compile_parallelism
        console.info(f"Building {ctx.spec.title} with {jobs} threads...")
        run_cmd(make_argv(jobs=jobs), cwd=str(ctx.build_dir), env=ctx.tool_env, dry_run=ctx.dry_run)
