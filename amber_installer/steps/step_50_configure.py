from __future__ import annotations

from .. import console
from ..lib.cmake import configure_argv, has_stale_cache, make_argv
from ..lib.command import run_cmd
from ..pipeline import ComponentCtx, ComponentState, ComponentStep


class ConfigureStep(ComponentStep):
    step_id = "50_configure"
    reaches = ComponentState.CONFIGURED

    def run(self, ctx: ComponentCtx) -> None:
        cfg = ctx.cfg
        build_dir = ctx.build_dir
        if not ctx.dry_run:
            build_dir.mkdir(parents=True, exist_ok=True)

        console.info(
            f"Configuring {ctx.spec.title} with MPI={cfg.parallelism_enabled}, "
            f"CUDA={cfg.accelerator_enabled}, INSTALL_PREFIX={ctx.prefix}..."
        )

        if has_stale_cache(build_dir):
            console.info("CMakeFiles folder found. Running 'make clean'...")
            run_cmd(make_argv("clean"), cwd=str(build_dir), env=ctx.tool_env, dry_run=ctx.dry_run)

        run_cmd(
            configure_argv(
                prefix=ctx.prefix,
                compiler=cfg.release.compiler,
                mpi=cfg.parallelism_enabled,
                cuda=cfg.accelerator_enabled,
                options=ctx.spec.cmake_options,
            ),
            cwd=str(build_dir),
            env=ctx.tool_env,
            dry_run=ctx.dry_run,
        )
