from __future__ import annotations

import logging
import sys
from typing import List, Optional, Sequence

from . import console
from .build_config import BuildConfig, parse_args, usage_text
from .errors import HelpRequested, InstallerError, MissingInputError, UsageError
from .lib.conda import activate_environment, bootstrap_environment, environment_ready
from .lib.env import Paths
from .lib.modules import purge_modules
from .logging_utils import configure_logging
from .pipeline import ComponentCtx, ComponentRun, run_component, summarize_states
from .steps import (
    BuildStep,
    ConfigureStep,
    ExtractSourcesStep,
    InstallStep,
    PatchSourcesStep,
    UpdateSourcesStep,
    VerifyArchivesStep,
)

logger = logging.getLogger(__name__)


def build_steps():
    return [
        VerifyArchivesStep(),
        ExtractSourcesStep(),
        UpdateSourcesStep(),
        PatchSourcesStep(),
        ConfigureStep(),
        BuildStep(),
        InstallStep(),
    ]


def run(cfg: BuildConfig, *, log_path: Optional[str] = None) -> List[ComponentRun]:
    """Bootstrap the build environment, then build each selected component in turn."""

    paths = Paths(work_dir=cfg.work_dir)
    configure_logging(log_path=log_path or str(paths.log_path), also_console=cfg.verbose)
    logger.info(
        "release=%s build=%s components=%s nproc=%d dry_run=%s",
        cfg.release.name,
        cfg.build_type.value,
        ",".join(cfg.components),
        cfg.compile_parallelism,
        cfg.dry_run,
    )

    runs: List[ComponentRun] = []
    try:
        purge_modules(dry_run=cfg.dry_run)

        if environment_ready(paths):
            console.info("Activating existing conda environment...")
        else:
            console.info("Installing Miniforge3...")
        env_name = bootstrap_environment(paths, dry_run=cfg.dry_run)
        tool_env = activate_environment(paths, env_name)

        for name in cfg.components:
            ctx = ComponentCtx(cfg=cfg, spec=cfg.release.component(name), tool_env=tool_env.vars)
            logger.info("=== Component: %s -> %s ===", name, ctx.prefix)
            record = ComponentRun(component=name)
            runs.append(record)
            run_component(ctx, build_steps(), record=record)
        return runs
    except Exception:
        logger.exception("Installer failed")
        raise
    finally:
        logger.info("Component states: %s", summarize_states(runs))


def summarize(cfg: BuildConfig, runs: Sequence[ComponentRun]) -> str:
    installed = ", ".join(
        f"{cfg.release.component(r.component).title} at {cfg.install_prefix_for(r.component)}"
        for r in runs
    )
    return f"Installation completed successfully ({cfg.build_type.label}): {installed}."


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    try:
        cfg = parse_args(argv)
    except HelpRequested:
        console.plain(usage_text(argv))
        return 1
    except UsageError as e:
        console.error(str(e))
        console.plain(usage_text(argv), err=True)
        return 1

    try:
        runs = run(cfg)
    except MissingInputError as e:
        console.error(str(e))
        if e.hint:
            console.warn(e.hint)
        return 1
    except InstallerError as e:
        console.error(str(e))
        return 1
    except OSError as e:
        # Filesystem trouble in the work dir (permissions, full disk).
        console.error(str(e))
        return 1
    except KeyboardInterrupt:
        return 130

    console.success(summarize(cfg, runs))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
