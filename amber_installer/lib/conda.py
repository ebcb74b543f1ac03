from __future__ import annotations

import logging
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

import yaml

from .. import console
from ..errors import MissingInputError
from .command import run_cmd
from .env import PATHS, Paths
from .manifests import load_yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolEnv:
    """Variables that make the activated environment visible to child processes."""

    name: str
    prefix: Path
    vars: Dict[str, str] = field(default_factory=dict)


def miniforge_installer_name() -> str:
    # Same naming as "Miniforge3-$(uname)-$(uname -m).sh"
    return f"Miniforge3-{platform.system()}-{platform.machine()}.sh"


def environment_ready(paths: Paths = PATHS) -> bool:
    return paths.miniforge_dir.is_dir()


def environment_name(paths: Paths = PATHS) -> str:
    try:
        raw = load_yaml(paths.env_file)
    except (ValueError, yaml.YAMLError) as e:
        raise MissingInputError(f"{paths.env_file} is not a valid environment file: {e}") from e
    return str(raw.get("name") or paths.default_env_name)


def environment_prefix(paths: Paths, name: str) -> Path:
    return paths.miniforge_dir / "envs" / name


def bootstrap_environment(paths: Paths = PATHS, *, dry_run: bool = False) -> str:
    """Install Miniforge3 and create the build environment unless already present.

    Returns the environment name (taken from the env file).
    """

    if not paths.env_file.is_file():
        raise MissingInputError(
            f"{paths.env_file_name} not found in {paths.work_dir}",
            hint=f"Run the installer from the directory that contains {paths.env_file_name}.",
        )
    name = environment_name(paths)
    cwd = str(paths.work_dir)

    if environment_ready(paths):
        logger.info("%s already exists, skipping Miniforge3 installation", paths.miniforge_dir)
    else:
        installer = paths.work_dir / miniforge_installer_name()
        if installer.is_file():
            logger.info("Reusing downloaded installer %s", installer)
        else:
            run_cmd(
                ["curl", "-L", "-O", f"{paths.miniforge_url}/{installer.name}"],
                cwd=cwd,
                dry_run=dry_run,
            )
        run_cmd(["bash", installer.name, "-b", "-p", paths.miniforge_dir_name], cwd=cwd, dry_run=dry_run)

    if environment_prefix(paths, name).is_dir():
        logger.info("Conda environment %s already exists", name)
    else:
        console.info(f"Creating conda environment '{name}'...")
        conda = (paths.miniforge_dir / "bin" / "conda").absolute()
        run_cmd([str(conda), "env", "create", "-f", paths.env_file_name], cwd=cwd, dry_run=dry_run)

    return name


def activate_environment(paths: Paths, name: str) -> ToolEnv:
    """Equivalent of ``source miniforge3/bin/activate && conda activate <name>``.

    Nothing in this process is modified; callers pass ``ToolEnv.vars`` to every
    command that has to see the environment.
    """

    prefix = environment_prefix(paths, name).absolute()
    if not prefix.is_dir():
        logger.warning("Conda environment prefix %s does not exist", prefix)

    base_bin = (paths.miniforge_dir / "bin").absolute()
    search = [str(prefix / "bin"), str(base_bin)]
    if os.environ.get("PATH"):
        search.append(os.environ["PATH"])

    return ToolEnv(
        name=name,
        prefix=prefix,
        vars={
            "PATH": os.pathsep.join(search),
            "CONDA_PREFIX": str(prefix),
            "CONDA_DEFAULT_ENV": name,
        },
    )
