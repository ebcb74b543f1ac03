from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Paths:
    """Fixed file names the installer expects in (or creates under) the work dir."""

    work_dir: Path = Path(".")
    miniforge_dir_name: str = "miniforge3"
    env_file_name: str = "env.yml"
    default_env_name: str = "amber-installer"
    log_name: str = "amber-installer.log"
    miniforge_url: str = "https://github.com/conda-forge/miniforge/releases/latest/download"

    @property
    def miniforge_dir(self) -> Path:
        return self.work_dir / self.miniforge_dir_name

    @property
    def env_file(self) -> Path:
        return self.work_dir / self.env_file_name

    @property
    def log_path(self) -> Path:
        return self.work_dir / self.log_name


PATHS = Paths()
