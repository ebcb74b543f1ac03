from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Mapping, Tuple, Union


def cmake_value(value: Any) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


def cmake_define(name: str, value: Any) -> str:
    return f"-D{name}={cmake_value(value)}"


def configure_argv(
    *,
    prefix: Path,
    compiler: str,
    mpi: bool,
    cuda: bool,
    options: Union[Mapping[str, Any], Iterable[Tuple[str, Any]]],
    source: str = "..",
) -> List[str]:
    argv = [
        "cmake",
        source,
        cmake_define("CMAKE_INSTALL_PREFIX", prefix),
        cmake_define("COMPILER", compiler),
        cmake_define("MPI", mpi),
        cmake_define("CUDA", cuda),
    ]
    argv += [cmake_define(k, v) for k, v in dict(options).items()]
    return argv


def has_stale_cache(build_dir: Path) -> bool:
    return (build_dir / "CMakeFiles").is_dir()


def make_argv(*targets: str, jobs: int | None = None) -> List[str]:
    argv = ["make"]
    if jobs is not None:
        argv.append(f"-j{jobs}")
    argv += list(targets)
    return argv
