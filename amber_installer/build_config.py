from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import HelpRequested, UsageError
from .lib.manifests import DEFAULT_RELEASE, Release, load_release

PROG = "amber-installer"


class BuildType(Enum):
    CPU = "cpu"
    GPU = "gpu"
    MPI_CPU = "mpi_cpu"
    MPI_GPU = "mpi_gpu"

    @property
    def flag(self) -> str:
        return f"-{self.value}"

    @property
    def parallel(self) -> bool:
        return self in (BuildType.MPI_CPU, BuildType.MPI_GPU)

    @property
    def accelerator(self) -> bool:
        return self in (BuildType.GPU, BuildType.MPI_GPU)

    @property
    def label(self) -> str:
        return f"{'parallel' if self.parallel else 'serial'} {'GPU' if self.accelerator else 'CPU'}"


_BUILD_TYPE_HELP = {
    BuildType.CPU: "Build with serial CPU version",
    BuildType.GPU: "Build with serial GPU version",
    BuildType.MPI_CPU: "Build with parallel (MPI) CPU version",
    BuildType.MPI_GPU: "Build with parallel (MPI) GPU version",
}


def detected_cpu_count() -> int:
    try:
        return len(os.sched_getaffinity(0)) or 1
    except AttributeError:
        return os.cpu_count() or 1


@dataclass(frozen=True)
class BuildConfig:
    build_type: BuildType
    release: Release
    components: Tuple[str, ...]
    compile_parallelism: int
    install_prefix: Optional[str] = None
    component_prefixes: Tuple[Tuple[str, str], ...] = ()
    dry_run: bool = False
    verbose: bool = False
    work_dir: Path = Path(".")

    @property
    def parallelism_enabled(self) -> bool:
        return self.build_type.parallel

    @property
    def accelerator_enabled(self) -> bool:
        return self.build_type.accelerator

    def install_prefix_for(self, component: str) -> Path:
        raw = (
            dict(self.component_prefixes).get(component)
            or self.install_prefix
            or self.release.default_prefix
        )
        return Path(os.path.abspath(os.path.expanduser(raw)))


class _Parser(argparse.ArgumentParser):
    """argparse that raises instead of printing and exiting."""

    def error(self, message: str):  # type: ignore[override]
        raise UsageError(message)


class _HelpAction(argparse.Action):
    def __init__(self, option_strings, dest=argparse.SUPPRESS, default=argparse.SUPPRESS, **kwargs):
        kwargs.pop("nargs", None)
        super().__init__(option_strings=option_strings, dest=dest, default=default, nargs=0, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        raise HelpRequested()


_VALUE_FLAGS = ("-path_install", "-nproc", "-release")


def _takes_value(token: str) -> bool:
    return token in _VALUE_FLAGS or token.startswith("-path_")


def _prescan_release(argv: Sequence[str]) -> str:
    # Component flags depend on the release, so it has to be known first.
    release = DEFAULT_RELEASE
    tokens = iter(argv)
    for token in tokens:
        if _takes_value(token):
            value = next(tokens, None)
            if token == "-release" and value is not None:
                release = value
    return release


def _exact_tokens(parser: argparse.ArgumentParser, argv: Sequence[str]) -> List[str]:
    """Check argv against the parser's flags before argparse sees it.

    Only exact flag names are accepted (argparse would otherwise take ``-cp``
    for ``-cpu``). The word after a value flag is always its value, even when
    it starts with ``-``; the pair is handed on as ``flag=value``. Help wins
    over an unknown token anywhere on the line.
    """

    known = parser._option_string_actions
    out: List[str] = []
    unknown: Optional[str] = None
    wants_help = False

    i = 0
    while i < len(argv):
        token = argv[i]
        action = known.get(token)
        if action is not None and action.nargs is None and i + 1 < len(argv):
            out.append(f"{token}={argv[i + 1]}")
            i += 2
            continue
        if action is None:
            if unknown is None:
                unknown = token
        elif isinstance(action, _HelpAction):
            wants_help = True
        out.append(token)
        i += 1

    if wants_help:
        raise HelpRequested()
    if unknown is not None:
        raise UsageError(f"Unknown argument: {unknown}")
    return out


def build_parser(release: Release) -> argparse.ArgumentParser:
    p = _Parser(
        prog=PROG,
        add_help=False,
        allow_abbrev=False,
        description=f"Build and install {release.title} from the vendor source archives.",
        epilog=_example(release),
    )
    p.add_argument("-h", "--help", action=_HelpAction, help="Show this help message")

    g = p.add_argument_group("build type (choose exactly one)")
    for bt in BuildType:
        g.add_argument(bt.flag, dest="build_types", action="append_const", const=bt, help=_BUILD_TYPE_HELP[bt])

    if release.selectable:
        g = p.add_argument_group("components (choose at least one)")
        for c in release.selectable:
            g.add_argument(f"-{c.name}", dest="components", action="append_const", const=c.name, help=f"Build {c.title}")

    g = p.add_argument_group("options")
    g.add_argument(
        "-path_install",
        metavar="PATH",
        default=None,
        help=f"Installation prefix (default: {release.default_prefix})",
    )
    for c in release.selectable:
        g.add_argument(
            f"-path_{c.name}",
            dest=f"path__{c.name}",
            metavar="PATH",
            default=None,
            help=f"Installation prefix for {c.title} (overrides -path_install)",
        )
    g.add_argument(
        "-nproc",
        type=int,
        metavar="N",
        default=None,
        help="Number of CPU cores for compilation (default: all cores)",
    )
    g.add_argument("-release", metavar="NAME|FILE", default=release.name, help=f"Release profile (default: {DEFAULT_RELEASE})")
    g.add_argument("-dry_run", action="store_true", help="Log the commands without running them")
    g.add_argument("-verbose", action="store_true", help="Echo the detailed log to the console")
    return p


def _example(release: Release) -> str:
    words = [PROG, BuildType.GPU.flag]
    words += [f"-{c.name}" for c in release.selectable[:1]]
    words += ["-path_install", f"/opt/{release.name}"]
    return "Example: " + " ".join(words)


def usage_text(argv: Sequence[str] = ()) -> str:
    """Help text for the release selected by ``argv`` (default release otherwise)."""

    try:
        release = load_release(_prescan_release(argv))
    except UsageError:
        release = load_release(DEFAULT_RELEASE)
    return build_parser(release).format_help()


def parse_args(argv: Sequence[str], *, work_dir: Path | str = ".") -> BuildConfig:
    """Resolve the argument vector into a validated BuildConfig.

    Raises UsageError (HelpRequested for -h/--help). Nothing is executed and
    nothing is written while parsing.
    """

    argv = list(argv)
    release = load_release(_prescan_release(argv))
    parser = build_parser(release)

    ns = parser.parse_args(_exact_tokens(parser, argv))

    build_types = set(ns.build_types or [])
    if len(build_types) != 1:
        raise UsageError(
            "Choose one build type (" + ", ".join(bt.flag for bt in BuildType) + ")"
        )
    (build_type,) = build_types

    if release.selectable:
        chosen = set(ns.components or [])
        components = tuple(c.name for c in release.selectable if c.name in chosen)
        if not components:
            raise UsageError(
                "Choose at least one of " + " or ".join(f"-{c.name}" for c in release.selectable)
            )
    else:
        components = tuple(c.name for c in release.components)

    if ns.nproc is None:
        nproc = detected_cpu_count()
    elif ns.nproc < 1:
        raise UsageError(f"-nproc must be a positive integer, got {ns.nproc}")
    else:
        nproc = ns.nproc

    prefixes: Dict[str, str] = {}
    for c in release.selectable:
        value = getattr(ns, f"path__{c.name}")
        if value:
            prefixes[c.name] = value

    return BuildConfig(
        build_type=build_type,
        release=release,
        components=components,
        compile_parallelism=nproc,
        install_prefix=ns.path_install,
        component_prefixes=tuple(prefixes.items()),
        dry_run=bool(ns.dry_run),
        verbose=bool(ns.verbose),
        work_dir=Path(work_dir),
    )
