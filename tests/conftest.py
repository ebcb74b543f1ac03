"""Pytest configuration for installer tests."""
from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

import amber_installer.lib.command as command_module


@dataclass
class RecordedCall:
    argv: List[str]
    cwd: Optional[str]
    env: Optional[Dict[str, str]]


@dataclass
class CommandRecorder:
    """Stands in for subprocess.run; records argv/cwd and fakes exit codes."""

    calls: List[RecordedCall] = field(default_factory=list)
    returncodes: Dict[str, int] = field(default_factory=dict)
    stdout: Dict[str, str] = field(default_factory=dict)
    hooks: Dict[str, Callable[[List[str], Optional[str]], None]] = field(default_factory=dict)

    @staticmethod
    def key(argv: List[str]) -> str:
        return " ".join(argv[:2]) if argv[0] == "make" else Path(argv[0]).name

    def __call__(self, argv, **kwargs):
        argv = list(argv)
        cwd = kwargs.get("cwd")
        self.calls.append(RecordedCall(argv=argv, cwd=cwd, env=kwargs.get("env")))
        key = self.key(argv)
        if key in self.hooks:
            self.hooks[key](argv, cwd)
        out = self.stdout.get(key, "") if kwargs.get("stdout") == subprocess.PIPE else None
        return subprocess.CompletedProcess(argv, self.returncodes.get(key, 0), stdout=out, stderr=None)

    @property
    def argvs(self) -> List[List[str]]:
        return [c.argv for c in self.calls]

    def programs(self) -> List[str]:
        return [self.key(c.argv) for c in self.calls]


@pytest.fixture
def commands(monkeypatch: pytest.MonkeyPatch) -> CommandRecorder:
    rec = CommandRecorder()
    monkeypatch.setattr(command_module.subprocess, "run", rec)
    return rec


@pytest.fixture(autouse=True)
def _no_lmod(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("LMOD_CMD", raising=False)


@pytest.fixture(autouse=True)
def _isolated_logging():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    for h in list(root.handlers):
        if h in before or type(h).__module__.startswith("_pytest"):
            continue
        root.removeHandler(h)
        h.close()
    root.setLevel(level)
    for attr in ("_amber_configured", "_amber_log_path"):
        if hasattr(root, attr):
            delattr(root, attr)


QUICK_CMAKELISTS = """\
cmake_minimum_required(VERSION 3.12)
project(QUICK)
set(CMAKE_C_FLAGS "")
set(CMAKE_CXX_FLAGS "")
set(CMAKE_Fortran_FLAGS "")
add_subdirectory(src)
"""


def make_source_tree(root: Path, source_dir: str, *, quick: bool = True) -> Path:
    src = root / source_dir
    src.mkdir(parents=True, exist_ok=True)
    (src / "update_amber").write_text("#!/bin/sh\n", encoding="utf-8")
    if quick:
        target = src / "AmberTools/src/quick/CMakeLists.txt"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(QUICK_CMAKELISTS, encoding="utf-8")
    return src


@pytest.fixture
def source_tree() -> Callable[..., Path]:
    return make_source_tree
