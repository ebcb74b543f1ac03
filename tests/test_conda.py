from __future__ import annotations

import os
from pathlib import Path

import pytest

import amber_installer.lib.conda as conda_module
from amber_installer.errors import ExternalToolError, MissingInputError
from amber_installer.lib.conda import (
    activate_environment,
    bootstrap_environment,
    environment_name,
    environment_ready,
)
from amber_installer.lib.env import Paths

INSTALLER = "Miniforge3-Linux-x86_64.sh"


@pytest.fixture
def paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Paths:
    monkeypatch.setattr(conda_module.platform, "system", lambda: "Linux")
    monkeypatch.setattr(conda_module.platform, "machine", lambda: "x86_64")
    return Paths(work_dir=tmp_path)


def _env_file(paths: Paths, text: str = "name: amber-installer\n") -> None:
    paths.env_file.write_text(text, encoding="utf-8")


def test_missing_env_file_is_reported_before_download(paths: Paths, commands):
    with pytest.raises(MissingInputError, match="env.yml not found"):
        bootstrap_environment(paths)
    assert commands.calls == []


def test_fresh_bootstrap_downloads_installs_and_creates_env(paths: Paths, commands):
    _env_file(paths)
    assert not environment_ready(paths)

    name = bootstrap_environment(paths)

    assert name == "amber-installer"
    assert commands.programs() == ["curl", "bash", "conda"]
    curl, bash, conda = commands.calls
    assert curl.argv == [
        "curl",
        "-L",
        "-O",
        f"https://github.com/conda-forge/miniforge/releases/latest/download/{INSTALLER}",
    ]
    assert bash.argv == ["bash", INSTALLER, "-b", "-p", "miniforge3"]
    assert conda.argv[0] == str((paths.miniforge_dir / "bin" / "conda").absolute())
    assert conda.argv[1:] == ["env", "create", "-f", "env.yml"]
    assert {c.cwd for c in commands.calls} == {str(paths.work_dir)}


def test_downloaded_installer_is_reused(paths: Paths, commands):
    _env_file(paths)
    (paths.work_dir / INSTALLER).write_text("#!/bin/sh\n", encoding="utf-8")

    bootstrap_environment(paths)

    assert commands.programs() == ["bash", "conda"]


def test_existing_environment_is_reused(paths: Paths, commands):
    _env_file(paths)
    (paths.miniforge_dir / "envs" / "amber-installer").mkdir(parents=True)

    assert environment_ready(paths)
    assert bootstrap_environment(paths) == "amber-installer"
    assert commands.calls == []


def test_missing_named_env_is_created_in_existing_miniforge(paths: Paths, commands):
    _env_file(paths, "name: amber-dev\n")
    paths.miniforge_dir.mkdir()

    assert bootstrap_environment(paths) == "amber-dev"
    assert commands.programs() == ["conda"]


def test_failed_installer_is_fatal(paths: Paths, commands):
    _env_file(paths)
    commands.returncodes["bash"] = 1

    with pytest.raises(ExternalToolError):
        bootstrap_environment(paths)
    assert commands.programs() == ["curl", "bash"]


def test_env_name_defaults_when_file_has_none(paths: Paths):
    _env_file(paths, "channels:\n  - conda-forge\n")
    assert environment_name(paths) == "amber-installer"


def test_env_file_must_be_a_mapping(paths: Paths):
    _env_file(paths, "- cmake\n- make\n")
    with pytest.raises(MissingInputError, match="not a valid environment file"):
        environment_name(paths)


def test_activation_puts_env_bin_first(paths: Paths, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PATH", "/usr/bin")
    env = activate_environment(paths, "amber-installer")

    prefix = (paths.miniforge_dir / "envs" / "amber-installer").absolute()
    assert env.prefix == prefix
    assert env.vars["PATH"].split(os.pathsep) == [
        str(prefix / "bin"),
        str((paths.miniforge_dir / "bin").absolute()),
        "/usr/bin",
    ]
    assert env.vars["CONDA_PREFIX"] == str(prefix)
    assert env.vars["CONDA_DEFAULT_ENV"] == "amber-installer"
