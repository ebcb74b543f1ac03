from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..errors import UsageError

DEFAULT_RELEASE = "amber25"


@dataclass(frozen=True)
class PatchSpec:
    path: str
    comment_out: Tuple[str, ...]


@dataclass(frozen=True)
class ComponentSpec:
    name: str
    title: str
    archives: Tuple[str, ...]
    source_dir: str
    selectable: bool = True
    patches: Tuple[PatchSpec, ...] = ()
    cmake_options: Tuple[Tuple[str, Any], ...] = ()


@dataclass(frozen=True)
class Release:
    name: str
    title: str
    default_prefix: str
    download_url: str
    compiler: str
    components: Tuple[ComponentSpec, ...]

    @property
    def selectable(self) -> List[ComponentSpec]:
        return [c for c in self.components if c.selectable]

    def component(self, name: str) -> ComponentSpec:
        for c in self.components:
            if c.name == name:
                return c
        raise KeyError(name)


def _manifest_root() -> Path:
    # amber_installer/lib/manifests.py -> amber_installer/manifests
    return Path(__file__).resolve().parents[1] / "manifests"


def available_releases() -> List[str]:
    return sorted(p.stem for p in (_manifest_root() / "releases").glob("*.yaml"))


def load_yaml(path: Path) -> Dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {path}")
    return data


def _parse_component(raw: Dict[str, Any]) -> ComponentSpec:
    name = str(raw["name"])
    return ComponentSpec(
        name=name,
        title=str(raw.get("title") or name),
        archives=tuple(str(a) for a in (raw.get("archives") or [])),
        source_dir=str(raw["source_dir"]),
        selectable=bool(raw.get("selectable", True)),
        patches=tuple(
            PatchSpec(path=str(p["path"]), comment_out=tuple(str(s) for s in p.get("comment_out") or []))
            for p in raw.get("patches") or []
        ),
        cmake_options=tuple((str(k), v) for k, v in (raw.get("cmake_options") or {}).items()),
    )


def release_from_dict(raw: Dict[str, Any], *, default_name: Optional[str] = None) -> Release:
    components = tuple(_parse_component(c) for c in raw.get("components") or [])
    if not components:
        raise ValueError("Release manifest defines no components")

    implicit = [c for c in components if not c.selectable]
    if implicit and len(components) > 1:
        raise ValueError("A release with an implicit component cannot define other components")

    name = str(raw.get("name") or default_name or "custom")
    return Release(
        name=name,
        title=str(raw.get("title") or name),
        default_prefix=str(raw.get("default_prefix") or f"~/{name}"),
        download_url=str(raw.get("download_url") or "https://ambermd.org/GetAmber.php"),
        compiler=str(raw.get("compiler") or "GNU"),
        components=components,
    )


def load_release(name_or_path: str = DEFAULT_RELEASE) -> Release:
    """Load a bundled release by name, or a release manifest from a YAML file."""

    p = Path(name_or_path)
    if not (p.suffix.lower() in {".yaml", ".yml"} and p.is_file()):
        p = _manifest_root() / "releases" / f"{name_or_path}.yaml"
        if not p.is_file():
            raise UsageError(
                f"Unknown release: {name_or_path} (available: {', '.join(available_releases())})"
            )

    try:
        return release_from_dict(load_yaml(p), default_name=p.stem)
    except (KeyError, ValueError, OSError, yaml.YAMLError) as e:
        raise UsageError(f"Invalid release manifest {p}: {e}") from e
