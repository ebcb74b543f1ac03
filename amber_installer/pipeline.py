from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Sequence

from .build_config import BuildConfig
from .lib.manifests import ComponentSpec

logger = logging.getLogger(__name__)


class ComponentState(Enum):
    NOT_STARTED = "not_started"
    VERIFIED = "verified"
    EXTRACTED = "extracted"
    PATCHED = "patched"
    CONFIGURED = "configured"
    BUILT = "built"
    INSTALLED = "installed"
    FAILED = "failed"


@dataclass(frozen=True)
class ComponentCtx:
    cfg: BuildConfig
    spec: ComponentSpec
    tool_env: Mapping[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def dry_run(self) -> bool:
        return self.cfg.dry_run

    @property
    def work_dir(self) -> Path:
        return self.cfg.work_dir

    @property
    def archives(self) -> List[Path]:
        return [self.work_dir / a for a in self.spec.archives]

    @property
    def source_dir(self) -> Path:
        return self.work_dir / self.spec.source_dir

    @property
    def build_dir(self) -> Path:
        return self.source_dir / "build"

    @property
    def prefix(self) -> Path:
        return self.cfg.install_prefix_for(self.spec.name)


class Step(Protocol):
    """One transition of a component's build."""

    step_id: str
    reaches: Optional[ComponentState]

    def skip_reason(self, ctx: ComponentCtx) -> Optional[str]:
        ...

    def run(self, ctx: ComponentCtx) -> None:
        ...


class ComponentStep:
    """Base for steps: always runs, does not move the state."""

    step_id = ""
    reaches: Optional[ComponentState] = None

    def skip_reason(self, ctx: ComponentCtx) -> Optional[str]:
        return None

    def run(self, ctx: ComponentCtx) -> None:
        raise NotImplementedError


@dataclass
class ComponentRun:
    component: str
    state: ComponentState = ComponentState.NOT_STARTED
    ran_steps: List[str] = field(default_factory=list)
    skipped_steps: List[str] = field(default_factory=list)
    history: List[ComponentState] = field(default_factory=list)

    def advance(self, state: ComponentState) -> None:
        if state != self.state:
            self.history.append(self.state)
            self.state = state


def run_component(
    ctx: ComponentCtx,
    steps: Sequence[Step],
    *,
    record: Optional[ComponentRun] = None,
) -> ComponentRun:
    """Run one component's steps in order. The first failure is fatal.

    On failure the record (if one was passed in) is left in FAILED and the
    original exception propagates.
    """

    rec = record if record is not None else ComponentRun(component=ctx.name)

    for step in steps:
        try:
            reason = step.skip_reason(ctx)
            if reason:
                logger.info("[%s] skip %s (%s)", ctx.name, step.step_id, reason)
                rec.skipped_steps.append(step.step_id)
            else:
                logger.info("[%s] run %s", ctx.name, step.step_id)
                step.run(ctx)
                rec.ran_steps.append(step.step_id)
        except BaseException:
            logger.error("[%s] %s failed (state was %s)", ctx.name, step.step_id, rec.state.value)
            rec.advance(ComponentState.FAILED)
            raise

        if step.reaches is not None:
            rec.advance(step.reaches)

    return rec


def summarize_states(runs: Sequence[ComponentRun]) -> Dict[str, str]:
    return {r.component: r.state.value for r in runs}
