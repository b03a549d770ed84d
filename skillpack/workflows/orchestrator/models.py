"""Run and step state for orchestrator workflows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from skillpack.schemas.run_models import RunMode, RunStatus, StepStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class WorkflowStep:
    position: int
    skill: str
    status: StepStatus = StepStatus.PENDING
    error: Optional[str] = None
    output: dict[str, Any] = field(default_factory=dict)

    @property
    def is_settled(self) -> bool:
        return self.status in (StepStatus.DONE, StepStatus.SKIPPED)


@dataclass(slots=True)
class WorkflowRun:
    """Resumable state of one orchestrator run.

    Only the orchestrator mutates a run. Nothing is shared between runs.
    """

    target: str
    steps: list[WorkflowStep]
    run_id: str = field(default_factory=lambda: uuid4().hex)
    current_index: int = 0
    auto_accept: bool = False
    status: RunStatus = RunStatus.READY
    mode: RunMode = RunMode.FULL
    user_input: Optional[str] = None
    checkpoint_count: int = 0
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def current_step(self) -> Optional[WorkflowStep]:
        if 0 <= self.current_index < len(self.steps):
            return self.steps[self.current_index]
        return None

    @property
    def remaining_steps(self) -> list[WorkflowStep]:
        return [step for step in self.steps if not step.is_settled]

    def names_with_status(self, status: StepStatus) -> list[str]:
        return [step.skill for step in self.steps if step.status == status]

    def touch(self) -> None:
        self.updated_at = _utcnow()


@dataclass(frozen=True, slots=True)
class StepResult:
    """Outcome of one ``advance`` call."""

    run_id: str
    position: int
    skill: str
    output: dict[str, Any]
    paused: bool
    completed: bool
    message: Optional[str] = None


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Final report for a run. ``details`` holds the family-specific fields."""

    run_id: str
    target: str
    status: RunStatus
    mode: RunMode
    completed: list[str]
    skipped: list[str]
    pending: list[str]
    checkpoints: int
    details: dict[str, Any]

    def to_payload(self) -> dict[str, Any]:
        return {
            "runId": self.run_id,
            "target": self.target,
            "status": self.status.value,
            "mode": self.mode.value,
            "completed": list(self.completed),
            "skipped": list(self.skipped),
            "pending": list(self.pending),
            "checkpoints": self.checkpoints,
            "details": dict(self.details),
        }


__all__ = [
    "RunMode",
    "RunStatus",
    "RunSummary",
    "StepResult",
    "StepStatus",
    "WorkflowRun",
    "WorkflowStep",
]
