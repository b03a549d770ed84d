"""Pydantic schemas for persisted orchestrator runs."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class StepStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    DONE = "done"
    SKIPPED = "skipped"


class RunMode(str, enum.Enum):
    """How a run's steps were chosen from its target."""

    FULL = "full"
    TARGETED = "targeted"
    SINGLE = "single"


class RunStatus(str, enum.Enum):
    """Lifecycle of a run.

    ``ready`` means the next ``advance`` may execute a step. ``awaiting_checkpoint``
    and ``halted`` both wait for a user directive; ``completed`` and ``aborted``
    are terminal.
    """

    READY = "ready"
    AWAITING_CHECKPOINT = "awaiting_checkpoint"
    HALTED = "halted"
    COMPLETED = "completed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.ABORTED)

    @property
    def awaits_directive(self) -> bool:
        return self in (RunStatus.AWAITING_CHECKPOINT, RunStatus.HALTED)


class WorkflowStepModel(BaseModel):
    """Schema for one step of a persisted run."""

    model_config = ConfigDict(populate_by_name=True)

    position: int = Field(..., alias="position", ge=1)
    skill: str = Field(..., alias="skill")
    status: StepStatus = Field(StepStatus.PENDING, alias="status")
    error: Optional[str] = Field(None, alias="error")
    output: dict[str, Any] = Field(default_factory=dict, alias="output")


class WorkflowRunModel(BaseModel):
    """Full representation of a run as stored on disk and printed by the CLI."""

    model_config = ConfigDict(populate_by_name=True)

    run_id: str = Field(..., alias="runId")
    target: str = Field(..., alias="target")
    status: RunStatus = Field(RunStatus.READY, alias="status")
    mode: RunMode = Field(RunMode.FULL, alias="mode")
    user_input: Optional[str] = Field(None, alias="userInput")
    current_index: int = Field(0, alias="currentIndex", ge=0)
    auto_accept: bool = Field(False, alias="autoAccept")
    checkpoint_count: int = Field(0, alias="checkpointCount", ge=0)
    steps: list[WorkflowStepModel] = Field(default_factory=list, alias="steps")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


__all__ = [
    "RunMode",
    "RunStatus",
    "StepStatus",
    "WorkflowRunModel",
    "WorkflowStepModel",
]
