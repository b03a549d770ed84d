"""Checkpoint-gated orchestration of sub-skills."""

from .dispatcher import (
    CallableDispatcher,
    CompletionSignal,
    DispatchError,
    HandoffDispatcher,
    SkillDispatcher,
)
from .gate import (
    CheckpointGate,
    Directive,
    DirectiveError,
    DirectiveKind,
    GateDecision,
    parse_directive,
)
from .models import (
    RunMode,
    RunStatus,
    RunSummary,
    StepResult,
    StepStatus,
    WorkflowRun,
    WorkflowStep,
)
from .services import (
    CheckpointPendingError,
    Orchestrator,
    OrchestratorError,
    RunClosedError,
)
from .storage import RunStore, RunStoreError

__all__ = [
    "CallableDispatcher",
    "CheckpointGate",
    "CheckpointPendingError",
    "CompletionSignal",
    "Directive",
    "DirectiveError",
    "DirectiveKind",
    "DispatchError",
    "GateDecision",
    "HandoffDispatcher",
    "Orchestrator",
    "OrchestratorError",
    "RunClosedError",
    "RunMode",
    "RunStatus",
    "RunStore",
    "RunStoreError",
    "RunSummary",
    "SkillDispatcher",
    "StepResult",
    "StepStatus",
    "WorkflowRun",
    "WorkflowStep",
]
