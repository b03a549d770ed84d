"""Orchestrator service driving checkpoint-gated skill workflows."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from skillpack.workflows.skills.registry import SkillRegistry
from skillpack.workflows.skills.resolver import select_steps

from .dispatcher import DispatchError, SkillDispatcher
from .gate import CheckpointGate, Directive, DirectiveKind, GateDecision
from .models import (
    RunStatus,
    RunSummary,
    StepResult,
    StepStatus,
    WorkflowRun,
    WorkflowStep,
)

logger = logging.getLogger(__name__)


class OrchestratorError(RuntimeError):
    """Raised when a run is driven out of order."""


class CheckpointPendingError(OrchestratorError):
    """Raised when ``advance`` is called while a run waits for a directive."""


class RunClosedError(OrchestratorError):
    """Raised when a completed or aborted run is driven further."""


def _log_extra(run: WorkflowRun, **fields: Any) -> dict[str, Any]:
    return {"run_id": run.run_id, "target": run.target, **fields}


def _first_pending_index(steps: list[WorkflowStep]) -> int:
    for index, step in enumerate(steps):
        if step.status is StepStatus.PENDING:
            return index
    return len(steps)


class Orchestrator:
    """Builds runs for a target skill and moves them forward one step at a time.

    A run is a plain state object. Between steps it either waits for a user
    directive (``awaiting_checkpoint``) or is ready to advance; callers resume
    it whenever the directive arrives, possibly from another process after the
    run has been persisted.
    """

    def __init__(
        self,
        registry: SkillRegistry,
        dispatcher: SkillDispatcher,
        *,
        gate: Optional[CheckpointGate] = None,
        auto_accept_default: bool = False,
    ) -> None:
        self._registry = registry
        self._dispatcher = dispatcher
        self._gate = gate or CheckpointGate(registry)
        self._auto_accept_default = auto_accept_default

    @property
    def registry(self) -> SkillRegistry:
        return self._registry

    def start(
        self,
        target: str,
        user_input: Optional[str] = None,
        *,
        auto_accept: Optional[bool] = None,
    ) -> WorkflowRun:
        selection = select_steps(self._registry, target, user_input)
        steps = [
            WorkflowStep(position=index, skill=name)
            for index, name in enumerate(selection.names, start=1)
        ]
        run = WorkflowRun(
            target=target,
            steps=steps,
            auto_accept=(
                self._auto_accept_default if auto_accept is None else auto_accept
            ),
            mode=selection.mode,
            user_input=user_input,
        )
        logger.info(
            "Started %s run for %s with %d step(s)",
            run.mode.value,
            target,
            len(steps),
            extra=_log_extra(run, steps=selection.names),
        )
        return run

    def advance(self, run: WorkflowRun) -> StepResult:
        """Execute the current pending step and move the run forward."""

        if run.status.is_terminal:
            raise RunClosedError(f"Run {run.run_id} is {run.status.value}")
        if run.status.awaits_directive:
            raise CheckpointPendingError(
                f"Run {run.run_id} is {run.status.value}; "
                "apply a directive before advancing"
            )

        step = run.current_step
        if step is None or step.status is not StepStatus.PENDING:
            raise OrchestratorError(f"Run {run.run_id} has no pending step")

        skill = self._registry.resolve(step.skill)
        step.status = StepStatus.ACTIVE
        step.error = None
        context = {
            "run_id": run.run_id,
            "target": run.target,
            "position": step.position,
            "user_input": run.user_input,
            "completed": run.names_with_status(StepStatus.DONE),
        }

        try:
            signal = self._dispatcher.invoke(skill, context)
        except Exception as exc:
            error = (
                exc
                if isinstance(exc, DispatchError)
                else DispatchError("dispatch_failed", f"Skill '{skill.name}' failed: {exc}")
            )
            step.status = StepStatus.PENDING
            step.error = str(error)
            run.status = RunStatus.HALTED
            run.touch()
            logger.warning(
                "Step %d (%s) failed: %s",
                step.position,
                skill.name,
                error,
                extra=_log_extra(run, skill=skill.name, code=error.code),
            )
            if error is exc:
                raise
            raise error from exc

        step.status = StepStatus.DONE
        step.output = dict(signal.output)
        run.current_index = _first_pending_index(run.steps)

        target_skill = self._registry.resolve(run.target)
        if run.current_step is None:
            run.status = RunStatus.COMPLETED
        elif run.auto_accept or not target_skill.checkpoints:
            run.status = RunStatus.READY
        else:
            run.status = RunStatus.AWAITING_CHECKPOINT
            run.checkpoint_count += 1
        run.touch()

        logger.info(
            "Step %d (%s) done; run is %s",
            step.position,
            skill.name,
            run.status.value,
            extra=_log_extra(run, skill=skill.name),
        )
        return StepResult(
            run_id=run.run_id,
            position=step.position,
            skill=skill.name,
            output=dict(step.output),
            paused=run.status is RunStatus.AWAITING_CHECKPOINT,
            completed=run.status is RunStatus.COMPLETED,
            message=signal.message,
        )

    def apply_directive(
        self, run: WorkflowRun, directive: Directive | str
    ) -> GateDecision:
        """Evaluate ``directive`` at a checkpoint or halt and apply the decision.

        The run is left untouched when the directive is rejected.
        """

        if run.status.is_terminal:
            raise RunClosedError(f"Run {run.run_id} is {run.status.value}")
        if not run.status.awaits_directive:
            raise OrchestratorError(f"Run {run.run_id} is not waiting for a directive")

        decision = self._gate.evaluate(directive)

        if decision.kind is DirectiveKind.ABORT:
            self.abort(run)
            return decision
        if decision.kind is DirectiveKind.ADJUST:
            self._replace_remaining(run, decision.replacement or ())
        if decision.set_auto_accept:
            run.auto_accept = True

        run.current_index = _first_pending_index(run.steps)
        run.status = RunStatus.COMPLETED if run.current_step is None else RunStatus.READY
        run.touch()
        logger.info(
            "Applied %s directive",
            decision.kind.value,
            extra=_log_extra(run, directive=decision.kind.value),
        )
        return decision

    def abort(self, run: WorkflowRun) -> None:
        """End the run. Finished steps stay finished."""

        if run.status.is_terminal:
            raise RunClosedError(f"Run {run.run_id} is {run.status.value}")
        run.status = RunStatus.ABORTED
        run.touch()
        logger.info("Run aborted", extra=_log_extra(run))

    def _replace_remaining(self, run: WorkflowRun, names: tuple[str, ...]) -> None:
        settled = [step for step in run.steps if step.is_settled]
        remaining = [step for step in run.steps if not step.is_settled]
        done = set(run.names_with_status(StepStatus.DONE))
        wanted = [name for name in names if name not in done]

        kept = [step for step in remaining if step.skill in wanted]
        planned = {step.skill for step in remaining}
        added = [WorkflowStep(position=0, skill=name) for name in wanted if name not in planned]
        dropped = [step for step in remaining if step.skill not in wanted]
        for step in dropped:
            step.status = StepStatus.SKIPPED
            step.error = None
        for step in kept:
            step.error = None

        run.steps = settled + dropped + kept + added
        for position, step in enumerate(run.steps, start=1):
            step.position = position

    def summarize(self, run: WorkflowRun) -> RunSummary:
        fields = self._registry.resolve(run.target).summary_fields
        done_steps = [step for step in run.steps if step.status is StepStatus.DONE]

        details: dict[str, Any] = {}
        if fields:
            for step in done_steps:
                for key in fields:
                    if key in step.output:
                        details[key] = step.output[key]
        else:
            details = {step.skill: dict(step.output) for step in done_steps}

        return RunSummary(
            run_id=run.run_id,
            target=run.target,
            status=run.status,
            mode=run.mode,
            completed=[step.skill for step in done_steps],
            skipped=run.names_with_status(StepStatus.SKIPPED),
            pending=[step.skill for step in run.steps if not step.is_settled],
            checkpoints=run.checkpoint_count,
            details=details,
        )

    def run_to_completion(
        self,
        run: WorkflowRun,
        directives: Iterable[Directive | str] = (),
    ) -> RunSummary:
        """Drive ``run`` until it ends, answering checkpoints from ``directives``.

        Checkpoints beyond the supplied directives are confirmed.
        """

        queued = iter(directives)
        while not run.status.is_terminal:
            if run.status.awaits_directive:
                self.apply_directive(run, next(queued, Directive.confirm()))
            else:
                self.advance(run)
        return self.summarize(run)


__all__ = [
    "CheckpointPendingError",
    "Orchestrator",
    "OrchestratorError",
    "RunClosedError",
]
