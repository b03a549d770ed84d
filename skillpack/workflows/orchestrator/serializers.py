"""Conversion between in-memory runs and their pydantic schemas."""

from __future__ import annotations

from typing import Any

from skillpack.schemas.run_models import WorkflowRunModel, WorkflowStepModel

from .models import WorkflowRun, WorkflowStep


def serialize_run(run: WorkflowRun) -> WorkflowRunModel:
    return WorkflowRunModel(
        run_id=run.run_id,
        target=run.target,
        status=run.status,
        mode=run.mode,
        user_input=run.user_input,
        current_index=run.current_index,
        auto_accept=run.auto_accept,
        checkpoint_count=run.checkpoint_count,
        steps=[
            WorkflowStepModel(
                position=step.position,
                skill=step.skill,
                status=step.status,
                error=step.error,
                output=dict(step.output),
            )
            for step in run.steps
        ],
        created_at=run.created_at,
        updated_at=run.updated_at,
    )


def deserialize_run(model: WorkflowRunModel) -> WorkflowRun:
    return WorkflowRun(
        target=model.target,
        steps=[
            WorkflowStep(
                position=step.position,
                skill=step.skill,
                status=step.status,
                error=step.error,
                output=dict(step.output),
            )
            for step in sorted(model.steps, key=lambda item: item.position)
        ],
        run_id=model.run_id,
        current_index=model.current_index,
        auto_accept=model.auto_accept,
        status=model.status,
        mode=model.mode,
        user_input=model.user_input,
        checkpoint_count=model.checkpoint_count,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def run_to_payload(run: WorkflowRun) -> dict[str, Any]:
    """Return the camelCase JSON payload used on disk and by ``run status``."""

    return serialize_run(run).model_dump(mode="json", by_alias=True)


__all__ = ["deserialize_run", "run_to_payload", "serialize_run"]
