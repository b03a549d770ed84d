"""Command helpers wired into the skillpack CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from skillpack.config.settings import AppSettings, settings as default_settings
from skillpack.pack import (
    RemovedComponent,
    SKILLS_INDEX_FILENAME,
    uninstall_skills_pack,
    write_skills_index,
)
from skillpack.workflows.orchestrator.dispatcher import DispatchError, HandoffDispatcher
from skillpack.workflows.orchestrator.gate import DirectiveError, GateDecision
from skillpack.workflows.orchestrator.models import StepResult, WorkflowRun
from skillpack.workflows.orchestrator.serializers import run_to_payload
from skillpack.workflows.orchestrator.services import Orchestrator, OrchestratorError
from skillpack.workflows.orchestrator.storage import RunStore, RunStoreError
from skillpack.workflows.skills.contracts import Skill
from skillpack.workflows.skills.loader import SkillDocumentError, load_registry
from skillpack.workflows.skills.registry import (
    NotFoundError,
    SkillRegistry,
    SkillRegistryError,
)

logger = logging.getLogger(__name__)


class CliError(RuntimeError):
    """Raised for CLI usage errors."""


@dataclass(slots=True)
class Workspace:
    """Registry, orchestrator and run store assembled from settings."""

    registry: SkillRegistry
    orchestrator: Orchestrator
    store: RunStore


def _load_registry(app_settings: AppSettings) -> SkillRegistry:
    try:
        return load_registry(app_settings)
    except (SkillDocumentError, SkillRegistryError) as exc:
        raise CliError(f"Skill catalog is invalid: {exc}") from exc


def open_workspace(app_settings: AppSettings | None = None) -> Workspace:
    cfg = app_settings or default_settings
    registry = _load_registry(cfg)
    dispatcher = HandoffDispatcher(
        cfg.orchestrator.handoff_root,
        available_tools=cfg.orchestrator.available_tools,
    )
    orchestrator = Orchestrator(
        registry,
        dispatcher,
        auto_accept_default=cfg.orchestrator.auto_accept_default,
    )
    return Workspace(
        registry=registry,
        orchestrator=orchestrator,
        store=RunStore(cfg.orchestrator.runs_root),
    )


def _load_run(workspace: Workspace, run_id: str) -> WorkflowRun:
    try:
        return workspace.store.load(run_id)
    except RunStoreError as exc:
        raise CliError(str(exc)) from exc


def _save_run(workspace: Workspace, run: WorkflowRun) -> None:
    try:
        workspace.store.save(run)
    except RunStoreError as exc:
        raise CliError(str(exc)) from exc


def run_list_skills(app_settings: AppSettings | None = None) -> list[Skill]:
    return list(_load_registry(app_settings or default_settings))


def run_show_skill(name: str, app_settings: AppSettings | None = None) -> dict[str, Any]:
    registry = _load_registry(app_settings or default_settings)
    try:
        skill = registry.resolve(name)
    except NotFoundError as exc:
        raise CliError(str(exc)) from exc
    payload = skill.to_payload()
    payload["body"] = skill.body
    return payload


def run_validate(app_settings: AppSettings | None = None) -> int:
    """Load and validate every configured skill root, returning the skill count."""

    return len(_load_registry(app_settings or default_settings))


def run_write_index(
    output: Path | None = None, app_settings: AppSettings | None = None
) -> Path:
    cfg = app_settings or default_settings
    registry = _load_registry(cfg)
    destination = output or cfg.catalog.claude_home_path / SKILLS_INDEX_FILENAME
    try:
        return write_skills_index(registry, destination)
    except OSError as exc:
        raise CliError(f"Unable to write skills index: {exc}") from exc


def run_start(
    *,
    target: str,
    user_input: str | None = None,
    auto_accept: bool | None = None,
    app_settings: AppSettings | None = None,
) -> WorkflowRun:
    workspace = open_workspace(app_settings)
    try:
        run = workspace.orchestrator.start(target, user_input, auto_accept=auto_accept)
    except NotFoundError as exc:
        raise CliError(str(exc)) from exc
    _save_run(workspace, run)
    return run


def run_advance(
    run_id: str, app_settings: AppSettings | None = None
) -> tuple[WorkflowRun, StepResult]:
    """Advance a stored run by one step.

    The run is saved even when the step fails so the halt is visible to the
    next ``status`` or ``directive`` call.
    """

    workspace = open_workspace(app_settings)
    run = _load_run(workspace, run_id)
    try:
        result = workspace.orchestrator.advance(run)
    except DispatchError as exc:
        _save_run(workspace, run)
        raise CliError(f"Step failed ({exc.code}): {exc}") from exc
    except (NotFoundError, OrchestratorError) as exc:
        raise CliError(str(exc)) from exc
    _save_run(workspace, run)
    return run, result


def run_directive(
    run_id: str, text: str, app_settings: AppSettings | None = None
) -> tuple[WorkflowRun, GateDecision]:
    workspace = open_workspace(app_settings)
    run = _load_run(workspace, run_id)
    try:
        decision = workspace.orchestrator.apply_directive(run, text)
    except (DirectiveError, NotFoundError, OrchestratorError) as exc:
        raise CliError(str(exc)) from exc
    _save_run(workspace, run)
    return run, decision


def run_status(run_id: str, app_settings: AppSettings | None = None) -> dict[str, Any]:
    workspace = open_workspace(app_settings)
    run = _load_run(workspace, run_id)
    try:
        summary = workspace.orchestrator.summarize(run)
    except NotFoundError as exc:
        raise CliError(str(exc)) from exc
    return {"run": run_to_payload(run), "summary": summary.to_payload()}


def run_list_runs(app_settings: AppSettings | None = None) -> list[WorkflowRun]:
    """Return stored runs, most recently updated first.

    Unreadable run documents are logged and left out of the listing.
    """

    store = RunStore((app_settings or default_settings).orchestrator.runs_root)
    runs: list[WorkflowRun] = []
    for run_id in store.list_run_ids():
        try:
            runs.append(store.load(run_id))
        except RunStoreError as exc:
            logger.warning("Skipping run %s: %s", run_id, exc, extra={"run_id": run_id})
    return sorted(runs, key=lambda run: run.updated_at, reverse=True)


def run_uninstall(app_settings: AppSettings | None = None) -> list[RemovedComponent]:
    cfg = app_settings or default_settings
    try:
        return uninstall_skills_pack(cfg.catalog.claude_home_path)
    except OSError as exc:
        raise CliError(f"Unable to remove skills pack: {exc}") from exc


__all__ = [
    "CliError",
    "Workspace",
    "open_workspace",
    "run_advance",
    "run_directive",
    "run_list_runs",
    "run_list_skills",
    "run_show_skill",
    "run_start",
    "run_status",
    "run_uninstall",
    "run_validate",
    "run_write_index",
]
