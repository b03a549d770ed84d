from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Mapping

import pytest

from skillpack.workflows.orchestrator.dispatcher import CallableDispatcher
from skillpack.workflows.orchestrator.services import Orchestrator
from skillpack.workflows.skills.contracts import Skill
from skillpack.workflows.skills.loader import BUILTIN_CATALOG_ROOT, load_registry
from skillpack.workflows.skills.registry import SkillRegistry


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """Drop handlers installed by configure_logging during a test."""

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def catalog_registry() -> SkillRegistry:
    return load_registry(roots=[BUILTIN_CATALOG_ROOT])


@pytest.fixture
def write_skill(tmp_path: Path) -> Callable[..., Path]:
    """Write ``<root>/<name>/SKILL.md`` and return the document path."""

    def _write(
        name: str,
        *,
        root: Path | None = None,
        description: str = "test skill",
        extra: str = "",
        body: str = "Guidance.",
    ) -> Path:
        base = root or tmp_path / "skills"
        skill_dir = base / name
        skill_dir.mkdir(parents=True, exist_ok=True)
        path = skill_dir / "SKILL.md"
        path.write_text(
            f"---\nname: {name}\ndescription: {description}\n{extra}---\n{body}\n",
            encoding="utf-8",
        )
        return path

    return _write


class RecordingHandler:
    """Dispatcher handler that records invocations and can fail on demand."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.contexts: list[dict[str, Any]] = []
        self.fail_on: set[str] = set()
        self.outputs: dict[str, dict[str, Any]] = {}

    def __call__(self, skill: Skill, context: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append(skill.name)
        self.contexts.append(dict(context))
        if skill.name in self.fail_on:
            raise RuntimeError(f"{skill.name} exploded")
        return self.outputs.get(skill.name, {"skill": skill.name})


@pytest.fixture
def recorder() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def orchestrator(catalog_registry, recorder) -> Orchestrator:
    return Orchestrator(catalog_registry, CallableDispatcher(recorder))
