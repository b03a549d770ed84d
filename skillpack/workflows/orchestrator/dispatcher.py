"""Invocation dispatchers that hand a step to the guidance-following agent.

A dispatcher only reports completion or failure. It never touches run state;
the orchestrator records the outcome.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from skillpack.workflows.skills.contracts import Skill

logger = logging.getLogger(__name__)


class DispatchError(RuntimeError):
    """Raised when a sub-skill invocation fails or the skill is unavailable."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True, slots=True)
class CompletionSignal:
    skill: str
    output: dict[str, Any] = field(default_factory=dict)
    message: str | None = None


class SkillDispatcher(Protocol):
    def invoke(self, skill: Skill, context: Mapping[str, Any]) -> CompletionSignal:
        ...


class CallableDispatcher:
    """Dispatch through a plain callable returning an output mapping or signal."""

    def __init__(
        self,
        handler: Callable[[Skill, Mapping[str, Any]], CompletionSignal | Mapping[str, Any] | None],
    ) -> None:
        self._handler = handler

    def invoke(self, skill: Skill, context: Mapping[str, Any]) -> CompletionSignal:
        try:
            result = self._handler(skill, context)
        except DispatchError:
            raise
        except Exception as exc:
            raise DispatchError(
                "dispatch_failed", f"Skill '{skill.name}' failed: {exc}"
            ) from exc

        if isinstance(result, CompletionSignal):
            return result
        return CompletionSignal(skill=skill.name, output=dict(result or {}))


def render_invocation_request(skill: Skill, context: Mapping[str, Any]) -> str:
    """Render the Markdown request asking the assistant to act under ``skill``."""

    lines = [
        f"# Invoke skill: {skill.name}",
        "",
        f"> {skill.purpose}",
        "",
    ]
    if skill.tool:
        lines.extend([f"Requires external tool: `{skill.tool}`", ""])
    if context:
        lines.extend(
            [
                "## Context",
                "",
                "```json",
                json.dumps(dict(context), indent=2, sort_keys=True, default=str),
                "```",
                "",
            ]
        )
    lines.extend(["## Guidance", "", skill.body or "_No guidance body._", ""])
    return "\n".join(lines)


class HandoffDispatcher:
    """Write an invocation request file per step and report completion.

    Handing off is the completion boundary: once the request exists the
    assistant owns the work.
    """

    def __init__(
        self,
        handoff_root: os.PathLike[str] | str,
        *,
        available_tools: Iterable[str] | None = None,
    ) -> None:
        self._root = Path(handoff_root)
        self._available_tools = (
            None
            if available_tools is None
            else {tool.strip().lower() for tool in available_tools if tool.strip()}
        )

    @property
    def handoff_root(self) -> Path:
        return self._root

    def invoke(self, skill: Skill, context: Mapping[str, Any]) -> CompletionSignal:
        if (
            skill.tool
            and self._available_tools is not None
            and skill.tool not in self._available_tools
        ):
            raise DispatchError(
                "skill_unavailable",
                f"Skill '{skill.name}' requires external tool '{skill.tool}', "
                "which is not available.",
            )

        run_id = str(context.get("run_id") or "adhoc")
        position = int(context.get("position") or 0)
        run_dir = self._root / run_id
        target = run_dir / f"{position:02d}-{skill.name}.md"
        try:
            run_dir.mkdir(parents=True, exist_ok=True)
            target.write_text(render_invocation_request(skill, context), encoding="utf-8")
        except OSError as exc:
            raise DispatchError(
                "handoff_write_failed",
                f"Unable to write invocation request for '{skill.name}': {exc}",
            ) from exc

        logger.info(
            "Handed off skill %s",
            skill.name,
            extra={"run_id": run_id, "skill": skill.name, "request": str(target)},
        )
        return CompletionSignal(
            skill=skill.name,
            output={"request": str(target)},
            message=f"Invocation request written to {target}",
        )


__all__ = [
    "CallableDispatcher",
    "CompletionSignal",
    "DispatchError",
    "HandoffDispatcher",
    "SkillDispatcher",
    "render_invocation_request",
]
