"""Checkpoint gate: classify user directives and decide how a run proceeds."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Optional

from skillpack.workflows.skills.registry import SkillRegistry
from skillpack.workflows.skills.resolver import validate_skill_names


class DirectiveError(ValueError):
    """Raised when free text cannot be classified as a checkpoint directive."""


class DirectiveKind(str, enum.Enum):
    CONFIRM = "confirm"
    ADJUST = "adjust"
    AUTO_ACCEPT = "auto_accept"
    ABORT = "abort"


@dataclass(frozen=True, slots=True)
class Directive:
    kind: DirectiveKind
    subset: tuple[str, ...] = ()

    @classmethod
    def confirm(cls) -> "Directive":
        return cls(DirectiveKind.CONFIRM)

    @classmethod
    def adjust(cls, *names: str) -> "Directive":
        return cls(DirectiveKind.ADJUST, tuple(names))

    @classmethod
    def auto_accept(cls) -> "Directive":
        return cls(DirectiveKind.AUTO_ACCEPT)

    @classmethod
    def abort(cls) -> "Directive":
        return cls(DirectiveKind.ABORT)


@dataclass(frozen=True, slots=True)
class GateDecision:
    """What the orchestrator should do after a checkpoint."""

    kind: DirectiveKind
    proceed: bool
    replacement: Optional[tuple[str, ...]] = None
    set_auto_accept: bool = False


_CONFIRM_WORDS = {
    "confirm",
    "confirmed",
    "yes",
    "y",
    "ok",
    "okay",
    "continue",
    "proceed",
    "next",
    "looks good",
}
_AUTO_ACCEPT_WORDS = {
    "auto-accept",
    "auto accept",
    "autoaccept",
    "just go",
    "go",
    "run all",
}
_ABORT_WORDS = {"abort", "stop", "cancel", "quit"}
_ADJUST_PATTERN = re.compile(r"^adjust\b\s*:?\s*(?P<names>.*)$", re.IGNORECASE | re.DOTALL)
_NAME_SEPARATORS = re.compile(r"[\s,]+")


def parse_directive(text: str) -> Directive:
    """Classify free text typed at a checkpoint."""

    raw = (text or "").strip()
    normalized = " ".join(raw.lower().rstrip(".!").split())
    if not normalized:
        raise DirectiveError("Directive cannot be empty")

    adjust = _ADJUST_PATTERN.match(raw)
    if adjust:
        names = [
            name.lower()
            for name in _NAME_SEPARATORS.split(adjust.group("names"))
            if name
        ]
        if not names:
            raise DirectiveError("Adjust directive must name at least one skill")
        return Directive.adjust(*names)

    if normalized in _CONFIRM_WORDS:
        return Directive.confirm()
    if normalized in _AUTO_ACCEPT_WORDS:
        return Directive.auto_accept()
    if normalized in _ABORT_WORDS:
        return Directive.abort()
    raise DirectiveError(
        f"Unrecognized directive '{raw}'. Use confirm, adjust: <skills>, "
        "auto-accept, or abort."
    )


class CheckpointGate:
    """Evaluates directives against the registry; has no side effects."""

    def __init__(self, registry: SkillRegistry) -> None:
        self._registry = registry

    def evaluate(self, directive: Directive | str) -> GateDecision:
        if isinstance(directive, str):
            directive = parse_directive(directive)

        if directive.kind is DirectiveKind.CONFIRM:
            return GateDecision(kind=directive.kind, proceed=True)
        if directive.kind is DirectiveKind.AUTO_ACCEPT:
            return GateDecision(kind=directive.kind, proceed=True, set_auto_accept=True)
        if directive.kind is DirectiveKind.ABORT:
            return GateDecision(kind=directive.kind, proceed=False)

        names = validate_skill_names(self._registry, directive.subset)
        if not names:
            raise DirectiveError("Adjust directive must name at least one skill")
        return GateDecision(kind=directive.kind, proceed=True, replacement=tuple(names))


__all__ = [
    "CheckpointGate",
    "Directive",
    "DirectiveError",
    "DirectiveKind",
    "GateDecision",
    "parse_directive",
]
