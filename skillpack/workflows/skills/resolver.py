"""Step selection for orchestrator runs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from skillpack.schemas.run_models import RunMode

from .contracts import Skill
from .registry import SkillRegistry, UnknownSkillError

_NON_WORD = re.compile(r"[^a-z0-9]+")


def _normalize(text: str) -> str:
    return " ".join(_NON_WORD.sub(" ", text.lower()).split())


def _contains_phrase(haystack: str, phrase: str) -> bool:
    needle = _normalize(phrase)
    if not needle:
        return False
    return f" {needle} " in f" {haystack} "


@dataclass(frozen=True, slots=True)
class StepSelection:
    """Ordered sub-skills chosen for a run and how they were chosen."""

    target: str
    mode: RunMode
    skills: tuple[Skill, ...]

    @property
    def names(self) -> list[str]:
        return [skill.name for skill in self.skills]


def match_concern(candidates: Sequence[Skill], user_input: str | None) -> list[Skill]:
    """Return candidates whose name or triggers appear in ``user_input``."""

    if not user_input or not user_input.strip():
        return []
    haystack = _normalize(user_input)
    matches: list[Skill] = []
    for skill in candidates:
        phrases = (skill.name, skill.name.replace("-", " "), *skill.triggers)
        if any(_contains_phrase(haystack, phrase) for phrase in phrases):
            matches.append(skill)
    return matches


def select_steps(
    registry: SkillRegistry, target: str, user_input: str | None = None
) -> StepSelection:
    """Resolve the ordered step list for ``target``.

    A target with no sub-skills runs as a single step. When the user input
    names exactly one sub-skill's concern the selection collapses to that
    sub-skill (targeted mode); otherwise the full documented order is used.
    """

    skill = registry.resolve(target)
    dependencies = registry.dependencies_of(target)
    if not dependencies:
        return StepSelection(target=target, mode=RunMode.SINGLE, skills=(skill,))

    matches = match_concern(dependencies, user_input)
    if len(matches) == 1:
        return StepSelection(target=target, mode=RunMode.TARGETED, skills=(matches[0],))
    return StepSelection(target=target, mode=RunMode.FULL, skills=tuple(dependencies))


def validate_skill_names(registry: SkillRegistry, names: Sequence[str]) -> list[str]:
    """Return ``names`` de-duplicated, raising when any is unregistered."""

    cleaned = [name.strip() for name in names if name and name.strip()]
    unknown = [name for name in cleaned if name not in registry]
    if unknown:
        joined = ", ".join(unknown)
        raise UnknownSkillError(
            unknown[0], f"Unknown skill(s) in adjust directive: {joined}"
        )
    return list(dict.fromkeys(cleaned))


__all__ = ["StepSelection", "match_concern", "select_steps", "validate_skill_names"]
