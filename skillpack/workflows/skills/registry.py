"""Read-only registry of loaded skills and their declared sub-skills."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Mapping

from .contracts import Skill

logger = logging.getLogger(__name__)


class NotFoundError(LookupError):
    """Raised when a skill name is not registered."""

    def __init__(self, name: str, message: str | None = None) -> None:
        super().__init__(message or f"Skill '{name}' is not registered")
        self.name = name


class UnknownSkillError(NotFoundError):
    """Raised when an adjust directive names a skill that is not registered."""


class SkillRegistryError(ValueError):
    """Raised when the loaded skill set is inconsistent."""


def _find_cycle(skills: Mapping[str, Skill]) -> list[str] | None:
    visiting: set[str] = set()
    visited: set[str] = set()
    trail: list[str] = []

    def _visit(name: str) -> list[str] | None:
        if name in visited:
            return None
        if name in visiting:
            return trail[trail.index(name) :] + [name]
        visiting.add(name)
        trail.append(name)
        for dependency in skills[name].requires:
            found = _visit(dependency)
            if found:
                return found
        trail.pop()
        visiting.discard(name)
        visited.add(name)
        return None

    for name in skills:
        cycle = _visit(name)
        if cycle:
            return cycle
    return None


class SkillRegistry:
    """Mapping from skill name to its definition.

    The registry is validated once when built and never mutated afterwards.
    Every ``requires`` entry must name a registered skill so lookups during a
    run cannot fail on a dangling reference.
    """

    def __init__(self, skills: Mapping[str, Skill]) -> None:
        self._skills = dict(skills)

    @classmethod
    def build(cls, skills: Iterable[Skill]) -> "SkillRegistry":
        indexed: dict[str, Skill] = {}
        for skill in skills:
            if skill.name in indexed:
                raise SkillRegistryError(f"Duplicate skill name '{skill.name}'")
            indexed[skill.name] = skill

        problems: list[str] = []
        for skill in indexed.values():
            if skill.name in skill.requires:
                problems.append(f"'{skill.name}' requires itself")
            missing = [name for name in skill.requires if name not in indexed]
            if missing:
                problems.append(
                    f"'{skill.name}' requires unregistered skill(s): "
                    + ", ".join(missing)
                )
            for name in skill.recommends:
                if name not in indexed:
                    logger.warning(
                        "Skill '%s' recommends unregistered skill '%s'",
                        skill.name,
                        name,
                    )
        if problems:
            raise SkillRegistryError("; ".join(problems))

        cycle = _find_cycle(indexed)
        if cycle:
            raise SkillRegistryError("Dependency cycle: " + " -> ".join(cycle))

        logger.debug("Skill registry built with %d skill(s)", len(indexed))
        return cls(indexed)

    def resolve(self, name: str) -> Skill:
        try:
            return self._skills[name]
        except KeyError:
            raise NotFoundError(name) from None

    def dependencies_of(self, name: str) -> list[Skill]:
        """Return the required sub-skills of ``name`` in document order."""

        skill = self.resolve(name)
        return [self._skills[dependency] for dependency in skill.requires]

    def recommendations_of(self, name: str) -> list[Skill]:
        skill = self.resolve(name)
        return [self._skills[item] for item in skill.recommends if item in self._skills]

    def names(self) -> list[str]:
        return sorted(self._skills)

    def orchestrators(self) -> list[Skill]:
        return [self._skills[name] for name in self.names() if self._skills[name].is_orchestrator]

    def __contains__(self, name: object) -> bool:
        return name in self._skills

    def __iter__(self) -> Iterator[Skill]:
        return (self._skills[name] for name in self.names())

    def __len__(self) -> int:
        return len(self._skills)


__all__ = [
    "NotFoundError",
    "SkillRegistry",
    "SkillRegistryError",
    "UnknownSkillError",
]
