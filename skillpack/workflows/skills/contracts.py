"""Typed contracts for registered skills."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Skill:
    """One loaded skill definition. Immutable once registered."""

    name: str
    purpose: str
    requires: tuple[str, ...] = ()
    recommends: tuple[str, ...] = ()
    tool: str | None = None
    triggers: tuple[str, ...] = ()
    checkpoints: bool = True
    summary_fields: tuple[str, ...] = ()
    body: str = ""
    path: str = ""
    content_hash: str = ""

    @property
    def is_orchestrator(self) -> bool:
        return bool(self.requires)

    def to_payload(self) -> dict[str, Any]:
        """Return a serializable payload for indexes and CLI output."""

        return {
            "name": self.name,
            "purpose": self.purpose,
            "requires": list(self.requires),
            "recommends": list(self.recommends),
            "tool": self.tool,
            "triggers": list(self.triggers),
            "orchestrator": self.is_orchestrator,
            "path": self.path,
            "contentHash": self.content_hash,
        }
