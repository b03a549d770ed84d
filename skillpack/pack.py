"""Skills pack housekeeping: the generated index and uninstalling the pack."""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from skillpack import __version__
from skillpack.workflows.skills.registry import SkillRegistry

logger = logging.getLogger(__name__)

SKILLS_INDEX_FILENAME = "SKILLS_INDEX.json"

# Order matches what users see when uninstalling. Settings, MCP config and
# anything else under the assistant home are never touched.
PACK_COMPONENTS: tuple[tuple[str, str], ...] = (
    ("Skills", "skills"),
    ("Plugins", "plugins"),
    (SKILLS_INDEX_FILENAME, SKILLS_INDEX_FILENAME),
    ("MCP_REGISTRY.md", "MCP_REGISTRY.md"),
    ("ATTRIBUTION.md", "ATTRIBUTION.md"),
    ("SECURITY.md", "SECURITY.md"),
)


def build_skills_index(registry: SkillRegistry) -> dict[str, Any]:
    return {
        "version": __version__,
        "generatedAt": datetime.now(timezone.utc).isoformat(),
        "count": len(registry),
        "orchestrators": [skill.name for skill in registry.orchestrators()],
        "skills": [skill.to_payload() for skill in registry],
    }


def write_skills_index(registry: SkillRegistry, output: Path) -> Path:
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(
        json.dumps(build_skills_index(registry), indent=2) + "\n",
        encoding="utf-8",
    )
    logger.info("Wrote skills index for %d skill(s) to %s", len(registry), output)
    return output


@dataclass(frozen=True, slots=True)
class RemovedComponent:
    label: str
    path: Path
    entries: int | None = None


def installed_components(claude_home: Path) -> list[tuple[str, Path]]:
    """Return the pack components that currently exist under ``claude_home``."""

    present: list[tuple[str, Path]] = []
    for label, relative in PACK_COMPONENTS:
        path = claude_home / relative
        if path.exists() or path.is_symlink():
            present.append((label, path))
    return present


def uninstall_skills_pack(claude_home: Path) -> list[RemovedComponent]:
    """Remove the skills pack content from ``claude_home``.

    Directories are removed recursively and report how many entries they held.
    Missing components are skipped.
    """

    removed: list[RemovedComponent] = []
    for label, path in installed_components(claude_home):
        if path.is_dir() and not path.is_symlink():
            entries = sum(1 for _ in path.iterdir())
            shutil.rmtree(path)
            removed.append(RemovedComponent(label=label, path=path, entries=entries))
        else:
            path.unlink()
            removed.append(RemovedComponent(label=label, path=path))
        logger.info("Removed %s", path)
    return removed


__all__ = [
    "PACK_COMPONENTS",
    "RemovedComponent",
    "SKILLS_INDEX_FILENAME",
    "build_skills_index",
    "installed_components",
    "uninstall_skills_pack",
    "write_skills_index",
]
