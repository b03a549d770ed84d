"""Load SKILL.md documents from disk into a validated registry."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Iterable

import yaml
from pydantic import ValidationError

from skillpack.config.settings import AppSettings, settings as default_settings
from skillpack.schemas.skill_models import SkillDocument, split_frontmatter

from .contracts import Skill
from .registry import SkillRegistry

logger = logging.getLogger(__name__)

SKILL_FILENAME = "SKILL.md"
BUILTIN_CATALOG_ROOT = Path(__file__).resolve().parent.parent.parent / "catalog"


class SkillDocumentError(ValueError):
    """Raised when a skill document cannot be parsed or validated."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


def load_skill_document(path: Path) -> Skill:
    """Parse one ``SKILL.md`` file into a :class:`Skill`."""

    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise SkillDocumentError(path, f"unreadable ({exc})") from exc

    try:
        frontmatter, body = split_frontmatter(raw.decode("utf-8"))
        document = SkillDocument.model_validate(frontmatter)
    except UnicodeDecodeError as exc:
        raise SkillDocumentError(path, "not valid UTF-8") from exc
    except (yaml.YAMLError, ValueError, ValidationError) as exc:
        raise SkillDocumentError(path, str(exc)) from exc

    if path.name == SKILL_FILENAME and path.parent.name != document.name:
        raise SkillDocumentError(
            path,
            f"frontmatter name '{document.name}' does not match directory "
            f"'{path.parent.name}'",
        )

    return Skill(
        name=document.name,
        purpose=document.description,
        requires=tuple(document.requires),
        recommends=tuple(document.recommends),
        tool=document.tool,
        triggers=tuple(document.triggers),
        checkpoints=document.checkpoints,
        summary_fields=tuple(document.summary_fields),
        body=body,
        path=str(path.resolve()),
        content_hash=hashlib.sha256(raw).hexdigest(),
    )


def load_skill_directory(root: Path) -> list[Skill]:
    """Load every ``<root>/<name>/SKILL.md`` document, sorted by name."""

    base = root.expanduser()
    if not base.is_dir():
        raise SkillDocumentError(base, "skills root is not a directory")

    skills: list[Skill] = []
    for candidate in sorted(base.iterdir()):
        skill_md = candidate / SKILL_FILENAME
        if candidate.is_dir() and skill_md.is_file():
            skills.append(load_skill_document(skill_md))
    return skills


def _merge_roots(roots: Iterable[Path]) -> list[Skill]:
    merged: dict[str, Skill] = {}
    for root in roots:
        for skill in load_skill_directory(root):
            previous = merged.get(skill.name)
            if previous is not None:
                logger.warning(
                    "Skill '%s' from %s overrides %s",
                    skill.name,
                    skill.path,
                    previous.path,
                )
            merged[skill.name] = skill
    return list(merged.values())


def skill_roots(app_settings: AppSettings | None = None) -> list[Path]:
    """Return the directories skills are loaded from, lowest precedence first."""

    cfg = (app_settings or default_settings).catalog
    roots: list[Path] = []
    if cfg.include_builtin_catalog:
        roots.append(BUILTIN_CATALOG_ROOT)
    roots.extend(Path(root) for root in cfg.skills_roots)
    return roots


def load_registry(
    app_settings: AppSettings | None = None,
    *,
    roots: Iterable[Path] | None = None,
) -> SkillRegistry:
    """Build the registry from configured roots, failing fast on bad references."""

    resolved_roots = list(roots) if roots is not None else skill_roots(app_settings)
    registry = SkillRegistry.build(_merge_roots(resolved_roots))
    logger.info(
        "Loaded %d skill(s) from %d root(s)",
        len(registry),
        len(resolved_roots),
    )
    return registry


__all__ = [
    "BUILTIN_CATALOG_ROOT",
    "SKILL_FILENAME",
    "SkillDocumentError",
    "load_registry",
    "load_skill_directory",
    "load_skill_document",
    "skill_roots",
]
