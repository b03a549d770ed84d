"""Skill documents, the registry built from them, and step selection.

Skills are loaded from ``<root>/<name>/SKILL.md`` documents whose YAML
frontmatter declares the sub-skills an orchestrator runs. The registry is
validated once at load time and is read-only afterwards.
"""

from .contracts import Skill
from .loader import (
    BUILTIN_CATALOG_ROOT,
    SkillDocumentError,
    load_registry,
    load_skill_directory,
    load_skill_document,
)
from .registry import (
    NotFoundError,
    SkillRegistry,
    SkillRegistryError,
    UnknownSkillError,
)
from .resolver import StepSelection, match_concern, select_steps, validate_skill_names

__all__ = [
    "BUILTIN_CATALOG_ROOT",
    "NotFoundError",
    "Skill",
    "SkillDocumentError",
    "SkillRegistry",
    "SkillRegistryError",
    "StepSelection",
    "UnknownSkillError",
    "load_registry",
    "load_skill_directory",
    "load_skill_document",
    "match_concern",
    "select_steps",
    "validate_skill_names",
]
