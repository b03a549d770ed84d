"""Pydantic schema for SKILL.md frontmatter."""

from __future__ import annotations

import re
from typing import Any, List, Optional

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

FRONTMATTER_DELIMITER = "---"

_SKILL_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9._-]{0,127}$")


def _as_name_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        raise ValueError("Expected a list of skill names")
    names = [str(item).strip() for item in value if str(item).strip()]
    return list(dict.fromkeys(names))


class SkillDocument(BaseModel):
    """Frontmatter block at the top of a ``SKILL.md`` document."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    description: str = Field(
        ..., validation_alias=AliasChoices("description", "purpose")
    )
    requires: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("requires", "required_skills"),
    )
    recommends: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("recommends", "recommended_skills"),
    )
    triggers: List[str] = Field(default_factory=list)
    tool: Optional[str] = Field(
        None, validation_alias=AliasChoices("tool", "mcp", "external_tool")
    )
    checkpoints: bool = True
    summary_fields: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("summary_fields", "summary"),
    )

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        text = value.strip()
        if not _SKILL_NAME_PATTERN.fullmatch(text):
            raise ValueError(f"Skill name '{value}' contains unsupported characters")
        return text

    @field_validator("description")
    @classmethod
    def _check_description(cls, value: str) -> str:
        text = " ".join(value.split())
        if not text:
            raise ValueError("Skill description cannot be blank")
        return text

    @field_validator("requires", "recommends", "summary_fields", mode="before")
    @classmethod
    def _split_names(cls, value: Any) -> list[str]:
        return _as_name_list(value)

    @field_validator("triggers", mode="before")
    @classmethod
    def _normalize_triggers(cls, value: Any) -> list[str]:
        return [" ".join(item.lower().split()) for item in _as_name_list(value)]

    @field_validator("tool", mode="before")
    @classmethod
    def _blank_tool_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() or None
        return value


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return ``(frontmatter, body)`` for a Markdown document.

    Raises ``ValueError`` when the document has no closed frontmatter block or
    the block is not a YAML mapping.
    """

    lines = text.splitlines()
    if not lines or lines[0].strip() != FRONTMATTER_DELIMITER:
        raise ValueError("Document does not start with a frontmatter block")
    try:
        end_index = [line.strip() for line in lines[1:]].index(
            FRONTMATTER_DELIMITER
        ) + 1
    except ValueError as exc:
        raise ValueError("Frontmatter block is not closed") from exc

    parsed = yaml.safe_load("\n".join(lines[1:end_index])) or {}
    if not isinstance(parsed, dict):
        raise ValueError("Frontmatter must be a YAML mapping")
    body = "\n".join(lines[end_index + 1 :]).strip()
    return parsed, body


__all__ = ["FRONTMATTER_DELIMITER", "SkillDocument", "split_frontmatter"]
