from pathlib import Path
from typing import Annotated, Any, Optional, Sequence

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

ENV_FILE = Path(__file__).resolve().parent.parent.parent / ".env"


def _split_csv(value: Optional[str | Sequence[str]]) -> tuple[str, ...]:
    if value is None:
        return ()

    if isinstance(value, str):
        raw_items: Sequence[object] = value.split(",")
    elif isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        raw_items = value
    else:
        raw_items = (value,)

    items = [str(item).strip() for item in raw_items if str(item).strip()]
    # Preserve order while removing duplicates.
    return tuple(dict.fromkeys(items))


class SkillCatalogSettings(BaseSettings):
    """Where skill documents are loaded from and where the pack is installed."""

    skills_roots: Annotated[tuple[str, ...], NoDecode] = Field(
        (),
        description=(
            "Extra directories holding <name>/SKILL.md documents. Later roots "
            "override earlier ones and the built-in catalog."
        ),
    )
    include_builtin_catalog: bool = Field(
        True,
        description="Load the skill documents packaged with skillpack.",
    )
    claude_home: str = Field(
        "~/.claude",
        description="Assistant home directory the skills pack is installed into.",
    )

    model_config = SettingsConfigDict(
        env_prefix="SKILLPACK_",
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("skills_roots", mode="before")
    @classmethod
    def _split_roots(cls, value):
        """Allow comma-delimited strings for tuple fields."""
        return _split_csv(value)

    @property
    def claude_home_path(self) -> Path:
        return Path(self.claude_home).expanduser()


class OrchestratorSettings(BaseSettings):
    """Settings for orchestrator runs driven through the CLI."""

    runs_root: str = Field(
        "var/skillpack/runs",
        description="Directory where resumable workflow runs are persisted.",
    )
    handoff_root: str = Field(
        "var/skillpack/handoffs",
        description="Directory where sub-skill invocation requests are written.",
    )
    available_tools: Annotated[Optional[tuple[str, ...]], NoDecode] = Field(
        None,
        description=(
            "External tools reachable by the assistant (e.g. stripe, github). "
            "Unset disables the availability check."
        ),
    )
    auto_accept_default: bool = Field(
        False,
        description="Start runs with checkpoints suppressed.",
    )

    model_config = SettingsConfigDict(
        env_prefix="SKILLPACK_",
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("runs_root", "handoff_root", mode="before")
    @classmethod
    def _strip_path(cls, value):
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValueError("Path settings cannot be blank")
            return stripped
        return value

    @field_validator("available_tools", mode="before")
    @classmethod
    def _split_tools(cls, value):
        if value is None:
            return None
        return _split_csv(value)


class AppSettings(BaseSettings):
    """Main application settings"""

    catalog: SkillCatalogSettings = Field(default_factory=SkillCatalogSettings)
    orchestrator: OrchestratorSettings = Field(default_factory=OrchestratorSettings)

    log_level: str = Field("INFO")
    structured_logs: bool = Field(False)

    model_config = SettingsConfigDict(
        env_prefix="SKILLPACK_",
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            normalized = value.strip().upper()
            if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
                raise ValueError(f"Unsupported log level: {value}")
            return normalized
        return value


settings = AppSettings()
