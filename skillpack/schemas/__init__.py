from .run_models import (
    RunMode,
    RunStatus,
    StepStatus,
    WorkflowRunModel,
    WorkflowStepModel,
)
from .skill_models import SkillDocument, split_frontmatter

__all__ = [
    "RunMode",
    "RunStatus",
    "SkillDocument",
    "StepStatus",
    "WorkflowRunModel",
    "WorkflowStepModel",
    "split_frontmatter",
]
