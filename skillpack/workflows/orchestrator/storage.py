"""Filesystem persistence for resumable orchestrator runs."""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path

from pydantic import ValidationError

from skillpack.schemas.run_models import WorkflowRunModel

from .models import WorkflowRun
from .serializers import deserialize_run, run_to_payload

logger = logging.getLogger(__name__)

_RUN_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,127}$")


class RunStoreError(RuntimeError):
    """Raised when a run cannot be read from or written to the store."""


class RunStore:
    """Keep one JSON document per run under a configurable root."""

    def __init__(self, base_path: os.PathLike[str] | str) -> None:
        self._base_path = Path(base_path).expanduser().resolve()

    @property
    def base_path(self) -> Path:
        return self._base_path

    def path_for(self, run_id: str) -> Path:
        if not _RUN_ID_PATTERN.fullmatch(run_id or ""):
            raise RunStoreError(f"Invalid run id: {run_id!r}")
        return self._base_path / f"{run_id}.json"

    def save(self, run: WorkflowRun) -> Path:
        path = self.path_for(run.run_id)
        payload = json.dumps(run_to_payload(run), indent=2, sort_keys=True)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            raise RunStoreError(f"Unable to save run {run.run_id}: {exc}") from exc
        logger.debug("Saved run %s to %s", run.run_id, path)
        return path

    def load(self, run_id: str) -> WorkflowRun:
        path = self.path_for(run_id)
        if not path.is_file():
            raise RunStoreError(f"Run not found: {run_id}")
        try:
            model = WorkflowRunModel.model_validate_json(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise RunStoreError(f"Unable to read run {run_id}: {exc}") from exc
        except (UnicodeDecodeError, ValidationError) as exc:
            raise RunStoreError(f"Run {run_id} is corrupt: {exc}") from exc
        return deserialize_run(model)

    def list_run_ids(self) -> list[str]:
        if not self._base_path.is_dir():
            return []
        return sorted(path.stem for path in self._base_path.glob("*.json"))


__all__ = ["RunStore", "RunStoreError"]
