"""Logging setup for the skillpack CLI.

Runs and steps log with ``extra={"run_id": ..., "skill": ...}``. The JSON
formatter lifts those fields into an ``extra`` object so a run can be
followed across ``run advance`` and ``run directive`` invocations.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

STRUCTURED_LOGS_ENV = "SKILLPACK_STRUCTURED_LOGS"

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _env_flag(name: str) -> bool:
    value = os.getenv(name, "")
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRIBUTES
    }


class StructuredLogFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(
        self,
        *,
        include_timestamp: bool = True,
        include_module: bool = True,
        default_fields: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__()
        self._include_timestamp = include_timestamp
        self._include_module = include_module
        self._default_fields = dict(default_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = dict(self._default_fields)
        payload["level"] = record.levelname
        payload["message"] = record.getMessage()
        if self._include_timestamp:
            created = datetime.fromtimestamp(record.created, tz=timezone.utc)
            payload["timestamp"] = created.isoformat()
        if self._include_module:
            payload["logger"] = record.name

        extra = _extra_fields(record)
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _text_formatter(include_timestamp: bool, include_module: bool) -> logging.Formatter:
    fields = ["%(levelname)s", "%(message)s"]
    if include_module:
        fields.insert(1, "%(name)s")
    if include_timestamp:
        fields.insert(0, "%(asctime)s")
    return logging.Formatter(" - ".join(fields))


def configure_logging(
    level: str = "INFO",
    *,
    structured: Optional[bool] = None,
    include_timestamp: bool = True,
    include_module: bool = True,
    default_fields: Optional[Mapping[str, Any]] = None,
) -> None:
    """Send records at ``level`` and above to stderr.

    ``structured=None`` defers to the ``SKILLPACK_STRUCTURED_LOGS`` environment
    variable. Handlers installed earlier on the root logger are replaced.
    """

    if structured is None:
        structured = _env_flag(STRUCTURED_LOGS_ENV)

    formatter: logging.Formatter
    if structured:
        formatter = StructuredLogFormatter(
            include_timestamp=include_timestamp,
            include_module=include_module,
            default_fields=default_fields,
        )
    else:
        formatter = _text_formatter(include_timestamp, include_module)

    # stdout carries command output.
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)
    logging.getLogger(__name__).debug("Logging configured at %s", level.upper())
