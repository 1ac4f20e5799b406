"""Logging setup and the structured JSON formatter used by the rates core."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

LOGGING_CONFIG_FLAG = "_logging_configured"
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}

_NOISY_LOGGERS = ("urllib3", "apscheduler")
_TRUTHY = frozenset({"1", "true", "yes", "on"})


class JSONLogFormatter(logging.Formatter):
    """Render records as one JSON object per line, extras included."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        payload.update(record_extras(record))

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)

        return json.dumps(payload, separators=(",", ":"), default=str)


def setup_logging(config: Any) -> None:
    """Install one root handler according to ``config``.

    Reads ``LOG_LEVEL``, ``LOG_JSON_ENABLED`` and ``LOG_FORMAT``. A config class is
    applied only once; later calls with the same class leave handlers alone.
    """

    if getattr(config, LOGGING_CONFIG_FLAG, False):
        return

    level = _level_from(getattr(config, "LOG_LEVEL", None))
    handler = logging.StreamHandler()
    handler.setLevel(level)
    if _is_truthy(getattr(config, "LOG_JSON_ENABLED", False)):
        handler.setFormatter(JSONLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(getattr(config, "LOG_FORMAT", DEFAULT_LOG_FORMAT)))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    # Third-party chatter stays at WARNING even when the core logs DEBUG.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    setattr(config, LOGGING_CONFIG_FLAG, True)


def service_log_extra(
    *,
    event: str,
    status: str,
    source: str,
    duration_ms: float | None = None,
    error: str | None = None,
    **fields: Any,
) -> dict[str, Any]:
    """Build the ``extra`` mapping for rate API and rates service events."""

    extra: dict[str, Any] = {"event": event, "status": status, "source": source}
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 3)
    extra.update((key, value) for key, value in fields.items() if value is not None)
    if error:
        extra["error"] = error
    return extra


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Return the fields a record received through ``extra``, made JSON friendly."""

    return {
        key: _jsonable(value)
        for key, value in vars(record).items()
        if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_")
    }


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, str | int | float | bool):
        return value
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, list | tuple | set | frozenset):
        return [_jsonable(item) for item in value]
    return str(value)


def _level_from(value: Any) -> int:
    if isinstance(value, int):
        return value
    if not value:
        return logging.INFO
    return logging.getLevelNamesMapping().get(str(value).strip().upper(), logging.INFO)


def _is_truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY
