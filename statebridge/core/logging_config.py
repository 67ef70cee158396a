"""
Logging for StateBridge.

Every record is tagged with the correlation id of the request being served.
Extras passed through ``log_with_context`` are grouped by what they describe:

- ``http``: the inbound API request (``CorrelationMiddleware``)
- ``state``: the outbound sidecar exchange (``StateClient``)
- ``context``: anything else

The JSON formatter emits those groups as nested objects; the text formatter
appends them as ``key=value`` pairs.
"""

import json
import logging
import logging.handlers
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config_manager import LoggingConfig

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

HTTP_FIELDS = frozenset({"method", "path", "status_code", "duration_ms"})
STATE_FIELDS = frozenset({"operation", "state_key", "url", "sidecar_status"})

# Request-per-call clients are chatty at INFO; keep them quiet unless asked
QUIET_LOGGERS = ("httpx", "httpcore")


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def set_correlation_id(corr_id: str) -> None:
    _correlation_id.set(corr_id)


def clear_correlation_id() -> None:
    _correlation_id.set(None)


def group_context(context: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """
    Split ``log_with_context`` extras into ``http``, ``state`` and ``context``.

    Empty groups are left out.
    """
    groups: Dict[str, Dict[str, Any]] = {"http": {}, "state": {}, "context": {}}
    for name, value in context.items():
        if name in HTTP_FIELDS:
            groups["http"][name] = value
        elif name in STATE_FIELDS:
            groups["state"][name] = value
        else:
            groups["context"][name] = value
    return {group: fields for group, fields in groups.items() if fields}


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        corr_id = get_correlation_id()
        if corr_id:
            entry["correlation_id"] = corr_id

        entry.update(group_context(getattr(record, "context", None) or {}))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line text for local runs: message, then context pairs, then correlation id."""

    def __init__(self):
        super().__init__(fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        record.asctime = self.formatTime(record, self.datefmt)
        line = self.formatMessage(record)

        context = getattr(record, "context", None)
        if context:
            line += " (" + " ".join(f"{name}={value}" for name, value in context.items()) + ")"

        corr_id = get_correlation_id()
        if corr_id:
            line += f" [{corr_id}]"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _level_name(value: Any) -> str:
    return str(getattr(value, "value", value)).upper()


def _level(value: Any) -> int:
    return logging.getLevelName(_level_name(value))


def _build_handlers(config: LoggingConfig) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if config.file:
        Path(config.file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            filename=config.file,
            maxBytes=config.rotation_size,
            backupCount=config.rotation_count,
            encoding="utf-8"
        ))

    formatter = JSONFormatter() if config.format == "json" else TextFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Install StateBridge's handlers on the root logger.

    Replaces any handlers already present. ``httpx`` and ``httpcore`` are
    capped at WARNING unless ``module_levels`` names them.

    Args:
        config: The ``logging`` configuration section (defaults when omitted)
    """
    config = config or LoggingConfig()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    for handler in _build_handlers(config):
        root_logger.addHandler(handler)
    root_logger.setLevel(_level(config.level))

    module_levels = {name: logging.WARNING for name in QUIET_LOGGERS}
    for name, level in (config.module_levels or {}).items():
        module_levels[name] = _level(level)
    for name, level in module_levels.items():
        logging.getLogger(name).setLevel(level)

    log_with_context(
        root_logger, logging.INFO, "Logging configured",
        log_level=_level_name(config.level),
        format=config.format,
        file=config.file,
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """
    Log ``message`` with structured extras.

    Keys in ``HTTP_FIELDS`` and ``STATE_FIELDS`` are grouped by the formatters;
    other keys are emitted under ``context``.
    """
    extra = {"context": context} if context else {}
    logger.log(level, message, extra=extra)
