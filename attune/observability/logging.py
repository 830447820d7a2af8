"""Structured logging configuration using structlog.

JSON lines in production, colored console output in development. Session
and direction context bound with structlog contextvars is merged into
every line.

What participants write about their feelings (attempts, shared context,
expressed content, drafts, validation notes) is never logged. Those keys
are replaced with a length marker so a line still shows that text was
present.
"""

import logging
import re
import sys
from collections.abc import Mapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

PARTICIPANT_TEXT_KEYS: frozenset[str] = frozenset({
    "content",
    "attempt_text",
    "shared_content",
    "expressed_content",
    "subject_expressed_content",
    "draft",
    "note",
})

SECRET_KEYS: frozenset[str] = frozenset({
    "api_key",
    "authorization",
    "password",
    "secret",
    "token",
})

# Provider error strings can echo account addresses
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")


def _text_marker(value: Any) -> str:
    if isinstance(value, str):
        return f"[redacted {len(value)} chars]"
    if isinstance(value, list):
        return f"[redacted {len(value)} items]"
    return "[REDACTED]"


class ParticipantTextRedactor:
    """Processor that keeps participant text and secrets out of log events."""

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, self._redact(event_dict))

    def _redact(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            result: dict[str, Any] = {}
            for key, item in value.items():
                lowered = str(key).lower()
                if lowered in PARTICIPANT_TEXT_KEYS:
                    result[key] = _text_marker(item)
                elif lowered in SECRET_KEYS:
                    result[key] = "[REDACTED]"
                else:
                    result[key] = self._redact(item)
            return result
        if isinstance(value, list):
            return [self._redact(item) for item in value]
        if isinstance(value, str):
            return EMAIL_PATTERN.sub("[EMAIL]", value)
        return value


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_pii: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: "json" for production, "console" for development
        redact_pii: Whether to keep participant text and secrets out of logs
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if redact_pii:
        processors.append(ParticipantTextRedactor())

    if format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    level_num = logging.getLevelName(level.upper())
    if not isinstance(level_num, int):
        level_num = logging.INFO

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound to the given module name."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
