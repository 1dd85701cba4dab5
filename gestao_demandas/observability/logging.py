"""structlog setup for the demandas service.

Every module logs through ``get_logger(__name__)`` with a snake_case event
name and keyword context. Output goes to stderr, rendered as JSON lines in
production and as coloured console lines in development. Employee e-mails,
CPFs and database passwords are masked before rendering.
"""

import logging
import re
import sys
from collections.abc import Mapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Keys whose values are dropped entirely (compared lower-cased)
SENSITIVE_KEYS: frozenset[str] = frozenset({
    "password",
    "secret",
    "token",
    "api_key",
    "authorization",
    "credentials",
    "dsn",
    "email",
    "emailfuncionario",
    "email_funcionario",
    "phone",
    "cpf",
})

# (pattern, replacement) applied to every string value
_VALUE_MASKS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(postgres(?:ql)?://[^:/\s]+:)[^@\s]+@"), r"\1[REDACTED]@"),
    (re.compile(r"[\w.%+-]+@[\w-]+(?:\.[\w-]+)*\.[A-Za-z]{2,}"), "[EMAIL]"),
    (re.compile(r"\b\d{3}\.\d{3}\.\d{3}-\d{2}\b"), "[CPF]"),
)


class PIIRedactor:
    """structlog processor masking personal data in event dicts.

    Values under a sensitive key are replaced wholesale; any other string,
    however deeply nested in dicts and lists, has e-mail addresses, CPFs and
    DSN passwords masked in place.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, self._scrub_mapping(event_dict))

    def _scrub_mapping(self, data: Mapping[str, Any]) -> dict[str, Any]:
        return {
            key: "[REDACTED]" if key.lower() in SENSITIVE_KEYS else self._scrub(value)
            for key, value in data.items()
        }

    def _scrub(self, value: Any) -> Any:
        if isinstance(value, str):
            for pattern, replacement in _VALUE_MASKS:
                value = pattern.sub(replacement, value)
            return value
        if isinstance(value, Mapping):
            return self._scrub_mapping(value)
        if isinstance(value, list):
            return [self._scrub(item) for item in value]
        return value


def _renderer(format: str) -> list[Processor]:
    if format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_pii: bool = True,
) -> None:
    """Configure structlog for the whole process.

    Args:
        level: Minimum level name; unknown names fall back to INFO
        format: "json" for machine-readable lines, anything else for console output
        redact_pii: Mask personal data before rendering
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if redact_pii:
        processors.append(PIIRedactor())
    processors.extend(_renderer(format))

    min_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a logger carrying ``name`` for the given module."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
