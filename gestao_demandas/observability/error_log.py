"""Append-only plain-text error log.

Unhandled request failures are written here in addition to the structured
log, one entry per failure: ``[<ISO timestamp>] ERROR: <traceback>``.
"""

import traceback
from datetime import UTC, datetime
from pathlib import Path

from gestao_demandas.observability.logging import get_logger

logger = get_logger(__name__)


def format_error_entry(exc: BaseException, timestamp: datetime | None = None) -> str:
    """Render one error-log line block for an exception."""
    when = (timestamp or datetime.now(UTC)).isoformat()
    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return f"[{when}] ERROR: {stack.rstrip()}\n"


def append_error(path: Path, exc: BaseException, timestamp: datetime | None = None) -> None:
    """Append an exception to the error log file.

    Failures to write are logged and swallowed.
    """
    entry = format_error_entry(exc, timestamp)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.write(entry)
    except OSError as e:
        logger.error("error_log_write_failed", path=str(path), error=str(e))
