"""Run notices - completion/failure messages surfaced to logs and the admin UI."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class Notice:
    message: str
    severity: Severity
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class NoticeLog:
    """Bounded in-memory history of notices, each one also written to the log."""

    def __init__(self, maxlen: int = 50) -> None:
        self._notices: deque[Notice] = deque(maxlen=maxlen)

    def emit(self, message: str, severity: Severity = Severity.INFO) -> Notice:
        notice = Notice(message=message, severity=severity)
        self._notices.append(notice)
        logger.log(_LOG_LEVELS[severity], "[%s] %s", severity.value, message)
        return notice

    def recent(self, limit: int | None = None) -> list[Notice]:
        """Return notices newest first."""
        items = list(reversed(self._notices))
        return items[:limit] if limit is not None else items

    def clear(self) -> None:
        self._notices.clear()
