"""Schedule lock - keeps two pipeline ticks from running at the same time."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = timedelta(minutes=15)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class LockState:
    held: bool = False
    acquired_at: datetime | None = None


class ScheduleLock:
    """Process-wide run flag with a staleness timeout.

    A held lock older than ``timeout`` is treated as abandoned and may be
    reclaimed by the next ``try_acquire``.
    """

    def __init__(
        self,
        timeout: timedelta = DEFAULT_LOCK_TIMEOUT,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if timeout <= timedelta(0):
            raise ValueError("Lock timeout must be positive")
        self._timeout = timeout
        self._clock = clock
        self._state = LockState()
        self._guard = threading.Lock()

    @property
    def timeout(self) -> timedelta:
        return self._timeout

    @property
    def state(self) -> LockState:
        with self._guard:
            return replace(self._state)

    def try_acquire(self) -> bool:
        with self._guard:
            now = self._clock()
            if self._state.held and self._state.acquired_at is not None:
                age = now - self._state.acquired_at
                if age <= self._timeout:
                    return False
                logger.warning(
                    "Reclaiming stale pipeline lock acquired at %s (%ss old, timeout %ss)",
                    self._state.acquired_at.isoformat(),
                    int(age.total_seconds()),
                    int(self._timeout.total_seconds()),
                )
            self._state = LockState(held=True, acquired_at=now)
            return True

    def release(self) -> None:
        with self._guard:
            self._state = LockState()
