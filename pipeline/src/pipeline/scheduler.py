"""Recurring trigger that runs the pipeline under the schedule lock."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import AsyncContextManager

from draftwire.schemas.pipeline import OutcomeStatus, RunOutcome
from draftwire.services.notices import NoticeLog, Severity

from pipeline.lock import ScheduleLock
from pipeline.orchestrator import PipelineStageRunner

logger = logging.getLogger(__name__)

RunnerFactory = Callable[[], AsyncContextManager[PipelineStageRunner]]


class Scheduler:
    def __init__(
        self,
        lock: ScheduleLock,
        runner_factory: RunnerFactory,
        *,
        interval_seconds: float = 300,
        notices: NoticeLog | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("Scheduler interval must be positive")
        self._lock = lock
        self._runner_factory = runner_factory
        self._interval = interval_seconds
        self._notices = notices or NoticeLog()
        self._stopped = asyncio.Event()

    @property
    def lock(self) -> ScheduleLock:
        return self._lock

    async def tick(self) -> list[RunOutcome] | None:
        """Run one scheduled pass.

        Returns ``None`` when another pass holds the lock, otherwise the
        outcomes of the runs performed (possibly empty if the runner could
        not be built).
        """
        if not self._lock.try_acquire():
            logger.info("Pipeline already running; skipping this tick")
            return None

        outcomes: list[RunOutcome] = []
        try:
            async with self._runner_factory() as runner:
                batch_size = runner.settings.selection.batch_size
                for _ in range(batch_size):
                    outcome = await runner.run()
                    outcomes.append(outcome)
                    logger.info("Pipeline run finished: %s", outcome.describe())
                    if outcome.status is not OutcomeStatus.COMPLETED:
                        break
        except Exception as exc:
            logger.exception("Pipeline tick failed: %s", exc)
            self._notices.emit(f"Pipeline tick failed: {exc}", Severity.ERROR)
        finally:
            self._lock.release()
        return outcomes

    async def run_forever(self, *, run_on_start: bool = False) -> None:
        self._stopped.clear()
        if run_on_start:
            logger.info("Running pipeline immediately on startup")
            await self.tick()

        logger.info("Pipeline scheduler running every %s seconds", self._interval)
        while not self._stopped.is_set():
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                await self.tick()
        logger.info("Pipeline scheduler stopped")

    def stop(self) -> None:
        self._stopped.set()
