"""Pipeline orchestrator - drives one candidate document through every stage."""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from draftwire.errors import DraftwireError
from draftwire.schemas.documents import Candidate
from draftwire.schemas.pipeline import OutcomeStatus, PipelineStage, RunOutcome, StageResult
from draftwire.services.document_store import DocumentStore
from draftwire.services.generation_client import GenerationClient
from draftwire.services.notices import NoticeLog, Severity
from draftwire.services.pipeline_settings import PipelineSettings

from pipeline.stages.article_stage import run_article_stage
from pipeline.stages.format_stage import run_format_stage
from pipeline.stages.publish_stage import run_persist_stage, run_publish_stage
from pipeline.stages.selection_stage import run_selection_stage
from pipeline.stages.summary_stage import run_summary_stage

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class PipelineRun:
    """Transient state of a single run; discarded once the outcome is known."""

    run_id: uuid.UUID
    started_at: datetime
    stage: PipelineStage = PipelineStage.SELECT_CANDIDATE
    candidate: Candidate | None = None
    summary: str | None = None
    article: str | None = None
    title: str | None = None
    body_markdown: str | None = None
    body_html: str | None = None
    stages: list[StageResult] = field(default_factory=list)
    outcome: RunOutcome | None = None

    @property
    def document_id(self) -> int | None:
        return self.candidate.id if self.candidate is not None else None


class PipelineStageRunner:
    """Runs select -> summarize -> generate -> format -> persist -> publish.

    The first failing stage ends the run; nothing is retried within a run.
    """

    def __init__(
        self,
        store: DocumentStore,
        client: GenerationClient,
        settings: PipelineSettings | None = None,
        *,
        notices: NoticeLog | None = None,
        timezone_name: str = "UTC",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._client = client
        self._settings = settings or PipelineSettings()
        self._notices = notices or NoticeLog()
        self._timezone_name = timezone_name
        self._clock = clock

    @property
    def settings(self) -> PipelineSettings:
        return self._settings

    async def run(self) -> RunOutcome:
        run = PipelineRun(run_id=uuid.uuid4(), started_at=self._clock())
        logger.info("Pipeline run %s started", run.run_id)

        steps: list[tuple[PipelineStage, Callable[[PipelineRun], Awaitable[Any]]]] = [
            (PipelineStage.SELECT_CANDIDATE, self._select),
            (PipelineStage.SUMMARIZE, self._summarize),
            (PipelineStage.GENERATE_ARTICLE, self._generate_article),
            (PipelineStage.FORMAT, self._format),
            (PipelineStage.PERSIST, self._persist),
            (PipelineStage.PUBLISH, self._publish),
        ]
        for stage, step in steps:
            result = await self._run_stage(run, stage, step)
            if not result.success:
                return self._finish(run, OutcomeStatus.FAILED, failed=result)
            if stage is PipelineStage.SELECT_CANDIDATE and run.candidate is None:
                return self._finish(run, OutcomeStatus.SKIPPED)

        run.stage = PipelineStage.DONE
        return self._finish(run, OutcomeStatus.COMPLETED)

    async def _run_stage(
        self,
        run: PipelineRun,
        stage: PipelineStage,
        step: Callable[[PipelineRun], Awaitable[Any]],
    ) -> StageResult:
        run.stage = stage
        started = time.monotonic()
        try:
            artifact = await step(run)
            result = StageResult(
                stage=stage,
                success=True,
                duration_seconds=time.monotonic() - started,
                artifact=artifact,
            )
        except DraftwireError as exc:
            logger.error("Stage %s failed run_id=%s: %s", stage.value, run.run_id, exc)
            result = StageResult(
                stage=stage,
                success=False,
                duration_seconds=time.monotonic() - started,
                error=str(exc),
                error_kind=exc.kind,
            )
        except Exception as exc:
            logger.exception("Stage %s raised unexpectedly run_id=%s", stage.value, run.run_id)
            result = StageResult(
                stage=stage,
                success=False,
                duration_seconds=time.monotonic() - started,
                error=str(exc).strip() or exc.__class__.__name__,
                error_kind="unexpected",
            )
        run.stages.append(result)
        return result

    async def _select(self, run: PipelineRun) -> Candidate | None:
        run.candidate = await run_selection_stage(self._store, self._settings.selection)
        return run.candidate

    async def _summarize(self, run: PipelineRun) -> str:
        run.summary = await run_summary_stage(run.candidate, self._client)
        return run.summary

    async def _generate_article(self, run: PipelineRun) -> str:
        article = await run_article_stage(
            run.candidate,
            run.summary,
            self._client,
            rewrite_title=self._settings.formatting.rewrite_title,
        )
        run.article = article.raw
        run.title = article.title
        run.body_markdown = article.body_markdown
        return article.title

    async def _format(self, run: PipelineRun) -> str:
        run.body_html = await run_format_stage(
            run.body_markdown, self._settings.formatting.article_format
        )
        return run.body_html

    async def _persist(self, run: PipelineRun) -> int:
        await run_persist_stage(self._store, run.candidate, run.title, run.body_html)
        return run.candidate.id

    async def _publish(self, run: PipelineRun) -> datetime:
        return await run_publish_stage(
            self._store,
            run.candidate,
            now=self._clock(),
            timezone_name=self._timezone_name,
        )

    def _finish(
        self,
        run: PipelineRun,
        status: OutcomeStatus,
        failed: StageResult | None = None,
    ) -> RunOutcome:
        outcome = RunOutcome(
            status=status,
            document_id=run.document_id,
            failed_stage=failed.stage if failed else None,
            error_kind=failed.error_kind if failed else None,
            reason=failed.error if failed else None,
            title=run.title,
            stages=list(run.stages),
        )
        run.outcome = outcome

        severity = {
            OutcomeStatus.COMPLETED: Severity.SUCCESS,
            OutcomeStatus.FAILED: Severity.ERROR,
            OutcomeStatus.SKIPPED: Severity.INFO,
        }[status]
        self._notices.emit(outcome.describe(), severity)
        return outcome
