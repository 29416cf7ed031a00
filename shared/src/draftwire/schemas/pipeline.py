"""Pydantic schemas for pipeline operations."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class PipelineStage(str, Enum):
    """Stages of a single pipeline run, in execution order."""

    SELECT_CANDIDATE = "select_candidate"
    SUMMARIZE = "summarize"
    GENERATE_ARTICLE = "generate_article"
    FORMAT = "format"
    PERSIST = "persist"
    PUBLISH = "publish"
    DONE = "done"


class OutcomeStatus(str, Enum):
    """Terminal outcome of a pipeline run."""

    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class StageResult(BaseModel):
    """Result from a single pipeline stage: the artifact, or the error kind and detail."""

    stage: PipelineStage
    success: bool
    duration_seconds: float = 0.0
    artifact: Any = None
    error: str | None = None
    error_kind: str | None = None


class RunOutcome(BaseModel):
    """Terminal outcome of one pipeline run."""

    status: OutcomeStatus
    document_id: int | None = None
    failed_stage: PipelineStage | None = None
    error_kind: str | None = None
    reason: str | None = None
    title: str | None = None
    stages: list[StageResult] = Field(default_factory=list)

    def describe(self) -> str:
        if self.status is OutcomeStatus.COMPLETED:
            return f"Published document {self.document_id} as '{self.title}'"
        if self.status is OutcomeStatus.SKIPPED:
            return "No candidate documents to process"
        stage = self.failed_stage.value if self.failed_stage else "unknown"
        subject = f"Document {self.document_id}" if self.document_id is not None else "Pipeline"
        return f"{subject} failed at {stage} ({self.error_kind}): {self.reason}"
