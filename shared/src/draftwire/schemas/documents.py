"""Pydantic schemas for documents handed to the pipeline."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DocumentStatus(str, Enum):
    """Publication status of a document."""

    DRAFT = "draft"
    PENDING = "pending"
    PUBLISHED = "published"


class ProcessingOrder(str, Enum):
    """Which end of the candidate queue is processed first."""

    OLDEST = "oldest"
    NEWEST = "newest"


class Candidate(BaseModel):
    """Read-only snapshot of a document eligible for processing."""

    model_config = ConfigDict(frozen=True)

    id: int
    author_id: int | None = None
    status: DocumentStatus
    title: str = ""
    body: str = ""
    categories: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
