"""Persist and publish stages."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from draftwire.schemas.documents import Candidate, DocumentStatus
from draftwire.services.document_store import DocumentStore

logger = logging.getLogger(__name__)


def _publish_timestamps(now: datetime, timezone_name: str) -> tuple[datetime, datetime]:
    """Return ``(wall_clock, utc)`` as naive datetimes."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    utc = now.astimezone(UTC)
    try:
        local = utc.astimezone(ZoneInfo(timezone_name))
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone '%s', publishing with UTC wall clock", timezone_name)
        local = utc
    return local.replace(tzinfo=None), utc.replace(tzinfo=None)


async def run_persist_stage(
    store: DocumentStore,
    candidate: Candidate,
    title: str,
    body_html: str,
) -> None:
    """Write the rewritten title and body while the document is still unpublished."""
    await store.write(
        candidate.id,
        {"title": title, "body": body_html, "status": DocumentStatus.DRAFT.value},
    )


async def run_publish_stage(
    store: DocumentStore,
    candidate: Candidate,
    now: datetime | None = None,
    timezone_name: str = "UTC",
) -> datetime:
    published_at, published_at_gmt = _publish_timestamps(now or datetime.now(UTC), timezone_name)
    await store.write(
        candidate.id,
        {
            "status": DocumentStatus.PUBLISHED.value,
            "published_at": published_at,
            "published_at_gmt": published_at_gmt,
        },
    )
    logger.info("Published document %s at %s (%s)", candidate.id, published_at.isoformat(), timezone_name)
    return published_at_gmt
