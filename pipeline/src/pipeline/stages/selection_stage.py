"""Candidate selection stage."""

from __future__ import annotations

import logging

from draftwire.schemas.documents import Candidate
from draftwire.services.document_store import DocumentStore
from draftwire.services.pipeline_settings import SelectionSettings

logger = logging.getLogger(__name__)


async def run_selection_stage(
    store: DocumentStore,
    settings: SelectionSettings | None = None,
) -> Candidate | None:
    s = settings or SelectionSettings()
    candidate = await store.find_one(
        s.candidate_status,
        categories=s.categories or None,
        order=s.order,
    )
    if candidate is None:
        logger.info(
            "No %s documents to process (categories=%s)",
            s.candidate_status.value,
            s.categories or "any",
        )
        return None
    logger.info("Selected document %s '%s'", candidate.id, candidate.title)
    return candidate
