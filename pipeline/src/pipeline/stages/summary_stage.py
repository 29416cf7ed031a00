"""Summary stage - condense the source document into key points."""

from __future__ import annotations

import logging

from draftwire.schemas.documents import Candidate
from draftwire.services.generation_client import GenerationClient

logger = logging.getLogger(__name__)


async def run_summary_stage(candidate: Candidate, client: GenerationClient) -> str:
    summary = await client.generate_summary(candidate.body)
    logger.info("Summarized document %s (%d chars)", candidate.id, len(summary))
    return summary
