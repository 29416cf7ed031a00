"""Article stage - expand the summary into a full article and split off its title."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from draftwire.schemas.documents import Candidate
from draftwire.services.content_formatter import extract_title_and_body
from draftwire.services.generation_client import GenerationClient

from pipeline.prompts.article import build_article_prompt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedArticle:
    raw: str
    title: str
    body_markdown: str


async def run_article_stage(
    candidate: Candidate,
    summary: str,
    client: GenerationClient,
    *,
    rewrite_title: bool = False,
) -> GeneratedArticle:
    raw = await client.generate_article(build_article_prompt(summary))
    title, body = extract_title_and_body(raw)

    if rewrite_title and candidate.title.strip():
        heading_title = title
        title = await client.generate_title_variant(candidate.title)
        logger.info("Title rewritten: '%s' -> '%s' (heading was '%s')", candidate.title, title, heading_title)

    return GeneratedArticle(raw=raw, title=title, body_markdown=body)
