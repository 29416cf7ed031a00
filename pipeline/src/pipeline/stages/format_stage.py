"""Format stage - render the article body as HTML."""

from __future__ import annotations

from draftwire.services.content_formatter import reflow_plain_text, render_markup


async def run_format_stage(body_markdown: str, article_format: str = "markdown") -> str:
    if article_format == "plain":
        return reflow_plain_text(body_markdown)
    return render_markup(body_markdown)
