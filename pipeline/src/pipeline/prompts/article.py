"""Article directive builder."""

from __future__ import annotations


def build_article_prompt(summary: str) -> str:
    return f"""Using the summary below, write a complete, original article on the same topic.
The first line must be a level-1 Markdown heading with the article title, in the form "# Title".
Structure the remaining content with Markdown: section headings, paragraphs and lists where useful.
Do not mention the summary or these instructions.

SUMMARY:
{summary.strip()}"""
