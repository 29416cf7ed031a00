"""Turn generated documents into titles and HTML bodies."""

from __future__ import annotations

import html
import logging
import re

import markdown

from draftwire.errors import FormattingError, NoTitleFound

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ["extra", "sane_lists"]

# A level-1 heading: exactly one "#" followed by text.
_TITLE_LINE = re.compile(r"^#(?!#)[ \t]*(\S[^\n]*)$\n?", re.MULTILINE)

# Possible sentence boundary: terminal punctuation that is not the tail of an
# ellipsis, followed by whitespace. It splits only before an uppercase letter.
_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])(?<!\.\.)\s+")

_TRAILING_PERIODS = re.compile(r"[\s.]+$")

_PARAGRAPH_TAG = re.compile(r"</?p\s*>", re.IGNORECASE)


def extract_title_and_body(raw_document: str) -> tuple[str, str]:
    """Split a generated document into its ``# Title`` heading and the remaining body.

    Raises:
        NoTitleFound: If no level-1 heading with text exists.
    """
    match = _TITLE_LINE.search(raw_document or "")
    if match is None:
        raise NoTitleFound("Generated document has no '# Title' heading")

    title = match.group(1).strip().strip("*").strip()
    if not title:
        raise NoTitleFound("Generated document heading has no title text")

    body = raw_document[: match.start()] + raw_document[match.end() :]
    return title, body.strip()


def render_markup(markdown_body: str) -> str:
    """Convert a markdown body into block-level HTML."""
    try:
        return markdown.markdown(markdown_body, extensions=MARKDOWN_EXTENSIONS, output_format="html")
    except Exception as exc:
        logger.error("Markdown conversion failed: %s", exc)
        raise FormattingError(f"Markdown conversion failed: {exc!s}") from exc


def _split_sentences(line: str) -> list[str]:
    parts: list[str] = []
    start = 0
    for match in _SENTENCE_BOUNDARY.finditer(line):
        if match.end() < len(line) and line[match.end()].isupper():
            parts.append(line[start : match.start()])
            start = match.end()
    parts.append(line[start:])
    return parts


def _sentences(line: str) -> list[str]:
    fragments = [part.strip() for part in _split_sentences(line)]
    fragments = [part for part in fragments if part]
    kept: list[str] = []
    for index, fragment in enumerate(fragments):
        is_last = index == len(fragments) - 1
        if len(fragment.split()) < 2 and not is_last:
            continue
        sentence = _TRAILING_PERIODS.sub("", fragment)
        if sentence:
            kept.append(sentence + ".")
    return kept


def reflow_plain_text(text: str) -> str:
    """Reflow plain draft text into one ``<p>`` per sentence.

    Applying this to its own output returns the output unchanged.
    """
    normalized = html.unescape(_PARAGRAPH_TAG.sub("\n", text or ""))
    paragraphs: list[str] = []
    for line in normalized.splitlines():
        line = line.strip()
        if not line:
            continue
        for sentence in _sentences(line):
            paragraphs.append(f"<p>{html.escape(sentence, quote=False)}</p>")
    return "\n".join(paragraphs)
