"""Tests for title extraction, markdown rendering and plain-text reflow."""

import pytest
from draftwire.errors import FormattingError, NoTitleFound
from draftwire.services import content_formatter
from draftwire.services.content_formatter import (
    extract_title_and_body,
    reflow_plain_text,
    render_markup,
)


class TestExtractTitleAndBody:
    def test_simple_document(self):
        title, body = extract_title_and_body("# Hello World\nBody text.")
        assert title == "Hello World"
        assert body == "Body text."

    def test_heading_emphasis_is_stripped(self):
        title, body = extract_title_and_body("## Sub\n# **Main Title**\nText")
        assert title == "Main Title"
        assert body == "## Sub\nText"

    def test_only_first_heading_is_removed(self):
        raw = "# First\n\nIntro paragraph.\n\n# Second\n\nMore."
        title, body = extract_title_and_body(raw)
        assert title == "First"
        assert body == "Intro paragraph.\n\n# Second\n\nMore."

    def test_body_is_trimmed(self):
        title, body = extract_title_and_body("\n\n# Title  \n\n\nParagraph one.\n\n")
        assert title == "Title"
        assert body == "Paragraph one."

    @pytest.mark.parametrize(
        "raw",
        [
            "No heading at all.",
            "## Only a subheading\nText",
            "",
        ],
    )
    def test_missing_heading(self, raw):
        with pytest.raises(NoTitleFound):
            extract_title_and_body(raw)

    def test_heading_without_space_after_hash(self):
        title, _ = extract_title_and_body("#Compact\nBody")
        assert title == "Compact"

    def test_heading_without_text(self):
        with pytest.raises(NoTitleFound):
            extract_title_and_body("# ****\nBody")

    def test_no_title_found_is_formatting_error(self):
        with pytest.raises(FormattingError) as exc_info:
            extract_title_and_body("plain text")
        assert exc_info.value.kind == "no_title_found"


class TestRenderMarkup:
    def test_block_level_html(self):
        html = render_markup("## Section\n\nSome *emphasis* here.\n\n- one\n- two")
        assert "<h2>Section</h2>" in html
        assert "<p>Some <em>emphasis</em> here.</p>" in html
        assert "<li>one</li>" in html

    def test_empty_body(self):
        assert render_markup("") == ""

    def test_conversion_failure_is_formatting_error(self, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("parser exploded")

        monkeypatch.setattr(content_formatter.markdown, "markdown", boom)
        with pytest.raises(FormattingError) as exc_info:
            render_markup("text")
        assert exc_info.value.kind == "formatting"
        assert "parser exploded" in str(exc_info.value)


class TestReflowPlainText:
    def test_one_paragraph_per_sentence(self):
        assert reflow_plain_text("The tide rose. The boats moved.") == (
            "<p>The tide rose.</p>\n<p>The boats moved.</p>"
        )

    def test_single_word_fragments_are_dropped(self):
        out = reflow_plain_text("The tide rose. Yes. The boats moved.")
        assert out == "<p>The tide rose.</p>\n<p>The boats moved.</p>"

    def test_last_fragment_kept_even_if_short(self):
        assert reflow_plain_text("It rained all day. Finally") == (
            "<p>It rained all day.</p>\n<p>Finally.</p>"
        )

    def test_ellipsis_does_not_split(self):
        out = reflow_plain_text("He paused... Then he left the room.")
        assert out == "<p>He paused... Then he left the room.</p>"

    def test_exactly_one_terminal_period(self):
        assert reflow_plain_text("It ended here..") == "<p>It ended here.</p>"

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Hello world. .", "<p>Hello world.</p>"),
            ("Done here . .", "<p>Done here.</p>"),
            ("It ended . . .", "<p>It ended.</p>"),
        ],
    )
    def test_spaced_trailing_periods_collapse_to_one(self, text, expected):
        assert reflow_plain_text(text) == expected

    def test_splits_before_non_ascii_capital(self):
        assert reflow_plain_text("Il pleut encore. Émile part demain.") == (
            "<p>Il pleut encore.</p>\n<p>Émile part demain.</p>"
        )

    def test_lines_are_handled_separately(self):
        out = reflow_plain_text("First line here\n\nsecond line is lowercase")
        assert out == "<p>First line here.</p>\n<p>second line is lowercase.</p>"

    def test_markup_characters_are_escaped(self):
        assert reflow_plain_text("Fish & chips are <great> food.") == (
            "<p>Fish &amp; chips are &lt;great&gt; food.</p>"
        )

    @pytest.mark.parametrize(
        "text",
        [
            "The tide rose. Yes. The boats moved.",
            "He paused... Then he left the room.",
            "Fish & chips are <great> food. Salt helps.",
            "Line one is here.\nLine two follows it.",
            "Hello world. .",
            "Done here . .",
            "It ended . . .",
            "Il pleut encore. Émile part demain.",
            "",
        ],
    )
    def test_idempotent(self, text):
        once = reflow_plain_text(text)
        assert reflow_plain_text(once) == once

    def test_empty_input(self):
        assert reflow_plain_text("") == ""
        assert reflow_plain_text("   \n\n ") == ""
