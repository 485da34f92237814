"""Tests for HTML and Markdown export."""

import pytest

from blogdesk.editor.exporters import (
    ExportFormat,
    HtmlExporter,
    MarkdownExporter,
    create_exporter,
    export_filename,
    export_html,
    export_markdown,
)
from blogdesk.editor.models import (
    CodeBlock,
    Draft,
    HeadingBlock,
    ImageBlock,
    ImageContent,
    ParagraphBlock,
    QuoteBlock,
)


def _full_draft(**kwargs) -> Draft:
    defaults = {
        "title": "My Post",
        "subtitle": "A subtitle",
        "blocks": [
            ParagraphBlock(content="Intro text"),
            HeadingBlock(content="Section"),
            QuoteBlock(content="Wise words"),
            CodeBlock(content="print('hi')"),
            ImageBlock(content=ImageContent(url="https://img/a.png", caption="An image")),
        ],
    }
    defaults.update(kwargs)
    return Draft(**defaults)


class TestMarkdown:
    def test_every_block_kind(self):
        assert export_markdown(_full_draft()) == (
            "# My Post\n\n"
            "A subtitle\n\n"
            "Intro text\n\n"
            "## Section\n\n"
            "> Wise words\n\n"
            "```\nprint('hi')\n```\n\n"
            "![An image](https://img/a.png)"
        )

    def test_body_without_subtitle(self):
        draft = Draft(
            title="T",
            blocks=[ParagraphBlock(content="hello"), HeadingBlock(content="Title")],
        )
        assert export_markdown(draft) == "# T\n\nhello\n\n## Title"

    def test_empty_subtitle_is_skipped(self):
        assert "\n\n\n" not in export_markdown(_full_draft(subtitle=""))


class TestHtml:
    def test_every_block_kind(self):
        assert export_html(_full_draft()) == (
            "<h1>My Post</h1>\n"
            "<p>A subtitle</p>\n"
            "<p>Intro text</p>\n"
            "<h2>Section</h2>\n"
            "<blockquote>Wise words</blockquote>\n"
            "<pre><code>print('hi')</code></pre>\n"
            '<img src="https://img/a.png" alt="An image">'
        )

    def test_paragraph_then_heading(self):
        draft = Draft(
            title="T",
            blocks=[ParagraphBlock(content="hello"), HeadingBlock(content="Title")],
        )
        html = export_html(draft)
        assert html.index("<p>hello</p>") < html.index("<h2>Title</h2>")
        assert html == "<h1>T</h1>\n<p>hello</p>\n<h2>Title</h2>"


class TestDeterminism:
    @pytest.mark.parametrize("fmt", list(ExportFormat))
    def test_same_draft_same_output(self, fmt):
        draft = _full_draft()
        exporter = create_exporter(fmt)
        assert exporter.export(draft) == exporter.export(draft)


class TestFactoryAndFilenames:
    def test_create_exporter(self):
        assert isinstance(create_exporter("html"), HtmlExporter)
        assert isinstance(create_exporter(ExportFormat.MARKDOWN), MarkdownExporter)

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            create_exporter("pdf")

    def test_filenames(self):
        assert export_filename("My Post", "html") == "My Post.html"
        assert export_filename("My Post", "markdown") == "My Post.md"

    def test_untitled_and_unsafe(self):
        assert export_filename("  ", "markdown") == "post.md"
        assert export_filename("a/b\\c", "html") == "a-b-c.html"
