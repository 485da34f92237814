"""Markdown exporter."""

from __future__ import annotations

from blogdesk.editor.exporters.base import DraftExporter
from blogdesk.editor.models import ContentBlock, ImageBlock


class MarkdownExporter(DraftExporter):
    """Blocks separated by a blank line."""

    extension = "md"
    separator = "\n\n"

    def render_title(self, title: str) -> str:
        return f"# {title}"

    def render_subtitle(self, subtitle: str) -> str:
        return subtitle

    def render_block(self, block: ContentBlock) -> str:
        if isinstance(block, ImageBlock):
            return f"![{block.content.caption}]({block.content.url})"
        if block.kind == "heading":
            return f"## {block.content}"
        if block.kind == "quote":
            return f"> {block.content}"
        if block.kind == "code":
            return f"```\n{block.content}\n```"
        return block.content
