"""HTML exporter."""

from __future__ import annotations

from blogdesk.editor.exporters.base import DraftExporter
from blogdesk.editor.models import ContentBlock, ImageBlock


class HtmlExporter(DraftExporter):
    """One element per line. Block text is emitted as-is, so inline
    markup typed into a block survives the export."""

    extension = "html"
    separator = "\n"

    def render_title(self, title: str) -> str:
        return f"<h1>{title}</h1>"

    def render_subtitle(self, subtitle: str) -> str:
        return f"<p>{subtitle}</p>"

    def render_block(self, block: ContentBlock) -> str:
        if isinstance(block, ImageBlock):
            return f'<img src="{block.content.url}" alt="{block.content.caption}">'
        if block.kind == "heading":
            return f"<h2>{block.content}</h2>"
        if block.kind == "quote":
            return f"<blockquote>{block.content}</blockquote>"
        if block.kind == "code":
            return f"<pre><code>{block.content}</code></pre>"
        return f"<p>{block.content}</p>"
