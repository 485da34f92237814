"""Draft exporter factory and convenience functions."""

from __future__ import annotations

from enum import StrEnum

from blogdesk.editor.exporters.base import DraftExporter
from blogdesk.editor.exporters.html import HtmlExporter
from blogdesk.editor.exporters.markdown import MarkdownExporter
from blogdesk.editor.models import Draft


class ExportFormat(StrEnum):
    """Supported export formats."""

    HTML = "html"
    MARKDOWN = "markdown"


def create_exporter(fmt: ExportFormat | str) -> DraftExporter:
    """Create an exporter for the given format.

    Raises:
        ValueError: If the format is unknown.
    """
    if isinstance(fmt, str):
        fmt = ExportFormat(fmt)

    exporters: dict[ExportFormat, DraftExporter] = {
        ExportFormat.HTML: HtmlExporter(),
        ExportFormat.MARKDOWN: MarkdownExporter(),
    }
    return exporters[fmt]


def export_html(draft: Draft) -> str:
    return HtmlExporter().export(draft)


def export_markdown(draft: Draft) -> str:
    return MarkdownExporter().export(draft)


def export_filename(title: str, fmt: ExportFormat | str) -> str:
    return create_exporter(fmt).filename(title)


__all__ = [
    "DraftExporter",
    "ExportFormat",
    "HtmlExporter",
    "MarkdownExporter",
    "create_exporter",
    "export_filename",
    "export_html",
    "export_markdown",
]
