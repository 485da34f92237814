"""Base class for draft exporters."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

from blogdesk.editor.models import ContentBlock, Draft

_UNSAFE_FILENAME_RE = re.compile(r"[/\\\x00]")


class DraftExporter(ABC):
    """Turns a draft into a single text document.

    Exporters are pure: the same draft always yields the same string,
    and nothing is written anywhere.
    """

    extension: str = ""
    separator: str = "\n"

    @abstractmethod
    def render_title(self, title: str) -> str:
        """Render the document title."""

    @abstractmethod
    def render_subtitle(self, subtitle: str) -> str:
        """Render a non-empty subtitle."""

    @abstractmethod
    def render_block(self, block: ContentBlock) -> str:
        """Render one content block."""

    def export(self, draft: Draft) -> str:
        parts = [self.render_title(draft.title)]
        if draft.subtitle:
            parts.append(self.render_subtitle(draft.subtitle))
        parts.extend(self.render_block(block) for block in draft.blocks)
        return self.separator.join(parts)

    def filename(self, title: str) -> str:
        """Download name for an exported draft."""
        stem = _UNSAFE_FILENAME_RE.sub("-", title.strip()) or "post"
        return f"{stem}.{self.extension}"
