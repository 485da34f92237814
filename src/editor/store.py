"""In-memory store for one authoring session.

Holds title, subtitle and the ordered block sequence. The sequence is
never empty: removing the last block leaves a single empty paragraph.
Listeners registered with ``subscribe`` run after every mutation, which
is how the autosave scheduler learns that something changed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from blogdesk.editor.models import (
    BlockKind,
    ContentBlock,
    Draft,
    ImageBlock,
    ImageContent,
    ParagraphBlock,
    make_block,
)

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class DraftStore:
    """Mutable owner of the current draft."""

    def __init__(
        self,
        title: str = "",
        subtitle: str = "",
        blocks: list[ContentBlock] | None = None,
    ) -> None:
        self._title = title
        self._subtitle = subtitle
        self._blocks: list[ContentBlock] = list(blocks) if blocks else [ParagraphBlock()]
        self._listeners: list[Listener] = []

    @classmethod
    def from_draft(cls, draft: Draft) -> DraftStore:
        return cls(title=draft.title, subtitle=draft.subtitle, blocks=draft.blocks)

    # ── Read access ──────────────────────────────────────────────

    @property
    def title(self) -> str:
        return self._title

    @property
    def subtitle(self) -> str:
        return self._subtitle

    @property
    def blocks(self) -> tuple[ContentBlock, ...]:
        return tuple(self._blocks)

    def get_block(self, block_id: str) -> ContentBlock | None:
        for block in self._blocks:
            if block.id == block_id:
                return block
        return None

    def snapshot(self) -> Draft:
        """Return an immutable copy of the current state."""
        return Draft(title=self._title, subtitle=self._subtitle, blocks=list(self._blocks))

    # ── Observers ────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()

    # ── Mutations ────────────────────────────────────────────────

    def set_title(self, text: str) -> None:
        self._title = text
        self._changed()

    def set_subtitle(self, text: str) -> None:
        self._subtitle = text
        self._changed()

    def add_block(self, kind: BlockKind | str, after_id: str | None = None) -> str:
        """Insert a zero-valued block and return its id.

        The block goes immediately after ``after_id``. When ``after_id`` is
        omitted or matches no block, it is appended at the end.
        """
        block = make_block(kind)
        index = self._index_of(after_id) if after_id is not None else None
        if index is None:
            self._blocks.append(block)
        else:
            self._blocks.insert(index + 1, block)
        self._changed()
        return block.id

    def update_block(self, block_id: str, content: str | ImageContent | dict) -> None:
        """Replace a block's content. Unknown ids are ignored.

        Text blocks take a string; image blocks take an ``ImageContent``
        (or a ``{"url", "caption"}`` mapping).

        Raises:
            ValueError: If the content shape does not match the block kind.
        """
        index = self._index_of(block_id)
        if index is None:
            logger.debug("update_block: no block with id %s", block_id)
            return
        block = self._blocks[index]
        if isinstance(block, ImageBlock):
            if isinstance(content, dict):
                content = ImageContent.model_validate(content)
            if not isinstance(content, ImageContent):
                raise ValueError("Image blocks take url/caption content")
        elif not isinstance(content, str):
            raise ValueError(f"{block.kind} blocks take text content")
        self._blocks[index] = block.model_copy(update={"content": content})
        self._changed()

    def delete_block(self, block_id: str) -> None:
        """Remove a block, keeping at least one paragraph in the document."""
        self._blocks = [b for b in self._blocks if b.id != block_id]
        if not self._blocks:
            self._blocks = [ParagraphBlock()]
        self._changed()

    def reset(self) -> None:
        """Return to an empty draft."""
        self._title = ""
        self._subtitle = ""
        self._blocks = [ParagraphBlock()]
        self._changed()

    def _index_of(self, block_id: str | None) -> int | None:
        for i, block in enumerate(self._blocks):
            if block.id == block_id:
                return i
        return None
