"""Pure data models for the draft editor.

All Pydantic models and enums for drafts, blocks and publishing live
here. No I/O, no timers. The store, scheduler and services import from
this module; this module only imports from stdlib, pydantic and
blogdesk.errors.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal

from blogdesk.errors import TagLimitError
from pydantic import BaseModel, ConfigDict, Field

MAX_TAGS = 5
EXCERPT_LENGTH = 150
READ_SPEED_CHARS_PER_MINUTE = 200
DEFAULT_CATEGORY = "Article"


def new_block_id() -> str:
    """Return a fresh opaque block id."""
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


class BlockKind(StrEnum):
    """Kinds of content block a draft can hold."""

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    QUOTE = "quote"
    CODE = "code"
    IMAGE = "image"


class ImageContent(BaseModel):
    """Content of an image block."""

    model_config = ConfigDict(frozen=True)

    url: str = ""
    caption: str = ""


class _TextBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_block_id)
    content: str = ""

    @property
    def text_length(self) -> int:
        return len(self.content)


class ParagraphBlock(_TextBlock):
    kind: Literal["paragraph"] = "paragraph"


class HeadingBlock(_TextBlock):
    kind: Literal["heading"] = "heading"


class QuoteBlock(_TextBlock):
    kind: Literal["quote"] = "quote"


class CodeBlock(_TextBlock):
    kind: Literal["code"] = "code"


class ImageBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_block_id)
    kind: Literal["image"] = "image"
    content: ImageContent = Field(default_factory=ImageContent)

    @property
    def text_length(self) -> int:
        # Images carry no prose and do not count toward read time.
        return 0


ContentBlock = Annotated[
    ParagraphBlock | HeadingBlock | QuoteBlock | CodeBlock | ImageBlock,
    Field(discriminator="kind"),
]

_BLOCK_TYPES: dict[BlockKind, type[BaseModel]] = {
    BlockKind.PARAGRAPH: ParagraphBlock,
    BlockKind.HEADING: HeadingBlock,
    BlockKind.QUOTE: QuoteBlock,
    BlockKind.CODE: CodeBlock,
    BlockKind.IMAGE: ImageBlock,
}


def make_block(kind: BlockKind | str) -> ContentBlock:
    """Create a zero-valued block of the given kind with a fresh id.

    Raises:
        ValueError: If ``kind`` is not a known block kind.
    """
    return _BLOCK_TYPES[BlockKind(kind)]()


# ---------------------------------------------------------------------------
# Draft
# ---------------------------------------------------------------------------


class Draft(BaseModel):
    """Snapshot of an authoring session.

    Serializes as ``{title, subtitle, blocks, lastModified}``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = ""
    subtitle: str = ""
    blocks: list[ContentBlock] = Field(default_factory=list)
    last_modified: datetime | None = Field(default=None, alias="lastModified")

    @property
    def content_length(self) -> int:
        return sum(block.text_length for block in self.blocks)


# ---------------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------------


class PublishMetadata(BaseModel):
    """Transient publish-dialog state. Never stored with the draft."""

    tags: list[str] = Field(default_factory=list, max_length=MAX_TAGS)
    canonical_link: str | None = None

    def add_tag(self, tag: str) -> None:
        """Append a tag.

        Blank input is ignored. Duplicates are allowed.

        Raises:
            TagLimitError: If the post already has ``MAX_TAGS`` tags.
        """
        tag = tag.strip()
        if not tag:
            return
        if len(self.tags) >= MAX_TAGS:
            raise TagLimitError(f"A post can have at most {MAX_TAGS} tags")
        self.tags.append(tag)

    def remove_tag(self, tag: str) -> None:
        """Remove every occurrence of a tag."""
        self.tags = [t for t in self.tags if t != tag]


class Post(BaseModel):
    """Read-only publishable snapshot derived from a draft."""

    model_config = ConfigDict(frozen=True)

    title: str
    subtitle: str = ""
    blocks: list[ContentBlock] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    excerpt: str = ""
    read_time_minutes: int = 0
    category: str = DEFAULT_CATEGORY
    canonical_link: str | None = None
    created_at: datetime

    @property
    def read_time(self) -> str:
        return f"{self.read_time_minutes} min read"


class StoredPost(BaseModel):
    """What a publish gateway hands back after a successful store."""

    id: str
    slug: str = ""
    url: str = ""
    title: str = ""
