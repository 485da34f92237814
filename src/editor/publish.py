"""Turn a draft into a post and hand it to a publish gateway."""

from __future__ import annotations

import logging
import math
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from blogdesk.editor.models import (
    DEFAULT_CATEGORY,
    EXCERPT_LENGTH,
    READ_SPEED_CHARS_PER_MINUTE,
    Draft,
    ParagraphBlock,
    Post,
    PublishMetadata,
    StoredPost,
)

if TYPE_CHECKING:
    from blogdesk.editor.autosave import AutosaveScheduler
    from blogdesk.editor.publishers.base import PublishGateway
    from blogdesk.editor.services import DraftStorage
    from blogdesk.editor.store import DraftStore

logger = logging.getLogger(__name__)


def derive_excerpt(draft: Draft) -> str:
    """Subtitle, else the start of the first paragraph, else empty."""
    if draft.subtitle:
        return draft.subtitle
    for block in draft.blocks:
        if isinstance(block, ParagraphBlock):
            return block.content[:EXCERPT_LENGTH]
    return ""


def estimate_read_time(draft: Draft) -> int:
    """Minutes to read, counting 200 characters of block text per minute."""
    return math.ceil(draft.content_length / READ_SPEED_CHARS_PER_MINUTE)


def build_post(
    draft: Draft,
    metadata: PublishMetadata | None = None,
    now: datetime | None = None,
) -> Post:
    metadata = metadata or PublishMetadata()
    return Post(
        title=draft.title,
        subtitle=draft.subtitle,
        blocks=list(draft.blocks),
        tags=list(metadata.tags),
        excerpt=derive_excerpt(draft),
        read_time_minutes=estimate_read_time(draft),
        category=metadata.tags[0] if metadata.tags else DEFAULT_CATEGORY,
        canonical_link=metadata.canonical_link or None,
        created_at=now or datetime.now(UTC),
    )


def publish_draft(
    store: DraftStore,
    storage: DraftStorage,
    gateway: PublishGateway,
    metadata: PublishMetadata | None = None,
    scheduler: AutosaveScheduler | None = None,
) -> StoredPost:
    """Publish the current draft.

    The local draft is cleared only after the gateway confirms the post
    was stored. On failure the error propagates and neither the store
    nor the stored draft is touched.

    Raises:
        PublishError: If the gateway could not store the post.
    """
    post = build_post(store.snapshot(), metadata)
    stored = gateway.publish(post)
    if scheduler is not None:
        scheduler.cancel()
    storage.clear()
    logger.info("Published %r as %s", post.title, stored.id)
    return stored
