"""Publish gateway backed by the Strapi content API."""

from __future__ import annotations

import logging

from blogdesk.cms.models import BlogStatus, Category, CreateBlog, Tag, generate_slug
from blogdesk.editor.exporters import export_markdown
from blogdesk.editor.models import Draft, Post, StoredPost
from blogdesk.editor.publishers.base import PublishGateway
from blogdesk.errors import CMSError, PublishError
from blogdesk.integrations.strapi import StrapiAPIClient
from pydantic import ValidationError

logger = logging.getLogger(__name__)

EXCERPT_MAX_LENGTH = 300


class StrapiPublishGateway(PublishGateway):
    """Creates a published blog entry from a post.

    The body is the Markdown export of the post. Tag names are matched
    against the CMS's existing tags by name or slug; names with no match
    are skipped. The post's category is matched against the CMS's
    categories the same way. Blog entries have no canonical link field,
    so ``Post.canonical_link`` is not sent.
    """

    def __init__(self, client: StrapiAPIClient) -> None:
        self._client = client

    @staticmethod
    def _index(records: list[Tag] | list[Category]) -> dict[str, int]:
        by_key = {r.name.lower(): r.id for r in records}
        by_key.update({r.slug: r.id for r in records})
        return by_key

    def _resolve_tags(self, names: list[str]) -> list[int]:
        if not names:
            return []
        by_key = self._index(self._client.get_tags())
        ids: list[int] = []
        for name in names:
            tag_id = by_key.get(name.lower()) or by_key.get(generate_slug(name))
            if tag_id is None:
                logger.warning("Tag '%s' does not exist in the CMS, skipping", name)
            elif tag_id not in ids:
                ids.append(tag_id)
        return ids

    def _resolve_category(self, name: str) -> int | None:
        if not name:
            return None
        by_key = self._index(self._client.get_categories())
        category_id = by_key.get(name.lower()) or by_key.get(generate_slug(name))
        if category_id is None:
            logger.info("Category '%s' does not exist in the CMS, publishing without one", name)
        return category_id

    def publish(self, post: Post) -> StoredPost:
        body = export_markdown(Draft(title=post.title, subtitle=post.subtitle, blocks=post.blocks))
        try:
            payload = CreateBlog(
                title=post.title,
                slug=generate_slug(post.title),
                excerpt=(post.excerpt or post.title)[:EXCERPT_MAX_LENGTH],
                content=body,
                status=BlogStatus.PUBLISHED,
            )
        except ValidationError as exc:
            raise PublishError(f"Post is not publishable: {exc}") from exc
        try:
            tag_ids = self._resolve_tags(post.tags)
            if tag_ids:
                payload = payload.model_copy(update={"tags": tag_ids})
            category_id = self._resolve_category(post.category)
            if category_id is not None:
                payload = payload.model_copy(update={"categories": [category_id]})
            blog = self._client.create_blog(payload)
        except CMSError as exc:
            raise PublishError(str(exc)) from exc
        return StoredPost(
            id=blog.document_id or str(blog.id),
            slug=blog.slug,
            title=blog.title,
        )
