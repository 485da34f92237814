"""Offline gateway that keeps published posts in a local JSON file."""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path

from blogdesk.cms.models import generate_slug
from blogdesk.editor.models import Post, StoredPost
from blogdesk.editor.publishers.base import PublishGateway
from blogdesk.errors import PublishError
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

POSTS_FILENAME = ".blogdesk-posts.json"


class LocalPostRecord(BaseModel):
    id: str
    slug: str
    post: Post


class _PostsFile(BaseModel):
    posts: list[LocalPostRecord] = Field(default_factory=list)


class LocalPublishGateway(PublishGateway):
    """Appends posts to a JSON file. Useful without a running CMS."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> _PostsFile:
        if not self.path.exists():
            return _PostsFile()
        try:
            return _PostsFile.model_validate(json.loads(self.path.read_text(encoding="utf-8")))
        except (json.JSONDecodeError, ValueError, KeyError):
            logger.warning("Corrupt posts file at %s, starting fresh", self.path)
            return _PostsFile()

    def list_posts(self) -> list[LocalPostRecord]:
        return self._load().posts

    def publish(self, post: Post) -> StoredPost:
        data = self._load()
        record = LocalPostRecord(
            id=uuid.uuid4().hex,
            slug=generate_slug(post.title) or "post",
            post=post,
        )
        data.posts.append(record)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(data.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise PublishError(f"Could not write {self.path}: {exc}") from exc
        return StoredPost(id=record.id, slug=record.slug, title=post.title)
