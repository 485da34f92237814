"""Pydantic models for Strapi content records and write payloads.

Read models accept both the flat Strapi v5 shape and the v4 shape that
nests fields under ``attributes``. Write schemas carry the same
constraints the authoring forms enforce, so invalid input is rejected
before any request is sent.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
WORDS_PER_MINUTE = 200


class BlogStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"


class _StrapiRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _flatten_attributes(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("attributes"), dict):
            flat = {k: v for k, v in data.items() if k != "attributes"}
            flat.update(data["attributes"])
            return flat
        return data


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------


class MediaFile(_StrapiRecord):
    id: int
    document_id: str = ""
    url: str
    name: str = ""
    mime: str = ""
    alternative_text: str | None = None
    width: int | None = None
    height: int | None = None


class Category(_StrapiRecord):
    id: int
    document_id: str = ""
    name: str
    slug: str
    description: str | None = None


class Tag(_StrapiRecord):
    id: int
    document_id: str = ""
    name: str
    slug: str


class Blog(_StrapiRecord):
    id: int
    document_id: str = ""
    title: str
    slug: str
    excerpt: str = ""
    content: str = ""
    cover_image: MediaFile | None = None
    status: BlogStatus = BlogStatus.DRAFT
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    categories: list[Category] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)

    @property
    def reading_time(self) -> int:
        return calculate_reading_time(self.content)


class Comment(_StrapiRecord):
    id: int
    author: str
    email: str = ""
    content: str
    approved: bool = False
    created_at: datetime | None = None


class User(_StrapiRecord):
    id: int
    username: str
    email: str = ""


class AuthSession(BaseModel):
    """Token and user returned by a successful login."""

    jwt: str
    user: User


class Pagination(_StrapiRecord):
    page: int = 1
    page_size: int = 10
    page_count: int = 0
    total: int = 0


class BlogPage(BaseModel):
    """One page of blog results."""

    data: list[Blog] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)


# ---------------------------------------------------------------------------
# Write schemas
# ---------------------------------------------------------------------------


def _check_slug(value: str | None) -> str | None:
    if value and not SLUG_RE.match(value):
        raise ValueError("Slug must be lowercase with hyphens only")
    return value


class CreateBlog(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(min_length=1, max_length=100)
    slug: str = Field(min_length=1)
    excerpt: str = Field(min_length=1, max_length=300)
    content: str = ""
    cover_image: int | None = None
    status: BlogStatus = BlogStatus.DRAFT
    categories: list[int] | None = None
    tags: list[int] | None = None

    @field_validator("slug")
    @classmethod
    def _valid_slug(cls, value: str | None) -> str | None:
        return _check_slug(value)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class UpdateBlog(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str | None = Field(default=None, min_length=1, max_length=100)
    slug: str | None = Field(default=None, min_length=1)
    excerpt: str | None = Field(default=None, min_length=1, max_length=300)
    content: str | None = None
    cover_image: int | None = None
    status: BlogStatus | None = None
    categories: list[int] | None = None
    tags: list[int] | None = None

    @field_validator("slug")
    @classmethod
    def _valid_slug(cls, value: str | None) -> str | None:
        return _check_slug(value)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CreateComment(BaseModel):
    author: str = Field(min_length=1, max_length=100)
    email: str
    content: str = Field(min_length=1, max_length=1000)
    blog: int

    @field_validator("email")
    @classmethod
    def _valid_email(cls, value: str) -> str:
        if not EMAIL_RE.match(value):
            raise ValueError("Invalid email address")
        return value

    def to_payload(self) -> dict[str, Any]:
        # New comments always wait for moderation.
        return {**self.model_dump(), "approved": False}


class LoginCredentials(BaseModel):
    identifier: str = Field(min_length=1)
    password: str = Field(min_length=6)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def generate_slug(title: str) -> str:
    """Derive a URL slug from a title.

    >>> generate_slug("  Hello, World_2 ")
    'hello-world-2'
    """
    slug = title.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


def calculate_reading_time(content: str) -> int:
    """Minutes to read ``content`` at 200 words per minute."""
    words = content.split()
    return math.ceil(len(words) / WORDS_PER_MINUTE)
