"""Tests for CMS records and write schemas."""

import pytest
from pydantic import ValidationError

from blogdesk.cms.models import (
    Blog,
    BlogStatus,
    Comment,
    CreateBlog,
    CreateComment,
    LoginCredentials,
    UpdateBlog,
    calculate_reading_time,
    generate_slug,
)


class TestReadModels:
    def test_flat_v5_blog(self):
        blog = Blog.model_validate(
            {
                "id": 1,
                "documentId": "abc",
                "title": "Hello",
                "slug": "hello",
                "status": "published",
                "publishedAt": "2026-02-01T10:00:00.000Z",
                "coverImage": {"id": 5, "url": "/uploads/a.png"},
                "categories": [{"id": 2, "name": "News", "slug": "news"}],
                "tags": [{"id": 3, "name": "Py", "slug": "py"}],
            }
        )
        assert blog.document_id == "abc"
        assert blog.status == BlogStatus.PUBLISHED
        assert blog.cover_image.url == "/uploads/a.png"
        assert blog.categories[0].slug == "news"
        assert blog.published_at.year == 2026

    def test_v4_attributes_are_flattened(self):
        comment = Comment.model_validate(
            {
                "id": 9,
                "attributes": {
                    "author": "Ann",
                    "email": "ann@example.com",
                    "content": "Nice",
                    "approved": True,
                    "createdAt": "2026-02-01T10:00:00Z",
                },
            }
        )
        assert comment.id == 9
        assert comment.author == "Ann"
        assert comment.approved is True

    def test_reading_time(self):
        blog = Blog(id=1, title="t", slug="t", content="word " * 401)
        assert blog.reading_time == 3


class TestCreateBlog:
    def _valid(self, **kwargs) -> dict:
        data = {"title": "Hello", "slug": "hello-world", "excerpt": "Short"}
        data.update(kwargs)
        return data

    def test_defaults(self):
        blog = CreateBlog(**self._valid())
        assert blog.status == BlogStatus.DRAFT
        assert blog.content == ""

    def test_payload_uses_api_names(self):
        payload = CreateBlog(**self._valid(cover_image=4, tags=[1, 2])).to_payload()
        assert payload == {
            "title": "Hello",
            "slug": "hello-world",
            "excerpt": "Short",
            "content": "",
            "coverImage": 4,
            "status": "draft",
            "tags": [1, 2],
        }

    @pytest.mark.parametrize(
        "field,value",
        [
            ("title", ""),
            ("title", "x" * 101),
            ("slug", ""),
            ("slug", "Hello World"),
            ("slug", "double--hyphen"),
            ("slug", "-leading"),
            ("excerpt", ""),
            ("excerpt", "x" * 301),
        ],
    )
    def test_rejects_invalid(self, field, value):
        with pytest.raises(ValidationError):
            CreateBlog(**self._valid(**{field: value}))

    def test_slug_message(self):
        with pytest.raises(ValidationError, match="lowercase with hyphens"):
            CreateBlog(**self._valid(slug="Bad Slug"))


class TestUpdateBlog:
    def test_all_optional(self):
        assert UpdateBlog().to_payload() == {}

    def test_partial_payload(self):
        assert UpdateBlog(title="New").to_payload() == {"title": "New"}

    def test_constraints_still_apply(self):
        with pytest.raises(ValidationError):
            UpdateBlog(slug="Not A Slug")


class TestCreateComment:
    def test_payload_is_unapproved(self):
        data = CreateComment(author="Ann", email="ann@example.com", content="Hi", blog=3)
        assert data.to_payload() == {
            "author": "Ann",
            "email": "ann@example.com",
            "content": "Hi",
            "blog": 3,
            "approved": False,
        }

    def test_bad_email(self):
        with pytest.raises(ValidationError, match="Invalid email"):
            CreateComment(author="Ann", email="not-an-email", content="Hi", blog=3)

    def test_length_limits(self):
        with pytest.raises(ValidationError):
            CreateComment(author="", email="a@b.co", content="Hi", blog=1)
        with pytest.raises(ValidationError):
            CreateComment(author="A", email="a@b.co", content="x" * 1001, blog=1)


class TestLoginCredentials:
    def test_short_password(self):
        with pytest.raises(ValidationError):
            LoginCredentials(identifier="me", password="12345")

    def test_valid(self):
        assert LoginCredentials(identifier="me", password="123456").identifier == "me"


class TestHelpers:
    @pytest.mark.parametrize(
        "title,slug",
        [
            ("Hello World", "hello-world"),
            ("  Hello, World!  ", "hello-world"),
            ("snake_case and  spaces", "snake-case-and-spaces"),
            ("--Edges--", "edges"),
            ("Café au lait", "caf-au-lait"),
        ],
    )
    def test_generate_slug(self, title, slug):
        assert generate_slug(title) == slug

    def test_reading_time(self):
        assert calculate_reading_time("one two three") == 1
        assert calculate_reading_time(" ".join(["w"] * 400)) == 2
