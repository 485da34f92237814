"""Strapi CMS integration: config, query builder and REST client.

Shared by the CLI and the Strapi publish gateway so that neither layer
depends on the other.
"""

from __future__ import annotations

import json
import logging
import mimetypes
import os
import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path
from typing import Any

from blogdesk.cms.models import (
    AuthSession,
    Blog,
    BlogPage,
    BlogStatus,
    Category,
    Comment,
    CreateBlog,
    CreateComment,
    LoginCredentials,
    MediaFile,
    Pagination,
    Tag,
    UpdateBlog,
    User,
)
from blogdesk.errors import CMSError
from blogdesk.integrations.session import AuthSessionStore
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:1337"
BLOG_POPULATE = ["coverImage", "categories", "tags"]
# Strapi caps pageSize at 100 unless the server raises maxLimit.
LIST_PAGE_SIZE = 100


class StrapiConfig(BaseModel):
    """Connection settings for a Strapi instance."""

    url: str = DEFAULT_URL
    api_token: str = ""
    timeout: float = 30.0

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    @classmethod
    def from_env(cls) -> StrapiConfig:
        """Create config from environment variables."""
        return cls(
            url=os.environ.get("STRAPI_URL", DEFAULT_URL),
            api_token=os.environ.get("STRAPI_API_TOKEN", ""),
        )


# ---------------------------------------------------------------------------
# Query builder
# ---------------------------------------------------------------------------


def _encode_value(value: Any) -> str:
    if isinstance(value, bool):
        value = "true" if value else "false"
    return urllib.parse.quote(str(value), safe="")


def _flatten(prefix: str, value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, dict):
        pairs: list[str] = []
        for key, child in value.items():
            pairs.extend(_flatten(f"{prefix}[{key}]" if prefix else str(key), child))
        return pairs
    if isinstance(value, (list, tuple)):
        pairs = []
        for i, child in enumerate(value):
            pairs.extend(_flatten(f"{prefix}[{i}]", child))
        return pairs
    return [f"{prefix}={_encode_value(value)}"]


def build_query(
    *,
    filters: dict[str, Any] | None = None,
    populate: str | list[str] | dict[str, Any] | None = None,
    sort: str | list[str] | None = None,
    pagination: dict[str, int] | None = None,
    fields: list[str] | None = None,
) -> str:
    """Encode Strapi query parameters in bracket notation.

    Keys are left literal and values are percent-encoded, e.g.
    ``filters[slug][$eq]=hello-world&sort[0]=publishedAt%3Adesc``.
    Parameters that are None or empty are omitted.
    """
    params = {
        "filters": filters or None,
        "populate": populate or None,
        "sort": sort or None,
        "pagination": pagination or None,
        "fields": fields or None,
    }
    return "&".join(_flatten("", {k: v for k, v in params.items() if v is not None}))


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class StrapiAPIClient:
    """Client for the Strapi content API.

    Public reads send the configured API token, if any. Writes that need
    a user send the JWT from the injected session store. There is no
    retry policy: every failure surfaces as ``CMSError``.
    """

    def __init__(
        self,
        config: StrapiConfig,
        session_store: AuthSessionStore | None = None,
    ) -> None:
        self.config = config
        self.base_url = config.url.rstrip("/")
        self.session_store = session_store

    # ── Transport ────────────────────────────────────────────────

    def _auth_header(self, use_auth: bool) -> dict[str, str]:
        if use_auth and self.session_store is not None:
            session = self.session_store.load()
            if session is not None:
                return {"Authorization": f"Bearer {session.jwt}"}
        if not use_auth and self.config.api_token:
            return {"Authorization": f"Bearer {self.config.api_token}"}
        return {}

    def _request(
        self,
        method: str,
        path: str,
        data: dict | None = None,
        *,
        query: str = "",
        use_auth: bool = False,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Make a request to ``/api{path}`` and return the decoded JSON body."""
        url = f"{self.base_url}/api{path}"
        if query:
            url = f"{url}?{query}"

        all_headers = {"Content-Type": "application/json"}
        all_headers.update(self._auth_header(use_auth))
        if headers:
            all_headers.update(headers)

        body = json.dumps(data).encode("utf-8") if data is not None else None
        req = urllib.request.Request(url, data=body, method=method, headers=all_headers)
        return self._send(req)

    def _request_multipart(self, path: str, file_path: Path, field: str = "files") -> Any:
        """Upload a file via multipart form POST.

        Args:
            path: API endpoint path (e.g. "/upload").
            file_path: Local file to upload.
            field: Form field name for the file.

        Returns:
            Parsed JSON response from Strapi.
        """
        url = f"{self.base_url}/api{path}"
        boundary = "----BlogdeskUploadBoundary"
        content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"

        disposition = (
            f'Content-Disposition: form-data; name="{field}";'
            f' filename="{file_path.name}"\r\n'
        )
        body_parts: list[bytes] = [
            f"--{boundary}\r\n".encode(),
            disposition.encode(),
            f"Content-Type: {content_type}\r\n\r\n".encode(),
            file_path.read_bytes(),
            f"\r\n--{boundary}--\r\n".encode(),
        ]

        headers = {"Content-Type": f"multipart/form-data; boundary={boundary}"}
        headers.update(self._auth_header(use_auth=True))
        req = urllib.request.Request(
            url,
            data=b"".join(body_parts),
            method="POST",
            headers=headers,
        )
        return self._send(req)

    def _send(self, req: urllib.request.Request) -> Any:
        logger.debug("%s %s", req.get_method(), req.full_url)
        try:
            with urllib.request.urlopen(req, timeout=self.config.timeout) as resp:
                raw = resp.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            raise self._error_from_response(exc) from exc
        except urllib.error.URLError as exc:
            raise CMSError(f"Could not reach CMS at {self.base_url}: {exc.reason}") from exc
        return json.loads(raw) if raw else None

    @staticmethod
    def _error_from_response(exc: urllib.error.HTTPError) -> CMSError:
        """Build a CMSError from Strapi's ``{"error": {...}}`` body."""
        try:
            payload = json.loads(exc.read().decode("utf-8"))
            error = payload.get("error") or {}
            message = error.get("message") or "An error occurred"
            name = error.get("name", "")
        except (json.JSONDecodeError, UnicodeDecodeError, AttributeError):
            message, name = "An error occurred", ""
        return CMSError(message, status=exc.code, name=name)

    # ── Blogs ────────────────────────────────────────────────────

    def get_blogs(
        self,
        page: int = 1,
        page_size: int = 10,
        search: str | None = None,
        category: str | None = None,
        tag: str | None = None,
        status: BlogStatus | str | None = None,
    ) -> BlogPage:
        """List blogs, newest first.

        Args:
            page: 1-based page number.
            page_size: Results per page.
            search: Case-insensitive match on title, excerpt or content.
            category: Category slug.
            tag: Tag slug.
            status: "draft" or "published".
        """
        filters: dict[str, Any] = {}
        if search:
            filters["$or"] = [
                {"title": {"$containsi": search}},
                {"excerpt": {"$containsi": search}},
                {"content": {"$containsi": search}},
            ]
        if category:
            filters["categories"] = {"slug": {"$eq": category}}
        if tag:
            filters["tags"] = {"slug": {"$eq": tag}}
        if status:
            filters["status"] = {"$eq": str(status)}

        query = build_query(
            filters=filters,
            populate=BLOG_POPULATE,
            sort=["publishedAt:desc"],
            pagination={"page": page or 1, "pageSize": page_size or 10},
        )
        result = self._request("GET", "/blogs", query=query)
        meta = result.get("meta") or {}
        return BlogPage(
            data=[Blog.model_validate(item) for item in result.get("data") or []],
            pagination=Pagination.model_validate(meta.get("pagination") or {}),
        )

    def get_blog_by_slug(self, slug: str) -> Blog | None:
        """Return the blog with this slug, or None."""
        query = build_query(filters={"slug": {"$eq": slug}}, populate=BLOG_POPULATE)
        result = self._request("GET", "/blogs", query=query)
        data = result.get("data") or []
        return Blog.model_validate(data[0]) if data else None

    def create_blog(self, data: CreateBlog) -> Blog:
        result = self._request("POST", "/blogs", {"data": data.to_payload()}, use_auth=True)
        return Blog.model_validate(result["data"])

    def update_blog(self, document_id: str, data: UpdateBlog) -> Blog:
        result = self._request(
            "PUT", f"/blogs/{document_id}", {"data": data.to_payload()}, use_auth=True
        )
        return Blog.model_validate(result["data"])

    def delete_blog(self, document_id: str) -> None:
        self._request("DELETE", f"/blogs/{document_id}", use_auth=True)

    # ── Taxonomy ─────────────────────────────────────────────────

    def _get_all(self, path: str) -> list[dict[str, Any]]:
        """Fetch every page of a collection, sorted by name."""
        items: list[dict[str, Any]] = []
        page = 1
        while True:
            query = build_query(
                sort=["name:asc"],
                pagination={"page": page, "pageSize": LIST_PAGE_SIZE},
            )
            result = self._request("GET", path, query=query)
            items.extend(result.get("data") or [])
            meta = result.get("meta") or {}
            pagination = Pagination.model_validate(meta.get("pagination") or {})
            if page >= pagination.page_count:
                return items
            page += 1

    def get_categories(self) -> list[Category]:
        return [Category.model_validate(item) for item in self._get_all("/categories")]

    def get_tags(self) -> list[Tag]:
        return [Tag.model_validate(item) for item in self._get_all("/tags")]

    # ── Comments ─────────────────────────────────────────────────

    def get_comments(self, blog_id: int) -> list[Comment]:
        """Approved comments on a blog, newest first."""
        query = build_query(
            filters={"blog": {"id": {"$eq": blog_id}}, "approved": {"$eq": True}},
            sort=["createdAt:desc"],
        )
        result = self._request("GET", "/comments", query=query)
        return [Comment.model_validate(item) for item in result.get("data") or []]

    def create_comment(self, data: CreateComment) -> Comment:
        """Submit a comment. It stays hidden until a moderator approves it."""
        result = self._request("POST", "/comments", {"data": data.to_payload()})
        return Comment.model_validate(result["data"])

    # ── Media ────────────────────────────────────────────────────

    def upload_media(self, file_path: Path) -> list[MediaFile]:
        """Upload a file to the media library.

        Raises:
            CMSError: If the upload is rejected or the CMS is unreachable.
        """
        result = self._request_multipart("/upload", file_path)
        return [MediaFile.model_validate(item) for item in result or []]

    def media_url(self, url: str) -> str:
        """Absolute URL for a media path returned by the CMS."""
        if url.startswith("http"):
            return url
        return f"{self.base_url}{url}"

    # ── Auth ─────────────────────────────────────────────────────

    def login(self, identifier: str, password: str) -> AuthSession:
        """Log in with local credentials and remember the session.

        Raises:
            pydantic.ValidationError: If the credentials are malformed.
            CMSError: If the CMS rejects them.
        """
        creds = LoginCredentials(identifier=identifier, password=password)
        url = f"{self.base_url}/api/auth/local"
        req = urllib.request.Request(
            url,
            data=json.dumps(creds.model_dump()).encode("utf-8"),
            method="POST",
            headers={"Content-Type": "application/json"},
        )
        session = AuthSession.model_validate(self._send(req))
        if self.session_store is not None:
            self.session_store.save(session)
        logger.info("Logged in as %s", session.user.username)
        return session

    def logout(self) -> None:
        if self.session_store is not None:
            self.session_store.clear()

    @property
    def is_authenticated(self) -> bool:
        return self.session_store is not None and self.session_store.load() is not None

    @property
    def current_user(self) -> User | None:
        if self.session_store is None:
            return None
        session = self.session_store.load()
        return session.user if session else None
