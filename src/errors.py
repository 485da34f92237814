"""Exception hierarchy shared across blogdesk."""

from __future__ import annotations


class BlogdeskError(Exception):
    """Base class for all blogdesk errors."""


class CMSError(BlogdeskError):
    """A call to the headless CMS failed.

    ``status`` is the HTTP status code, or 0 when the request never
    produced a response (DNS failure, refused connection, timeout).
    """

    def __init__(self, message: str, status: int = 0, name: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.name = name

    def __str__(self) -> str:
        if self.status:
            return f"{self.message} (HTTP {self.status})"
        return self.message


class PublishError(BlogdeskError):
    """The publish gateway could not store a post."""


class TagLimitError(BlogdeskError, ValueError):
    """Raised when adding a tag would exceed the per-post limit."""
