"""Base class for publish gateways."""

from __future__ import annotations

from abc import ABC, abstractmethod

from blogdesk.editor.models import Post, StoredPost


class PublishGateway(ABC):
    """Stores a finished post somewhere durable."""

    @abstractmethod
    def publish(self, post: Post) -> StoredPost:
        """Store the post and return its stored representation.

        Raises:
            PublishError: If the post could not be stored.
        """
