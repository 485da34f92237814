"""Publish gateway factory."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from blogdesk.editor.publishers.base import PublishGateway
from blogdesk.integrations.strapi import StrapiAPIClient


class PublishBackend(StrEnum):
    """Where published posts go."""

    STRAPI = "strapi"
    LOCAL = "local"


def create_gateway(
    backend: PublishBackend | str,
    *,
    client: StrapiAPIClient | None = None,
    local_path: Path | None = None,
) -> PublishGateway:
    """Create a publish gateway.

    Args:
        backend: Target backend.
        client: Required for the Strapi backend.
        local_path: Posts file for the local backend.

    Raises:
        ValueError: If the backend is unknown or its dependency is missing.
    """
    if isinstance(backend, str):
        backend = PublishBackend(backend)

    from blogdesk.editor.publishers.local import POSTS_FILENAME, LocalPublishGateway
    from blogdesk.editor.publishers.strapi import StrapiPublishGateway

    if backend == PublishBackend.STRAPI:
        if client is None:
            raise ValueError("The strapi backend needs a StrapiAPIClient")
        return StrapiPublishGateway(client)
    return LocalPublishGateway(local_path or Path(POSTS_FILENAME))
