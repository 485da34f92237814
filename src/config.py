"""Unified configuration loaded from .blogdesk.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from blogdesk.editor.autosave import DEFAULT_AUTOSAVE_DELAY
from blogdesk.editor.publishers import PublishBackend
from blogdesk.editor.publishers.local import POSTS_FILENAME
from blogdesk.editor.services import DRAFT_FILENAME
from blogdesk.integrations.session import SESSION_FILENAME
from blogdesk.integrations.strapi import DEFAULT_URL, StrapiConfig
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".blogdesk.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "blogdesk" / "config.toml"


class CMSSectionConfig(BaseModel):
    """[cms] section."""

    url: str = DEFAULT_URL
    api_token: str = ""
    timeout: float = 30.0


class EditorSectionConfig(BaseModel):
    """[editor] section."""

    autosave_delay: float = Field(default=DEFAULT_AUTOSAVE_DELAY, gt=0)
    draft_path: str = DRAFT_FILENAME
    session_path: str = SESSION_FILENAME


class ExportSectionConfig(BaseModel):
    """[export] section."""

    directory: str = "."


class PublishSectionConfig(BaseModel):
    """[publish] section."""

    backend: PublishBackend = PublishBackend.STRAPI
    local_posts_path: str = POSTS_FILENAME


class BlogdeskConfig(BaseModel):
    """Top-level configuration model."""

    cms: CMSSectionConfig = Field(default_factory=CMSSectionConfig)
    editor: EditorSectionConfig = Field(default_factory=EditorSectionConfig)
    export: ExportSectionConfig = Field(default_factory=ExportSectionConfig)
    publish: PublishSectionConfig = Field(default_factory=PublishSectionConfig)

    def to_strapi_config(self) -> StrapiConfig:
        """Convert to StrapiConfig for the CMS client."""
        return StrapiConfig(
            url=self.cms.url,
            api_token=self.cms.api_token,
            timeout=self.cms.timeout,
        )

    @property
    def draft_path(self) -> Path:
        return Path(self.editor.draft_path).expanduser()

    @property
    def session_path(self) -> Path:
        return Path(self.editor.session_path).expanduser()

    @property
    def export_dir(self) -> Path:
        return Path(self.export.directory).expanduser()

    @property
    def local_posts_path(self) -> Path:
        return Path(self.publish.local_posts_path).expanduser()


def load_config(path: str | Path | None = None) -> BlogdeskConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .blogdesk.toml in CWD
    3. ~/.config/blogdesk/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged BlogdeskConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = BlogdeskConfig.model_validate(data) if data else BlogdeskConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: BlogdeskConfig, **cli_kwargs: object) -> BlogdeskConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values, e.g. ``cms_url`` or ``draft_path``.

    Returns:
        Updated config with CLI overrides applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "cms_url": ("cms", "url"),
        "cms_token": ("cms", "api_token"),
        "draft_path": ("editor", "draft_path"),
        "autosave_delay": ("editor", "autosave_delay"),
        "export_dir": ("export", "directory"),
        "backend": ("publish", "backend"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return BlogdeskConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: BlogdeskConfig) -> BlogdeskConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "STRAPI_URL": ("cms", "url"),
        "STRAPI_API_TOKEN": ("cms", "api_token"),
        "BLOGDESK_DRAFT_PATH": ("editor", "draft_path"),
        "BLOGDESK_SESSION_PATH": ("editor", "session_path"),
        "BLOGDESK_EXPORT_DIR": ("export", "directory"),
        "BLOGDESK_PUBLISH_BACKEND": ("publish", "backend"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    delay_raw = os.environ.get("BLOGDESK_AUTOSAVE_DELAY")
    if delay_raw is not None:
        try:
            data["editor"]["autosave_delay"] = float(delay_raw)
        except ValueError:
            logger.warning("Ignoring non-numeric BLOGDESK_AUTOSAVE_DELAY=%r", delay_raw)

    return BlogdeskConfig.model_validate(data)
