"""Block-based draft editor.

Holds one authoring session in memory, autosaves it to a local slot on
a debounce timer, exports it as HTML or Markdown, and hands finished
posts to a publish gateway.
"""

from blogdesk.editor.autosave import AutosaveScheduler, attach_autosave
from blogdesk.editor.models import (
    BlockKind,
    CodeBlock,
    ContentBlock,
    Draft,
    HeadingBlock,
    ImageBlock,
    ImageContent,
    ParagraphBlock,
    Post,
    PublishMetadata,
    QuoteBlock,
    StoredPost,
)
from blogdesk.editor.publish import build_post, publish_draft
from blogdesk.editor.services import DraftStorage, load_session
from blogdesk.editor.store import DraftStore

__all__ = [
    "AutosaveScheduler",
    "BlockKind",
    "CodeBlock",
    "ContentBlock",
    "Draft",
    "DraftStorage",
    "DraftStore",
    "HeadingBlock",
    "ImageBlock",
    "ImageContent",
    "ParagraphBlock",
    "Post",
    "PublishMetadata",
    "QuoteBlock",
    "StoredPost",
    "attach_autosave",
    "build_post",
    "load_session",
    "publish_draft",
]
