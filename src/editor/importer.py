"""Parse Markdown back into draft blocks.

The inverse of the Markdown exporter, used to seed an editing session
from a post already stored in the CMS. A leading ``# `` heading becomes
the title; every other chunk maps onto the closest block kind. The
subtitle cannot be told apart from a first paragraph, so it is left
empty and that text stays a paragraph.
"""

from __future__ import annotations

import re

from blogdesk.editor.models import (
    CodeBlock,
    ContentBlock,
    Draft,
    HeadingBlock,
    ImageBlock,
    ImageContent,
    ParagraphBlock,
    QuoteBlock,
)

_FENCE = "```"
_IMAGE_RE = re.compile(r"^!\[(?P<caption>[^\]]*)\]\((?P<url>[^)]*)\)$")


def _chunks(text: str) -> list[tuple[str, str]]:
    """Split into ("code", body) and ("text", body) chunks."""
    chunks: list[tuple[str, str]] = []
    buf: list[str] = []
    lines = iter(text.splitlines())

    def flush() -> None:
        if buf:
            chunks.append(("text", "\n".join(buf)))
            buf.clear()

    for line in lines:
        if line.startswith(_FENCE):
            flush()
            code: list[str] = []
            for inner in lines:
                if inner.startswith(_FENCE):
                    break
                code.append(inner)
            chunks.append(("code", "\n".join(code)))
        elif not line.strip():
            flush()
        else:
            buf.append(line)
    flush()
    return chunks


def _to_block(chunk: str) -> ContentBlock:
    if chunk.startswith("## "):
        return HeadingBlock(content=chunk[3:])
    if chunk.startswith(">"):
        quoted = [
            line[1:].removeprefix(" ") if line.startswith(">") else line
            for line in chunk.splitlines()
        ]
        return QuoteBlock(content="\n".join(quoted))
    image = _IMAGE_RE.match(chunk)
    if image:
        return ImageBlock(content=ImageContent(url=image["url"], caption=image["caption"]))
    return ParagraphBlock(content=chunk)


def parse_markdown(text: str, title: str = "") -> Draft:
    """Build a draft from Markdown.

    Args:
        text: Markdown body.
        title: Fallback title when the body has no leading ``# `` heading.
    """
    blocks: list[ContentBlock] = []
    for i, (kind, body) in enumerate(_chunks(text)):
        if kind == "code":
            blocks.append(CodeBlock(content=body))
        elif i == 0 and body.startswith("# "):
            title = body[2:]
        else:
            blocks.append(_to_block(body))
    return Draft(title=title, blocks=blocks or [ParagraphBlock()])
