"""CLI interface for blogdesk."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from blogdesk.cms.models import CreateComment
from blogdesk.config import BlogdeskConfig, load_config, merge_cli_overrides
from blogdesk.editor.autosave import AutosaveScheduler, attach_autosave
from blogdesk.editor.exporters import ExportFormat, create_exporter
from blogdesk.editor.importer import parse_markdown
from blogdesk.editor.models import BlockKind, ImageBlock, ImageContent, PublishMetadata
from blogdesk.editor.publish import publish_draft
from blogdesk.editor.publishers import PublishBackend, create_gateway
from blogdesk.editor.services import DraftStorage, load_session
from blogdesk.editor.store import DraftStore
from blogdesk.errors import BlogdeskError
from blogdesk.integrations.session import AuthSessionStore
from blogdesk.integrations.strapi import StrapiAPIClient

app = typer.Typer(
    name="blogdesk",
    help="Write blog drafts locally and publish them to a Strapi CMS.",
)
draft_app = typer.Typer(help="Edit the local draft.")
blogs_app = typer.Typer(help="Browse and manage posts in the CMS.")
comments_app = typer.Typer(help="Read and write comments.")
app.add_typer(draft_app, name="draft")
app.add_typer(blogs_app, name="blogs")
app.add_typer(comments_app, name="comments")

console = Console()

PREVIEW_LENGTH = 60


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from blogdesk import __version__

        console.print(f"blogdesk {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .blogdesk.toml file."),
    ] = None,
    cms_url: Annotated[
        Optional[str],
        typer.Option("--cms-url", help="Base URL of the Strapi instance."),
    ] = None,
    draft_path: Annotated[
        Optional[str],
        typer.Option("--draft-path", help="File holding the local draft."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log debug output."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """blogdesk - block editor and CMS client for a headless blog."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )
    config = load_config(config_path)
    ctx.obj = merge_cli_overrides(config, cms_url=cms_url, draft_path=draft_path)


# ── Helpers ──────────────────────────────────────────────────────


def _config(ctx: typer.Context) -> BlogdeskConfig:
    return ctx.obj if isinstance(ctx.obj, BlogdeskConfig) else load_config()


def _client(config: BlogdeskConfig) -> StrapiAPIClient:
    return StrapiAPIClient(config.to_strapi_config(), AuthSessionStore(config.session_path))


def _open_draft(config: BlogdeskConfig) -> tuple[DraftStore, DraftStorage, AutosaveScheduler]:
    storage = DraftStorage(config.draft_path)
    store = load_session(storage)
    scheduler = attach_autosave(store, storage, delay=config.editor.autosave_delay)
    return store, storage, scheduler


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]Error:[/red] {message}")
    return typer.Exit(1)


def _validation_messages(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
        for err in exc.errors()
    ]


def _preview(text: str) -> str:
    text = text.replace("\n", " ")
    return text[:PREVIEW_LENGTH] + "..." if len(text) > PREVIEW_LENGTH else text


def _print_draft(store: DraftStore) -> None:
    console.print(f"[bold]{store.title or '(untitled)'}[/bold]")
    if store.subtitle:
        console.print(f"[dim]{store.subtitle}[/dim]")
    table = Table()
    table.add_column("#", justify="right")
    table.add_column("ID")
    table.add_column("Kind")
    table.add_column("Content")
    for i, block in enumerate(store.blocks, start=1):
        if isinstance(block, ImageBlock):
            content = f"{block.content.url} ({block.content.caption})"
        else:
            content = block.content
        table.add_row(str(i), block.id, block.kind, _preview(content))
    console.print(table)


# ── Draft commands ───────────────────────────────────────────────


@draft_app.command("show")
def draft_show(ctx: typer.Context) -> None:
    """Show the local draft."""
    config = _config(ctx)
    storage = DraftStorage(config.draft_path)
    stored = storage.load()
    store = load_session(storage)
    _print_draft(store)
    if stored is not None and stored.last_modified:
        console.print(f"Last saved {stored.last_modified.isoformat(timespec='seconds')}")


@draft_app.command("title")
def draft_title(ctx: typer.Context, text: str) -> None:
    """Set the draft title."""
    store, _, scheduler = _open_draft(_config(ctx))
    store.set_title(text)
    scheduler.flush()


@draft_app.command("subtitle")
def draft_subtitle(ctx: typer.Context, text: str) -> None:
    """Set the draft subtitle."""
    store, _, scheduler = _open_draft(_config(ctx))
    store.set_subtitle(text)
    scheduler.flush()


def _block_content(
    store: DraftStore, block_id: str, text: str | None, url: str | None, caption: str | None
) -> str | ImageContent | None:
    block = store.get_block(block_id)
    if block is None:
        return None
    if isinstance(block, ImageBlock):
        return ImageContent(
            url=url if url is not None else block.content.url,
            caption=caption if caption is not None else block.content.caption,
        )
    return text


@draft_app.command("add")
def draft_add(
    ctx: typer.Context,
    kind: Annotated[BlockKind, typer.Argument(help="Block kind.")],
    after: Annotated[
        Optional[str],
        typer.Option("--after", "-a", help="Insert after this block id."),
    ] = None,
    text: Annotated[
        Optional[str],
        typer.Option("--text", "-t", help="Initial text for text blocks."),
    ] = None,
    url: Annotated[Optional[str], typer.Option("--url", help="Image URL.")] = None,
    caption: Annotated[Optional[str], typer.Option("--caption", help="Image caption.")] = None,
) -> None:
    """Add a block to the draft and print its id."""
    store, _, scheduler = _open_draft(_config(ctx))
    block_id = store.add_block(kind, after_id=after)
    content = _block_content(store, block_id, text, url, caption)
    if content:
        store.update_block(block_id, content)
    scheduler.flush()
    console.print(block_id)


@draft_app.command("update")
def draft_update(
    ctx: typer.Context,
    block_id: Annotated[str, typer.Argument(help="Block id.")],
    text: Annotated[Optional[str], typer.Argument(help="New text.")] = None,
    url: Annotated[Optional[str], typer.Option("--url", help="Image URL.")] = None,
    caption: Annotated[Optional[str], typer.Option("--caption", help="Image caption.")] = None,
) -> None:
    """Replace a block's content."""
    store, _, scheduler = _open_draft(_config(ctx))
    content = _block_content(store, block_id, text, url, caption)
    if content is None:
        console.print(f"[yellow]No block with id {block_id}.[/yellow]")
        return
    store.update_block(block_id, content)
    scheduler.flush()


@draft_app.command("delete")
def draft_delete(
    ctx: typer.Context,
    block_id: Annotated[str, typer.Argument(help="Block id.")],
) -> None:
    """Delete a block from the draft."""
    store, _, scheduler = _open_draft(_config(ctx))
    store.delete_block(block_id)
    scheduler.flush()


@draft_app.command("discard")
def draft_discard(ctx: typer.Context) -> None:
    """Delete the local draft."""
    DraftStorage(_config(ctx).draft_path).clear()
    console.print("Draft discarded.")


@draft_app.command("edit")
def draft_edit(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Slug of the post to edit.")],
) -> None:
    """Replace the local draft with an existing post from the CMS."""
    config = _config(ctx)
    try:
        blog = _client(config).get_blog_by_slug(slug)
    except BlogdeskError as exc:
        raise _fail(str(exc)) from exc
    if blog is None:
        raise _fail(f"No post with slug '{slug}'")
    storage = DraftStorage(config.draft_path)
    store = load_session(storage, initial=parse_markdown(blog.content, title=blog.title))
    try:
        storage.save(store.snapshot())
    except OSError as exc:
        raise _fail(f"Could not save draft to {storage.path}: {exc}") from exc
    _print_draft(store)


@draft_app.command("export")
def draft_export(
    ctx: typer.Context,
    fmt: Annotated[
        ExportFormat,
        typer.Option("--format", "-f", help="Export format."),
    ] = ExportFormat.MARKDOWN,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Directory to write the file to."),
    ] = None,
    stdout: Annotated[
        bool,
        typer.Option("--stdout", help="Print instead of writing a file."),
    ] = False,
) -> None:
    """Export the draft as HTML or Markdown."""
    config = _config(ctx)
    draft = load_session(DraftStorage(config.draft_path)).snapshot()
    exporter = create_exporter(fmt)
    text = exporter.export(draft)
    if stdout:
        console.print(text, soft_wrap=True, markup=False, emoji=False, highlight=False)
        return
    out_dir = output or config.export_dir
    target = out_dir / exporter.filename(draft.title)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise _fail(f"Could not write {target}: {exc}") from exc
    console.print(f"[green]Exported to {target}[/green]")


@draft_app.command("publish")
def draft_publish(
    ctx: typer.Context,
    tag: Annotated[
        Optional[list[str]],
        typer.Option("--tag", "-t", help="Tag name (up to 5)."),
    ] = None,
    canonical_link: Annotated[
        Optional[str],
        typer.Option("--canonical-link", help="Canonical URL of the original."),
    ] = None,
    backend: Annotated[
        Optional[PublishBackend],
        typer.Option("--backend", "-b", help="Where to publish."),
    ] = None,
) -> None:
    """Publish the draft and clear it locally on success."""
    config = _config(ctx)
    metadata = PublishMetadata(canonical_link=canonical_link)
    try:
        for name in tag or []:
            metadata.add_tag(name)
    except BlogdeskError as exc:
        raise _fail(str(exc)) from exc

    store, storage, scheduler = _open_draft(config)
    gateway = create_gateway(
        backend or config.publish.backend,
        client=_client(config),
        local_path=config.local_posts_path,
    )
    try:
        stored = publish_draft(store, storage, gateway, metadata, scheduler=scheduler)
    except BlogdeskError as exc:
        raise _fail(f"Error saving post. Please try again. ({exc})") from exc
    console.print(f"[green]Published[/green] {stored.title or '(untitled)'} [dim]{stored.id}[/dim]")


# ── CMS commands ─────────────────────────────────────────────────


@blogs_app.command("list")
def blogs_list(
    ctx: typer.Context,
    page: Annotated[int, typer.Option("--page", "-p", min=1)] = 1,
    page_size: Annotated[int, typer.Option("--page-size", min=1)] = 10,
    search: Annotated[Optional[str], typer.Option("--search", "-s")] = None,
    category: Annotated[Optional[str], typer.Option("--category")] = None,
    tag: Annotated[Optional[str], typer.Option("--tag")] = None,
    status: Annotated[Optional[str], typer.Option("--status")] = None,
) -> None:
    """List posts, newest first."""
    try:
        result = _client(_config(ctx)).get_blogs(
            page=page,
            page_size=page_size,
            search=search,
            category=category,
            tag=tag,
            status=status,
        )
    except BlogdeskError as exc:
        raise _fail(str(exc)) from exc

    if not result.data:
        console.print("[yellow]No posts found.[/yellow]")
        return
    table = Table()
    table.add_column("Slug")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Published")
    for blog in result.data:
        published = blog.published_at.date().isoformat() if blog.published_at else ""
        table.add_row(blog.slug, blog.title, blog.status, published)
    console.print(table)
    p = result.pagination
    console.print(f"Page {p.page} of {max(p.page_count, 1)} ({p.total} posts)")


@blogs_app.command("show")
def blogs_show(ctx: typer.Context, slug: str) -> None:
    """Show one post."""
    try:
        blog = _client(_config(ctx)).get_blog_by_slug(slug)
    except BlogdeskError as exc:
        raise _fail(str(exc)) from exc
    if blog is None:
        raise _fail(f"No post with slug '{slug}'")
    console.print(f"[bold]{blog.title}[/bold]")
    console.print(f"[dim]{blog.reading_time} min read[/dim]")
    if blog.categories:
        console.print("Categories: " + ", ".join(c.name for c in blog.categories))
    if blog.tags:
        console.print("Tags: " + ", ".join(t.name for t in blog.tags))
    console.print()
    console.print(blog.content, soft_wrap=True, markup=False, emoji=False, highlight=False)


@blogs_app.command("delete")
def blogs_delete(ctx: typer.Context, document_id: str) -> None:
    """Delete a post by document id."""
    try:
        _client(_config(ctx)).delete_blog(document_id)
    except BlogdeskError as exc:
        raise _fail(str(exc)) from exc
    console.print(f"Deleted {document_id}.")


@app.command("categories")
def categories_cmd(ctx: typer.Context) -> None:
    """List categories."""
    try:
        categories = _client(_config(ctx)).get_categories()
    except BlogdeskError as exc:
        raise _fail(str(exc)) from exc
    for category in categories:
        console.print(f"{category.slug}\t{category.name}")


@app.command("tags")
def tags_cmd(ctx: typer.Context) -> None:
    """List tags."""
    try:
        tags = _client(_config(ctx)).get_tags()
    except BlogdeskError as exc:
        raise _fail(str(exc)) from exc
    for t in tags:
        console.print(f"{t.slug}\t{t.name}")


@comments_app.command("list")
def comments_list(ctx: typer.Context, slug: str) -> None:
    """List approved comments on a post."""
    client = _client(_config(ctx))
    try:
        blog = client.get_blog_by_slug(slug)
        if blog is None:
            raise _fail(f"No post with slug '{slug}'")
        comments = client.get_comments(blog.id)
    except BlogdeskError as exc:
        raise _fail(str(exc)) from exc
    if not comments:
        console.print("No comments yet.")
        return
    for comment in comments:
        when = comment.created_at.date().isoformat() if comment.created_at else ""
        console.print(f"[bold]{comment.author}[/bold] [dim]{when}[/dim]")
        console.print(comment.content, soft_wrap=True, markup=False, emoji=False, highlight=False)
        console.print()


@comments_app.command("add")
def comments_add(
    ctx: typer.Context,
    slug: str,
    author: Annotated[str, typer.Option("--author", help="Your name.")],
    email: Annotated[str, typer.Option("--email", help="Your email.")],
    content: Annotated[str, typer.Option("--content", help="Comment text.")],
) -> None:
    """Submit a comment for moderation."""
    client = _client(_config(ctx))
    try:
        blog = client.get_blog_by_slug(slug)
        if blog is None:
            raise _fail(f"No post with slug '{slug}'")
        data = CreateComment(author=author, email=email, content=content, blog=blog.id)
        client.create_comment(data)
    except ValidationError as exc:
        for message in _validation_messages(exc):
            console.print(f"[red]{message}[/red]")
        raise typer.Exit(1) from exc
    except BlogdeskError as exc:
        raise _fail(str(exc)) from exc
    console.print("Comment submitted. It will appear once approved.")


@app.command("upload")
def upload_cmd(
    ctx: typer.Context,
    file: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, help="File to upload."),
    ],
) -> None:
    """Upload a file to the media library and print its URL."""
    client = _client(_config(ctx))
    try:
        files = client.upload_media(file)
    except BlogdeskError as exc:
        raise _fail(f"Failed to upload file: {exc}") from exc
    for media in files:
        console.print(client.media_url(media.url))


@app.command("login")
def login_cmd(
    ctx: typer.Context,
    identifier: Annotated[str, typer.Argument(help="Email or username.")],
    password: Annotated[
        str,
        typer.Option("--password", prompt=True, hide_input=True),
    ],
) -> None:
    """Log in to the CMS."""
    try:
        session = _client(_config(ctx)).login(identifier, password)
    except ValidationError as exc:
        for message in _validation_messages(exc):
            console.print(f"[red]{message}[/red]")
        raise typer.Exit(1) from exc
    except BlogdeskError as exc:
        raise _fail(str(exc)) from exc
    console.print(f"[green]Logged in as {session.user.username}[/green]")


@app.command("logout")
def logout_cmd(ctx: typer.Context) -> None:
    """Forget the stored CMS session."""
    _client(_config(ctx)).logout()
    console.print("Logged out.")


if __name__ == "__main__":
    app()
