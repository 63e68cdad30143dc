from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

import click

from widgetdeck.dashboard.models.enums import FolderType, WidgetType

if TYPE_CHECKING:
    from widgetdeck.dashboard.context import DashboardContext

T = TypeVar("T")


@click.group()
def main() -> None:
    """Widgetdeck - personal dashboard of links, notes, credentials and tagged items."""


@main.command()
@click.option("--host", default=None, help="Bind host (default: from WIDGETDECK_HOST or 0.0.0.0).")
@click.option("--port", default=None, type=int, help="Bind port (default: from WIDGETDECK_PORT or 8000).")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development.")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the SQL service."""
    import uvicorn

    from widgetdeck.dashboard.settings import DashboardSettings

    settings = DashboardSettings()

    uvicorn.run(
        "widgetdeck.sql_service.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level="warning",  # uvicorn's own logging is intercepted by loguru
    )


# ---------------------------------------------------------------------------
# Dashboard commands
# ---------------------------------------------------------------------------


def _run(action: Callable[[DashboardContext], Awaitable[T]]) -> T:
    """Open a dashboard context, run ``action`` against it, and close it."""
    from widgetdeck.dashboard.context import open_context
    from widgetdeck.dashboard.log import setup_logging
    from widgetdeck.dashboard.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)

    async def runner() -> T:
        ctx = await open_context(settings)
        try:
            return await action(ctx)
        finally:
            await ctx.aclose()

    return asyncio.run(runner())


@main.group()
def storage() -> None:
    """Storage backend inspection."""


@storage.command()
def info() -> None:
    """Show the active backend and startup state."""

    async def action(ctx: DashboardContext) -> None:
        click.echo(f"Backend:        {ctx.router.get_storage_type()}")
        click.echo(f"Storage ready:  {ctx.storage_ready}")
        click.echo(f"Folders:        {ctx.folders.state}")
        click.echo(f"Folder column:  {ctx.widget_column_ready}")
        if ctx.router.embedded.sink is not None:
            click.echo(f"Image sink:     {ctx.settings.image_sink}")

    _run(action)


@main.group()
def widgets() -> None:
    """Widget management commands."""


@widgets.command("list")
@click.option("--type", "widget_type", type=click.Choice([t.value for t in WidgetType]), default=None)
@click.option("--tag", default=None, help="Only widgets whose tags contain this text.")
@click.option("--search", default=None, help="Substring match on title or content.")
def list_widgets(widget_type: str | None, tag: str | None, search: str | None) -> None:
    """List widgets, most recently updated first."""

    async def action(ctx: DashboardContext) -> None:
        if search is not None:
            items = await ctx.widgets.search_widgets(search)
        elif tag is not None:
            items = await ctx.widgets.get_widgets_by_tag(tag)
        elif widget_type is not None:
            items = await ctx.widgets.get_widgets_by_type(widget_type)
        else:
            items = await ctx.widgets.get_all_widgets()

        for w in items:
            lock = " [locked]" if w.is_protected else ""
            tags = f" #{' #'.join(w.tags)}" if w.tags else ""
            click.echo(f"{w.id}  {w.type:<10}  {w.title}{lock}{tags}")

    _run(action)


@widgets.command("add")
@click.argument("title")
@click.option("--type", "widget_type", type=click.Choice([t.value for t in WidgetType]), default=WidgetType.NOTE.value)
@click.option("--content", default="", help="Widget body text.")
@click.option("--tag", "tags", multiple=True, help="Tag to attach (repeatable).")
@click.option("--url", default=None, help="Link target for link widgets.")
@click.option("--folder", "folder_id", default=None, help="Folder ID to place the widget in.")
def add_widget(
    title: str,
    widget_type: str,
    content: str,
    tags: tuple[str, ...],
    url: str | None,
    folder_id: str | None,
) -> None:
    """Create a widget."""
    from widgetdeck.dashboard.models.widget import WidgetCreate

    payload = WidgetCreate(
        title=title,
        content=content,
        type=WidgetType(widget_type),
        tags=list(tags),
        url=url,
        folder_id=folder_id,
    )

    async def action(ctx: DashboardContext) -> str:
        widget = await ctx.widgets.create_widget(payload)
        return widget.id

    click.echo(f"Created widget {_run(action)}.")


@widgets.command("delete")
@click.argument("widget_id")
def delete_widget(widget_id: str) -> None:
    """Delete a widget by ID."""

    async def action(ctx: DashboardContext) -> bool:
        return await ctx.widgets.delete_widget(widget_id)

    if not _run(action):
        raise click.ClickException(f"Failed to delete widget {widget_id}.")
    click.echo(f"Deleted widget {widget_id}.")


@widgets.command("tags")
def tag_counts() -> None:
    """Show tag frequencies, most frequent first."""

    async def action(ctx: DashboardContext) -> list[tuple[str, int]]:
        return await ctx.widgets.get_tag_counts()

    for tag, count in _run(action):
        click.echo(f"{count:>4}  {tag}")


@main.group()
def folders() -> None:
    """Folder management commands."""


@folders.command("tree")
def folder_tree() -> None:
    """Print the folder hierarchy."""

    async def action(ctx: DashboardContext) -> None:
        nodes = await ctx.folders.get_folder_hierarchy()
        children: dict[str | None, list] = {}
        for node in nodes:
            children.setdefault(node.parent_id, []).append(node)

        def walk(parent_id: str | None) -> None:
            for node in children.get(parent_id, []):
                click.echo(f"{'  ' * node.level}{node.name}  ({node.type}, {node.id})")
                walk(node.id)

        walk(None)

    _run(action)


@folders.command("add")
@click.argument("name")
@click.option("--type", "folder_type", type=click.Choice([t.value for t in FolderType]), default=FolderType.ALL.value)
@click.option("--parent", "parent_id", default=None, help="Parent folder ID (root if omitted).")
def add_folder(name: str, folder_type: str, parent_id: str | None) -> None:
    """Create a folder."""
    from widgetdeck.dashboard.models.folder import FolderCreate

    payload = FolderCreate(name=name, type=FolderType(folder_type), parent_id=parent_id)

    async def action(ctx: DashboardContext) -> str:
        folder = await ctx.folders.create_folder(payload)
        return folder.id

    click.echo(f"Created folder {_run(action)}.")


if __name__ == "__main__":
    main()
