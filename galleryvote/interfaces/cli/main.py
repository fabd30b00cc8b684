"""
CLI Main - Typer-based command-line interface.

Usage:
    galleryvote serve
    galleryvote captions
    galleryvote gallery --token <access-token>
    galleryvote vote <item-id> up --token <access-token>
"""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.table import Table

from galleryvote.domains.gallery import GallerySnapshot

app = typer.Typer(
    name="galleryvote",
    help="GalleryVote - Gated caption gallery with up/down voting",
    add_completion=False,
)
console = Console()

_CHANGE_LABELS = {"insert": "recorded", "update": "changed", "delete": "removed"}

TOKEN_OPTION = typer.Option(
    ...,
    "--token",
    "-t",
    envvar="GALLERYVOTE_ACCESS_TOKEN",
    help="Supabase access token of the voting user",
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Configure logging for every command."""
    from galleryvote.config import get_settings

    level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def captions() -> None:
    """List every content item (anon key, no sign-in)."""
    asyncio.run(_captions_async())


async def _captions_async() -> None:
    """Async listing implementation."""
    from galleryvote.adapters.supabase import SupabaseClient, SupabaseStore
    from galleryvote.config import get_settings
    from galleryvote.domains.gallery import VoteWorkflow

    settings = get_settings()
    client = SupabaseClient.from_settings(settings)

    try:
        workflow = VoteWorkflow(
            SupabaseStore(client),
            content_table=settings.content_table,
            vote_table=settings.vote_table,
        )
        items = await workflow.load_content()
    finally:
        await client.close()

    if workflow.error:
        console.print(f"[red]Error:[/red] {workflow.error}")
        raise typer.Exit(1)

    if not items:
        console.print("[yellow]No captions yet.[/yellow]")
        return

    table = Table(title=f"Captions ({len(items)})")
    table.add_column("ID", style="dim")
    table.add_column("Content")
    table.add_column("Featured", justify="center")

    for item in items:
        table.add_row(item.id[:8], item.content, "★" if item.is_featured else "")

    console.print(table)


@app.command()
def gallery(token: str = TOKEN_OPTION) -> None:
    """Show the gallery with your own votes."""
    asyncio.run(_gallery_async(token, None, None))


@app.command()
def vote(
    item_id: str = typer.Argument(..., help="Content item ID"),
    direction: str = typer.Argument(..., help="up or down (again = undo)"),
    token: str = TOKEN_OPTION,
) -> None:
    """Vote on a content item."""
    asyncio.run(_gallery_async(token, item_id, direction))


async def _gallery_async(token: str, item_id: str | None, direction: str | None) -> None:
    """Open a gallery view for ``token``, optionally vote, and print it."""
    from galleryvote.adapters.supabase import SupabaseAuth, SupabaseClient, SupabaseStore
    from galleryvote.config import GalleryVoteError, get_settings
    from galleryvote.domains.gallery import GalleryView

    settings = get_settings()
    client = SupabaseClient.from_settings(settings)
    auth = SupabaseAuth(client)
    store = SupabaseStore(client, auth.access_token)

    try:
        async with GalleryView.from_settings(auth, store, settings) as view:
            await auth.set_session(token)

            if item_id is not None and direction is not None:
                change = await view.cast_vote(item_id, direction)
                if change is not None:
                    console.print(f"[green]Vote {_CHANGE_LABELS[change.value]}[/green] on {item_id}")

            snapshot = view.snapshot()
    except GalleryVoteError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)
    finally:
        await client.close()

    _print_snapshot(snapshot)
    if snapshot.error:
        raise typer.Exit(1)


def _print_snapshot(snapshot: GallerySnapshot) -> None:
    """Render gallery state."""
    console.print(f"\n[bold]Signed in as[/bold] {snapshot.email or 'unknown'}\n")

    if snapshot.is_empty:
        console.print("[yellow]No captions yet.[/yellow]")

    if snapshot.items:
        table = Table(title="Gallery")
        table.add_column("ID", style="dim")
        table.add_column("Content")
        table.add_column("Your vote", justify="center")

        for item in snapshot.items:
            table.add_row(item.id, item.content, _vote_label(item.vote))

        console.print(table)

    if snapshot.error:
        console.print(f"[red]Error:[/red] {snapshot.error}")


def _vote_label(vote: int | None) -> str:
    """Color-code a vote."""
    if vote == 1:
        return "[green]▲[/green]"
    if vote == -1:
        return "[red]▼[/red]"
    return ""


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Host to bind"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    console.print("\n[green]Starting GalleryVote API server[/green]")
    console.print(f"[dim]http://{host}:{port}[/dim]\n")

    uvicorn.run(
        "galleryvote.interfaces.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from galleryvote import __version__

    console.print(f"GalleryVote v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
