"""CLI entry points: manage notebooks and sources, generate infographics, start the server."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import typer
from rich.console import Console
from rich.table import Table

from infograph.config import ensure_dirs, load_config
from infograph.core import InfographError
from infograph.infographic.render import decode_data_url
from infograph.notebook.models import Notebook
from infograph.workspace import Workspace, open_workspace

app = typer.Typer(name="infograph", help="Collect sources into notebooks and turn them into infographics.")
console = Console()

T = TypeVar("T")

_TYPE_LABELS = {"text": "Text", "youtube": "YouTube", "url": "URL"}


@app.callback()
def _main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log store and fetch activity")) -> None:
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")


def _run(action: Callable[[Workspace], Awaitable[T]]) -> T:
    """Open the configured workspace, run one action, and report core errors."""

    async def _go() -> T:
        workspace = await open_workspace(load_config())
        return await action(workspace)

    ensure_dirs()
    try:
        return asyncio.run(_go())
    except InfographError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        if e.hint:
            console.print(f"  Hint: {e.hint}")
        raise typer.Exit(1) from e


def _print_notebook(nb: Notebook) -> None:
    console.print(f"[bold]{nb.name}[/bold] [dim]({nb.id})[/dim]")
    console.print(f"Updated {nb.updated:%Y-%m-%d %H:%M} | Infographic: {'yes' if nb.infographic else 'no'}")
    if not nb.sources:
        console.print("[dim]No sources yet.[/dim]")
        return
    t = Table(show_lines=False)
    t.add_column("ID", style="cyan")
    t.add_column("Type", style="green")
    t.add_column("Content")
    for source in nb.sources:
        preview = source.content if len(source.content) <= 150 else source.content[:150] + "..."
        t.add_row(source.id, _TYPE_LABELS[source.type], preview)
    console.print(t)


@app.command()
def new(name: str = typer.Argument("", help="Notebook name (defaults to today's date)")) -> None:
    """Create a notebook."""
    nb = _run(lambda ws: ws.notebooks.create_notebook(name))
    console.print(f"[green]Created notebook [bold]{nb.name}[/bold] ({nb.id})[/green]")


@app.command("list")
def list_notebooks() -> None:
    """List notebooks, most recently updated first."""
    notebooks = _run(lambda ws: ws.notebooks.list_notebooks())
    if not notebooks:
        console.print("[dim]No notebooks yet. Run [bold]infograph new[/bold] to create one.[/dim]")
        return
    t = Table(title="Notebooks")
    t.add_column("ID", style="cyan")
    t.add_column("Name")
    t.add_column("Sources", justify="right")
    t.add_column("Infographic")
    t.add_column("Updated")
    for nb in notebooks:
        t.add_row(nb.id, nb.name, str(len(nb.sources)), "yes" if nb.infographic else "no", f"{nb.updated:%Y-%m-%d %H:%M}")
    console.print(t)


@app.command()
def show(notebook_id: str = typer.Argument(help="Notebook ID")) -> None:
    """Show a notebook and its sources."""
    _print_notebook(_run(lambda ws: ws.notebooks.get_notebook(notebook_id)))


@app.command()
def rename(
    notebook_id: str = typer.Argument(help="Notebook ID"),
    name: str = typer.Argument(help="New name"),
) -> None:
    """Rename a notebook."""
    nb = _run(lambda ws: ws.notebooks.rename_notebook(notebook_id, name))
    console.print(f"[green]Renamed to [bold]{nb.name}[/bold][/green]")


@app.command()
def delete(
    notebook_id: str = typer.Argument(help="Notebook ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a notebook with its sources and infographic."""
    if not yes:
        typer.confirm("Delete this notebook? This cannot be undone.", abort=True)
    _run(lambda ws: ws.notebooks.delete_notebook(notebook_id))
    console.print("[green]Notebook deleted.[/green]")


@app.command("add-text")
def add_text(
    notebook_id: str = typer.Argument(help="Notebook ID"),
    text: str = typer.Argument(help="Text to add"),
) -> None:
    """Add a text source."""
    _print_notebook(_run(lambda ws: ws.ingest.add_text(notebook_id, text)))


@app.command("add-youtube")
def add_youtube(
    notebook_id: str = typer.Argument(help="Notebook ID"),
    url: str = typer.Argument(help="YouTube URL or video ID"),
) -> None:
    """Add a YouTube video's transcript as a source."""
    with console.status("Loading transcript..."):
        nb = _run(lambda ws: ws.ingest.add_youtube(notebook_id, url))
    _print_notebook(nb)


@app.command("add-url")
def add_url(
    notebook_id: str = typer.Argument(help="Notebook ID"),
    url: str = typer.Argument(help="Page URL"),
) -> None:
    """Add a web page's text as a source."""
    with console.status("Fetching content..."):
        nb = _run(lambda ws: ws.ingest.add_url(notebook_id, url))
    _print_notebook(nb)


@app.command("remove-source")
def remove_source(
    notebook_id: str = typer.Argument(help="Notebook ID"),
    source_id: str = typer.Argument(help="Source ID"),
) -> None:
    """Remove a source from a notebook."""
    _print_notebook(_run(lambda ws: ws.sources.remove_source(notebook_id, source_id)))


@app.command()
def generate(
    notebook_id: str = typer.Argument(help="Notebook ID"),
    out: Path | None = typer.Option(None, "--out", "-o", help="Also write the PNG to this path"),
) -> None:
    """Generate the notebook's infographic from its sources."""
    with console.status("Generating..."):
        nb = _run(lambda ws: ws.generate_infographic(notebook_id))
    infographic = nb.require_infographic()
    console.print(f"[green]Infographic generated for [bold]{nb.name}[/bold].[/green]")
    if out is not None:
        out.write_bytes(decode_data_url(infographic.data))
        console.print(f"Saved to {out}")


@app.command()
def start(port: int = typer.Option(8000, "--port", "-p", help="Port to serve on")) -> None:
    """Start the infograph HTTP API."""
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    ensure_dirs()
    console.print(f"[bold]Starting infograph on port {port}...[/bold]")
    uvicorn.run("infograph.server:app", host="127.0.0.1", port=port, reload=False)


def main() -> None:
    app()
