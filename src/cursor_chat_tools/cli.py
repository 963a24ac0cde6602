"""Command-line interface for Cursor Chat Tools.

This module provides a CLI built with Typer for listing, searching, showing
and exporting chats from Cursor's AI pane.
"""

from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .errors import CursorChatError
from .logging_config import setup_logging
from .markdown_exporter import (
    content_preview,
    conversation_to_markdown,
    export_conversation_to_file,
    generate_conversation_filename,
)
from .reader import WorkspaceReader
from .scanner import Conversation, extract_technical_concepts, get_workspace_info

app = typer.Typer(
    name="cursor-chats",
    help="List, search and export chats from Cursor's AI pane.",
    no_args_is_help=True,
)
console = Console()

StoragePathOption = Annotated[
    Optional[Path],
    typer.Option(
        "--storage-path", "-s",
        help="Cursor workspaceStorage directory, or a single state.vscdb file.",
    ),
]
WorkersOption = Annotated[
    int,
    typer.Option(
        "--workers", "-w",
        min=1,
        help="Number of workspaces to read concurrently.",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose", "-v",
        help="Log skipped workspaces and keys.",
    ),
]


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"cursor-chats version {__version__}")
        raise typer.Exit()


def format_timestamp(ts: int | None) -> str:
    """Convert a millisecond timestamp to a human-readable date string."""
    if not ts:
        return "Unknown"
    try:
        return datetime.fromtimestamp(ts / 1000).strftime("%Y-%m-%d %H:%M:%S")
    except (ValueError, OSError, OverflowError):
        return str(ts)


def _store_mtime_ms(store: Path) -> int:
    """Return a store's modification time in milliseconds, or 0 if it is gone."""
    try:
        return int(store.stat().st_mtime * 1000)
    except OSError:
        return 0


def _make_reader(storage_path: Path | None, workers: int, verbose: bool) -> WorkspaceReader:
    setup_logging("DEBUG" if verbose else None, force=verbose)
    return WorkspaceReader(storage_path, max_workers=workers)


def _fail(exc: CursorChatError) -> typer.Exit:
    console.print(f"[red]Error: {escape(str(exc))}[/red]")
    return typer.Exit(1)


def _resolve_chat(reader: WorkspaceReader, chat_id: str | None, latest: bool) -> tuple[Conversation, str | None]:
    """Return the requested conversation and its workspace name."""
    if latest:
        conversation = reader.get_latest_chat()
        return conversation, get_workspace_info(reader.get_latest_workspace()).name
    conversation, store_path = reader.get_chat_by_id(chat_id or "")
    return conversation, get_workspace_info(store_path).name


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version", "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
):
    """Cursor Chats - Reconstruct chats from Cursor's local workspace storage."""
    pass


@app.command()
def workspaces(
    storage_path: StoragePathOption = None,
    verbose: VerboseOption = False,
):
    """List discovered Cursor workspaces, most recently used first."""
    reader = _make_reader(storage_path, 1, verbose)
    try:
        stores = reader.find_workspaces()
    except CursorChatError as exc:
        raise _fail(exc) from exc

    if not stores:
        console.print(f"[yellow]No workspaces found in {escape(str(reader.storage_path))}[/yellow]")
        return

    entries = sorted(
        ((get_workspace_info(store), _store_mtime_ms(store)) for store in stores),
        key=lambda entry: entry[1],
        reverse=True,
    )

    table = Table(title=f"Cursor Workspaces ({len(entries)} total)")
    table.add_column("Name", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Last Used", style="green")
    for info, mtime_ms in entries:
        table.add_row(escape(info.name), escape(info.workspace_id), format_timestamp(mtime_ms))
    console.print(table)


@app.command("list")
def list_chats(
    search: Annotated[
        Optional[str],
        typer.Option(
            "--search", "-q",
            help="Only show chats whose title or content contains this text.",
        ),
    ] = None,
    limit: Annotated[
        int,
        typer.Option(
            "--limit", "-l",
            help="Maximum number of chats to show (0 for all).",
        ),
    ] = 20,
    storage_path: StoragePathOption = None,
    workers: WorkersOption = 1,
    verbose: VerboseOption = False,
):
    """List chats across all workspaces, newest first."""
    reader = _make_reader(storage_path, workers, verbose)
    try:
        chats = reader.search_chats(search) if search else reader.list_all_chats()
    except CursorChatError as exc:
        raise _fail(exc) from exc

    if not chats:
        if search:
            console.print(f"[yellow]No chats found matching '{escape(search)}'[/yellow]")
        else:
            console.print("[yellow]No chats found in Cursor workspaces[/yellow]")
        return

    total = len(chats)
    if limit > 0:
        chats = chats[:limit]

    heading = f"Chats matching '{escape(search)}'" if search else "Cursor Chats"
    table = Table(title=f"{heading} ({total} total)")
    table.add_column("ID", style="dim", max_width=24)
    table.add_column("Title", style="cyan", max_width=50)
    table.add_column("Workspace", style="green")
    table.add_column("Messages", justify="right")
    table.add_column("Date")
    table.add_column("Concepts", style="magenta")

    for chat in chats:
        concepts = extract_technical_concepts(chat.conversation)
        concept_text = concepts[0] if concepts else ""
        if len(concepts) > 1:
            concept_text += f" (+{len(concepts) - 1} more)"
        table.add_row(
            escape(chat.id),
            escape(chat.title),
            escape(chat.workspace_name),
            str(len(chat.messages)),
            format_timestamp(chat.timestamp_ms),
            concept_text,
        )
    console.print(table)

    if limit > 0 and total > limit:
        console.print(f"[dim]... showing first {limit} of {total}, use --limit to see more[/dim]")


@app.command()
def show(
    chat_id: Annotated[Optional[str], typer.Argument(help="ID of the chat to show.")] = None,
    latest: Annotated[
        bool,
        typer.Option(
            "--latest",
            help="Show the most recent chat of the most recently used workspace.",
        ),
    ] = False,
    markdown: Annotated[
        bool,
        typer.Option(
            "--markdown", "-m",
            help="Print the chat as markdown.",
        ),
    ] = False,
    storage_path: StoragePathOption = None,
    verbose: VerboseOption = False,
):
    """Show a single chat by ID, or the latest one."""
    if not latest and not chat_id:
        console.print("[red]Error: specify a chat ID or --latest[/red]")
        raise typer.Exit(1)

    reader = _make_reader(storage_path, 1, verbose)
    try:
        conversation, workspace_name = _resolve_chat(reader, chat_id, latest)
    except CursorChatError as exc:
        raise _fail(exc) from exc

    if markdown:
        typer.echo(conversation_to_markdown(conversation, workspace_name=workspace_name))
        return

    console.print(f"[bright_blue bold]Title:[/bright_blue bold]     {escape(conversation.title)}")
    console.print(f"[bright_blue bold]Chat ID:[/bright_blue bold]   {escape(conversation.id)}")
    if workspace_name:
        console.print(f"[bright_blue bold]Workspace:[/bright_blue bold] [yellow]{escape(workspace_name)}[/yellow]")
    console.print(f"[bright_blue bold]Date:[/bright_blue bold]      [dim]{format_timestamp(conversation.timestamp_ms)}[/dim]")
    console.print(f"[bright_blue bold]Preview:[/bright_blue bold]   {escape(content_preview(conversation, 100))}")
    console.print()

    for message in conversation.messages:
        role_color = {"user": "green", "assistant": "magenta"}.get(message.role, "yellow")
        console.print(f"[{role_color} bold]{message.role.upper()}[/{role_color} bold] [dim]{format_timestamp(message.timestamp_ms)}[/dim]")
        console.print(escape(message.content))
        console.print()


@app.command()
def export(
    chat_id: Annotated[Optional[str], typer.Argument(help="ID of the chat to export.")] = None,
    latest: Annotated[
        bool,
        typer.Option(
            "--latest",
            help="Export the most recent chat of the most recently used workspace.",
        ),
    ] = False,
    output_dir: Annotated[
        Path,
        typer.Option(
            "--output-dir", "-o",
            help="Output directory for the markdown file.",
            file_okay=False,
        ),
    ] = Path("."),
    storage_path: StoragePathOption = None,
    verbose: VerboseOption = False,
):
    """Export a chat to a markdown file."""
    if not latest and not chat_id:
        console.print("[red]Error: specify a chat ID or --latest[/red]")
        raise typer.Exit(1)

    reader = _make_reader(storage_path, 1, verbose)
    try:
        conversation, workspace_name = _resolve_chat(reader, chat_id, latest)
    except CursorChatError as exc:
        raise _fail(exc) from exc

    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / generate_conversation_filename(conversation)
    export_conversation_to_file(conversation, output_path, workspace_name=workspace_name)
    console.print(f"[green]Exported '{escape(conversation.title)}' to {escape(str(output_path))}[/green]")


def run():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
