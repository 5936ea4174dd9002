"""
Command Line Interface for the Document Scanner

Scan documents into outline items, sync them, and query the tag index and
task dashboard built from synced documents.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer
from rich import print as rich_print
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config.logging_config import LoggedOperation, LoggingConfig, StructuredLogger, setup_logging
from .config.settings import DEFAULT_CONFIG_FILE, ConfigError, Settings, load_settings
from .database.operations import DatabaseError, initialize_database, load_corpus, load_document_labels, load_task_rows
from .database.models import TaskStatus
from .index.dashboard import SortKey, StatusFilter, aggregate
from .index.tag_index import TagIndex, build_tag_graph
from .models import ItemKind
from .scanner.session import ScanSession
from .sources.base import DocumentSource
from .sources.http import HttpDocumentSource
from .sources.local import LocalDocumentSource
from .utils.text_utils import truncate_text

# Initialize CLI app
app = typer.Typer(
    name="doc-scanner",
    help="Document Scanner - Extract headings, tasks and tags from documents and track them across your library",
    add_completion=False,
    rich_markup_mode="rich"
)

# Initialize console for rich output
console = Console()

# Global state for configuration
settings: Settings = Settings()
structured_logger: Optional[StructuredLogger] = None

KIND_LABELS = {
    ItemKind.HEADING: "Heading",
    ItemKind.TASK: "Task",
    ItemKind.TAG: "Tag",
    ItemKind.COMMENT_TASK: "Comment",
}


@app.callback()
def main_callback(
    config: Path = typer.Option(DEFAULT_CONFIG_FILE, "--config", "-c", help="Path to settings JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show log output on the console"),
) -> None:
    """Load settings and configure logging before any command runs."""
    global settings, structured_logger

    try:
        settings = load_settings(config)
    except ConfigError as e:
        rich_print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    structured_logger = setup_logging(LoggingConfig(
        log_file=settings.log_file,
        log_level=settings.log_level,
        console_level="DEBUG" if verbose else "WARNING",
    ))


def get_structured_logger() -> StructuredLogger:
    global structured_logger
    if structured_logger is None:
        structured_logger = setup_logging(LoggingConfig(log_file=settings.log_file, log_level=settings.log_level))
    return structured_logger


def get_document_source(source_dir: Optional[Path]) -> DocumentSource:
    """Pick the document source: explicit directory, remote API, or configured directory."""
    if source_dir is not None:
        return LocalDocumentSource(source_dir)
    if settings.api_base_url is not None:
        return HttpDocumentSource(
            settings.api_base_url,
            token=settings.api_token,
            timeout_seconds=settings.request_timeout_seconds
        )
    return LocalDocumentSource(settings.documents_directory)


def require_database() -> None:
    """Exit with a message when nothing has been synced yet."""
    if not settings.database_path.exists():
        rich_print("[red]Database not found. Run 'doc-scanner scan --sync' first.[/red]")
        raise typer.Exit(1)


@app.command()
def scan(
    document_id: str = typer.Argument(..., help="Identifier of the document to scan"),
    source_dir: Optional[Path] = typer.Option(None, "--source-dir", "-s", help="Directory of exported document JSON files"),
    sync: bool = typer.Option(False, "--sync/--no-sync", help="Sync the scanned items to the database"),
    label: Optional[str] = typer.Option(None, "--label", "-l", help="Short label stored with the synced document"),
) -> None:
    """Scan one document and show its outline."""
    rich_print(f"\n[bold blue]Scanning {document_id}[/bold blue]")

    session = ScanSession(get_document_source(source_dir))
    with LoggedOperation(get_structured_logger(), "scan", document_id=document_id):
        result = asyncio.run(session.scan(document_id))

    if result is None:
        rich_print(f"[red]{session.status_message}[/red]")
        raise typer.Exit(1)

    if not result.is_worth_showing:
        rich_print("[yellow]No headings, tasks or tags found in this document.[/yellow]")
    else:
        table = Table(title=f"Outline: {document_id}", show_header=True, header_style="bold magenta")
        table.add_column("Kind", style="cyan")
        table.add_column("Text")
        table.add_column("Section", style="dim")
        table.add_column("Done", justify="center")

        for item in result.items:
            done = ""
            if item.is_task:
                done = "[green]x[/green]" if item.done else "[ ]"
            table.add_row(KIND_LABELS[item.kind], escape(truncate_text(item.text, 80)), item.section_id, done)

        console.print(table)

    if result.local_tags:
        rich_print(f"\n[bold]Tags:[/bold] {', '.join(sorted(result.local_tags))}")
    rich_print(f"[green]{result.recognized_count} recognized items[/green]")

    if sync:
        rich_print("\n[yellow]Syncing items...[/yellow]")
        try:
            initialize_database(settings.database_path)
        except DatabaseError as e:
            rich_print(f"[red]Failed to open database: {e}[/red]")
            raise typer.Exit(1)

        with LoggedOperation(get_structured_logger(), "sync", document_id=document_id):
            synced = session.sync(settings.database_path, label=label)
        get_structured_logger().log_sync_operation(
            document_id,
            synced,
            items_count=len(result.items),
            error=None if synced else session.status_message
        )

        if not synced:
            rich_print(f"[red]{session.status_message}[/red]")
            raise typer.Exit(1)
        rich_print(f"[green]{session.status_message}[/green]")


@app.command()
def tags(
    tag: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Show documents carrying this tag (repeatable)"),
    any_tag: bool = typer.Option(False, "--any", help="Match documents with any selected tag instead of all"),
    search: Optional[str] = typer.Option(None, "--search", "-q", help="Search tag names"),
) -> None:
    """Show the tag index built from synced documents."""
    require_database()
    try:
        index = TagIndex.build(load_corpus(settings.database_path))
    except DatabaseError as e:
        rich_print(f"[red]Failed to load synced items: {e}[/red]")
        raise typer.Exit(1)

    if tag:
        documents = index.documents_with_tags(tag, match_all=not any_tag)
        mode = "any of" if any_tag else "all of"
        rich_print(f"\n[bold blue]Documents with {mode} {', '.join(tag)}[/bold blue]")
        if not documents:
            rich_print("[yellow]No matching documents.[/yellow]")
        for document_id in sorted(documents):
            rich_print(f"  - {document_id}")
        return

    tag_names = index.search(search) if search else index.tags
    if not tag_names:
        rich_print("[yellow]No tags found.[/yellow]")
        return

    table = Table(title="Tag Index", show_header=True, header_style="bold magenta")
    table.add_column("Tag", style="cyan")
    table.add_column("Documents", style="green", justify="right")
    table.add_column("Document IDs")

    for tag_name in tag_names:
        documents = sorted(index.documents_for(tag_name))
        table.add_row(tag_name, str(len(documents)), truncate_text(", ".join(documents), 60))

    console.print(table)


@app.command()
def dashboard(
    status: Optional[StatusFilter] = typer.Option(None, "--status", help="Filter by task status"),
    sort: Optional[SortKey] = typer.Option(None, "--sort", help="Sort order"),
) -> None:
    """Show tasks from all synced documents."""
    require_database()
    status_filter = status or StatusFilter(settings.dashboard_status)
    sort_key = sort or SortKey(settings.dashboard_sort)

    try:
        view = aggregate(load_task_rows(settings.database_path), status_filter, sort_key)
    except DatabaseError as e:
        rich_print(f"[red]Failed to load tasks: {e}[/red]")
        raise typer.Exit(1)

    table = Table(
        title=f"Tasks ({status_filter.value}, {sort_key.value})",
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Status", style="cyan")
    table.add_column("Task")
    table.add_column("Document", style="dim")
    table.add_column("Created")
    table.add_column("Closed")

    for row in view.rows:
        status_text = "[green]Closed[/green]" if row.status is TaskStatus.CLOSED else "[yellow]Open[/yellow]"
        table.add_row(
            status_text,
            escape(truncate_text(row.content, 70)),
            row.document_id,
            row.created_at.strftime("%Y-%m-%d %H:%M"),
            row.closed_at.strftime("%Y-%m-%d %H:%M") if row.closed_at else "",
        )

    console.print(table)
    rich_print(f"[green]{view.count} tasks[/green]")


@app.command()
def graph(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write graph JSON to this file"),
) -> None:
    """Export the document/tag relationship graph as JSON."""
    require_database()
    try:
        index = TagIndex.build(load_corpus(settings.database_path))
        labels = load_document_labels(settings.database_path)
    except DatabaseError as e:
        rich_print(f"[red]Failed to load synced items: {e}[/red]")
        raise typer.Exit(1)

    payload = json.dumps(build_tag_graph(index, labels).to_dict(), indent=2)
    if output is None:
        typer.echo(payload)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(payload, encoding="utf-8")
    rich_print(f"[green]Graph written to {output}[/green]")


def main() -> None:
    """Main entry point for the CLI application."""
    app()


if __name__ == "__main__":
    main()
