import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from quickfind import __version__
from quickfind.config import get_settings
from quickfind.core.engine import TraversalEngine
from quickfind.core.exceptions import RootDirectoryNotFoundError
from quickfind.core.models import MatchRecord, ProgressEvent, SearchReport, SearchRequest

logger = logging.getLogger(__name__)

APP_HELP = """
quickfind: search a directory tree for a piece of text.

One pass over every file and directory below DIRECTORY looks for TEXT in:

1. NAMES:     every file and directory base name
2. JSON:      each line of *.json files, with JSON paths for matching lines
3. DATABASES: table names, column names and text columns of *.db,
              *.sqlite and *.sqlite3 files (opened read-only)

Matching is a plain substring test, case-insensitive unless -c is given.
"""

SEARCH_SCOPE = "file/directory names, .json files, .db/.sqlite/.sqlite3 files"

app = typer.Typer(name="quickfind", help=APP_HELP, add_completion=False)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"quickfind {__version__}")
        raise typer.Exit()


@app.command()
def search(
    text: str = typer.Argument(..., help="Text to search for"),
    directory: Path = typer.Argument(None, help="Directory to search (defaults to the current directory)"),
    case_sensitive: bool = typer.Option(False, "--case-sensitive", "-c", help="Case-sensitive search"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log skipped files and traversal details"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """
    Search file and directory names, JSON content and SQLite databases.
    """
    if text == "":
        raise typer.BadParameter("search text must not be empty", param_hint="TEXT")

    configure_logging(verbose)
    console = Console()

    if directory is None:
        directory = Path.cwd()

    request = SearchRequest(search_text=text, root_directory=directory, case_sensitive=case_sensitive)

    if not json_output:
        console.print(f"[green]Searching for:[/green] '{escape(text)}'")
        console.print(f"[green]Directory:[/green] '{escape(str(directory))}'")
        console.print(f"[green]Case sensitive:[/green] {'yes' if case_sensitive else 'no'}")
        console.print(f"[green]Scope:[/green] {SEARCH_SCOPE}")

    try:
        report = run_with_progress(request, console, show_progress=not json_output)
    except RootDirectoryNotFoundError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    if json_output:
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        render_report(report, console)


def run_with_progress(request: SearchRequest, console: Console, show_progress: bool = True) -> SearchReport:
    """Run the search on a worker thread while the progress bar renders.

    Ctrl-C stops the traversal and returns what was found so far.
    """
    engine = TraversalEngine()
    cancel_event = threading.Event()

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        SpinnerColumn(),
        console=console,
        disable=not show_progress,
    ) as progress:
        task = progress.add_task("[blue]Searching all files...[/blue]", total=None)

        def on_progress(event: ProgressEvent) -> None:
            if event.total == 0:
                progress.update(task, total=1, completed=1)
            else:
                progress.update(task, total=event.total, completed=event.completed)

        with ThreadPoolExecutor(max_workers=1) as executor:
            future = executor.submit(engine.run, request, on_progress, cancel_event)
            try:
                report = future.result()
            except KeyboardInterrupt:
                cancel_event.set()
                progress.update(task, description="[yellow]Cancelling...[/yellow]")
                report = future.result()

        if report.cancelled:
            progress.update(task, description="[yellow]Search cancelled[/yellow]")
        else:
            progress.update(task, description="[green]Search complete[/green]")

    return report


def _format_detail(record: MatchRecord) -> str:
    if record.type_tag:
        return f"[{record.type_tag}] {record.detail}"
    return record.detail


def render_report(report: SearchReport, console: Console) -> None:
    """Print warnings, one table per match kind and the final total."""
    for warning in report.warnings:
        console.print(f"[yellow]Warning: skipped {escape(warning.path)} ({escape(warning.message)})[/yellow]")

    if report.cancelled:
        console.print(
            f"[yellow]Search cancelled after {report.processed_entries} of "
            f"{report.total_entries} entries; showing partial results[/yellow]"
        )

    if not report.records:
        console.print("[red]No matches found[/red]")
        return

    console.print(f"\n[bold underline]Search results:[/bold underline] ([green]{report.count}[/green] matches)")

    for kind, records in report.grouped().items():
        console.print(f"\n[bold]{kind.label}:[/bold] ([yellow]{len(records)}[/yellow] results)")

        table = Table()
        table.add_column("Path", justify="left", style="cyan")
        table.add_column("Match info", justify="left")
        for record in records:
            table.add_row(escape(record.path), escape(_format_detail(record)))

        console.print(table)

    console.print(f"\n[green]Search complete! {report.count} matches found[/green]")


if __name__ == "__main__":
    app()
