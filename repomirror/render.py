"""
Rendering functions for repomirror output.

Services return data; this module makes it human-readable with rich tables.
"""

from typing import Any, Dict, List

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .domain import FileInfo, LibraryEntry, SearchResult, SyncSummary

console = Console()


def _table(title: str) -> Table:
    return Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )


def render_sync_summary(summary: SyncSummary) -> None:
    """Render the per-repository outcomes of a sync run."""
    if not summary.outcomes:
        console.print(f"[yellow]{escape(summary.message)}[/yellow]")
        return

    table = _table(f"Sync ({summary.version})")
    table.add_column("Repository", style="cyan")
    table.add_column("Status")
    table.add_column("Commit", style="dim")

    for outcome in summary.outcomes:
        status = escape(outcome.status)
        table.add_row(
            outcome.name,
            status if outcome.ok else f"[red]{status}[/red]",
            outcome.commit or "",
        )

    console.print(table)
    style = "green" if summary.success else "red"
    console.print(f"[{style}]{escape(summary.message)}[/{style}]")


def render_status_table(status: Dict[str, Any]) -> None:
    """Render clone state of every configured repository."""
    table = _table("Mirror Status")
    table.add_column("Repository", style="cyan")
    table.add_column("Category", style="blue")
    table.add_column("Cloned")
    table.add_column("Commit", style="dim")
    table.add_column("Description")

    for repo in status['repos']:
        table.add_row(
            repo['name'],
            repo['category'],
            "✅" if repo['cloned'] else "-",
            repo.get('commit', ''),
            repo.get('description', ''),
        )

    console.print(table)
    console.print(f"[dim]Mirror root: {escape(status['repos_dir'])}[/dim]")


def render_search_results(results: List[SearchResult]) -> None:
    """Render search results as file:line followed by the matched text."""
    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    for result in results:
        location = result.file if result.line is None else f"{result.file}:{result.line}"
        console.print(f"[cyan]{escape(location)}[/cyan]  {escape(result.content)}")

    console.print(f"[dim]{len(results)} matches[/dim]")


def render_examples_table(examples: List[FileInfo]) -> None:
    if not examples:
        console.print("[yellow]No examples found.[/yellow]")
        return

    table = _table("Example Circuits")
    table.add_column("Name", style="cyan")
    table.add_column("Repository", style="blue")
    table.add_column("Path", style="dim")

    for example in examples:
        table.add_row(example.name, example.repo, example.path)

    console.print(table)


def render_libraries_table(libraries: List[LibraryEntry]) -> None:
    if not libraries:
        console.print("[yellow]No libraries found.[/yellow]")
        return

    table = _table("Noir Libraries")
    table.add_column("Name", style="cyan")
    table.add_column("Category", style="blue")
    table.add_column("Cloned")
    table.add_column("Description")

    for lib in libraries:
        table.add_row(lib.name, lib.category, "✅" if lib.cloned else "-", lib.description)

    console.print(table)
