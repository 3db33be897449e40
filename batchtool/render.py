"""
Rendering functions for batch-tool output.

This module handles all pretty-printing and table formatting.
The catalog service returns data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import Iterable, List, Optional, Sequence

from .domain import Repository
from .domain.label import label_names
from .services import CatalogService

console = Console()


def _print(text: str, out: Optional[Console] = None) -> None:
    """Print plain text: no markup, no highlighting, no wrapping."""
    (out or console).print(text, markup=False, highlight=False, soft_wrap=True)


def format_labels(service: CatalogService, labels: Sequence[str] = ()) -> str:
    """
    Format labels with their repositories.

    With no labels given, every label except the superset label is shown.
    """
    index = service.labels
    names = list(labels) or [name for name in index if name != service.superset_label]

    lines = []
    for name in sorted(names):
        repos = index.get(name)
        if repos:
            members = sorted(repos) if service.sort_repos else list(repos)
            lines.append(f"  ~ {name} ~")
            lines.append(", ".join(members))
        else:
            lines.append(f"  ~ {name} ~ (empty label)")

    return "\n".join(lines)


def print_labels(service: CatalogService, labels: Sequence[str] = (), out: Optional[Console] = None) -> None:
    """Print labels and their matched repositories."""
    text = format_labels(service, labels)
    if text:
        _print(text, out)


def format_match_summary(repos: List[str]) -> str:
    if not repos:
        return "This matches no known repositories"
    if len(repos) == 1:
        return f"This matches 1 repository: {repos[0]}"
    return f"This matches {len(repos)} repositories, listed below:\n{', '.join(repos)}"


def print_set(
    service: CatalogService,
    filters: Iterable[str],
    verbose: bool = False,
    out: Optional[Console] = None,
) -> None:
    """
    Print the set-notation form of the filters and the repositories they match.

    In verbose mode the labels referenced by the filters are expanded.
    """
    group, repos = service.parse_labels(filters)

    _print(f"You've selected the following set:\n{group}\n", out)
    _print(format_match_summary(repos), out)

    if not verbose:
        return

    forced, included, excluded = group.to_lists()
    for title, entries in (("Forced", forced), ("Included", included), ("Excluded", excluded)):
        names = label_names(entries, service.markers)
        if names:
            _print(f"\n{title} labels:", out)
            print_labels(service, names, out)


def render_repository_table(repos: Iterable[Repository], title: Optional[str] = None,
                            out: Optional[Console] = None) -> None:
    """
    Render catalog repositories as a pretty table.

    Args:
        repos: Repositories to show
        title: Optional table title
    """
    repos = list(repos)
    out = out or console

    if not repos:
        out.print("[yellow]No repositories found.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    table.add_column("Repository", style="cyan")
    table.add_column("Default Branch", style="green")
    table.add_column("Visibility", style="yellow")
    table.add_column("Labels", style="blue")
    table.add_column("Description", style="dim")

    for repo in repos:
        table.add_row(
            repo.qualified_name,
            repo.default_branch,
            "public" if repo.public else "private",
            ", ".join(repo.labels),
            repo.description,
        )

    out.print(table)
