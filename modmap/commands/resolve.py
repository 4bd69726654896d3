"""Resolve and load identifiers through the configured autoloader."""

import os

import click

from ..autoloader import AutoloaderManager
from ..console import console
from ..utils.error_format import escape_markup
from ..utils.error_format import format_error_message

EXIT_NOT_FOUND = 1
EXIT_DANGLING = 2


@click.command()
@click.argument("identifier")
@click.option("--explain", is_flag=True, help="List every candidate file that was considered")
@click.pass_obj
def resolve(obj: dict, identifier: str, explain: bool):
    """Show which file IDENTIFIER resolves to.

    Example:

        \b
        modmap resolve App.Models.User --explain
    """
    autoloader: AutoloaderManager = obj["autoloader"]
    file_path, source = autoloader.resolve_with_source(identifier)

    if explain:
        class_file = autoloader.get_class_map().get_class_file(identifier)
        if class_file is not None:
            console.print(f"  class map: {escape_markup(class_file)} {_mark(class_file)}")
        else:
            console.print("  class map: [dim]no entry[/dim]")

        namespace_map = autoloader.get_namespace_map()
        candidates = list(namespace_map.candidate_files(identifier)) if hasattr(namespace_map, "candidate_files") else []
        for prefix, candidate in candidates:
            console.print(f"  {escape_markup(prefix)} {escape_markup(candidate)} {_mark(candidate)}")
        if not candidates:
            console.print("  namespaces: [dim]no matching prefix[/dim]")
        console.print()

    if file_path is None:
        console.print(f"[yellow]{escape_markup(identifier)} is not mapped[/yellow]")
        raise SystemExit(EXIT_NOT_FOUND)

    console.print(f"[green]{escape_markup(identifier)}[/green] -> {escape_markup(file_path)} [dim]({source})[/dim]")


@click.command()
@click.argument("identifier")
@click.pass_obj
def load(obj: dict, identifier: str):
    """Include the file IDENTIFIER resolves to.

    Exits 0 when loaded, 1 when nothing maps IDENTIFIER and 2 when the
    class map points at a missing file.
    """
    autoloader: AutoloaderManager = obj["autoloader"]
    try:
        loaded = autoloader.load_class(identifier)
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e))}")
        raise SystemExit(EXIT_NOT_FOUND)

    if loaded is None:
        console.print(f"[yellow]{escape_markup(identifier)} is not mapped[/yellow]")
        raise SystemExit(EXIT_NOT_FOUND)
    if loaded is False:
        file_path = autoloader.find_file(identifier)
        console.print(f"[red]{escape_markup(identifier)} maps to missing file {escape_markup(file_path)}[/red]")
        raise SystemExit(EXIT_DANGLING)

    console.print(f"[green]✓ Loaded {escape_markup(identifier)}[/green]")


def _mark(path: str) -> str:
    return "[green]✓[/green]" if os.path.isfile(path) else "[red]✗[/red]"
