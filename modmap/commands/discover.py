"""Discover namespaces and classes in a source tree."""

from pathlib import Path

import click
from rich.table import Table

from ..console import console
from ..discovery import ClassDiscovery
from ..paths import normalize_namespace
from ..utils.error_format import escape_markup


@click.command()
@click.argument("directory", type=click.Path(path_type=Path, exists=True, file_okay=False))
@click.option("--namespace", "-n", "base_namespace", default="", help="Namespace the directory maps to")
@click.option("--classmap", is_flag=True, help="Show an identifier -> file class map instead of namespaces")
def discover(directory: Path, base_namespace: str, classmap: bool):
    """Scan DIRECTORY for class declarations.

    Examples:

        \b
        modmap discover src/app --namespace App
        modmap discover src/app --namespace App --classmap
    """
    discovery = ClassDiscovery()

    if classmap:
        entries = discovery.build_class_map(directory, base_namespace)
        if not entries:
            console.print(f"[dim]No classes found in {escape_markup(directory)}[/dim]")
            return
        table = Table(title=f"Class map for {directory}", show_header=True, header_style="bold cyan")
        table.add_column("Identifier", style="green")
        table.add_column("File")
        for identifier, file_path in entries.items():
            table.add_row(identifier, file_path)
        console.print(table)
        return

    namespaces = discovery.discover_namespaces(directory, base_namespace)
    if not namespaces:
        console.print(f"[dim]No classes found in {escape_markup(directory)}[/dim]")
        return

    table = Table(title=f"Namespaces in {directory}", show_header=True, header_style="bold cyan")
    table.add_column("Prefix", style="green")
    table.add_column("Directory")
    table.add_column("Classes", justify="right")
    counts: dict[str, int] = {}
    for info in discovery.get_discovered_classes():
        prefix = normalize_namespace(info.namespace)
        counts[prefix] = counts.get(prefix, 0) + len(info.all_classes)
    for prefix, path in namespaces.items():
        table.add_row(prefix, path, str(counts.get(prefix, 0)))
    console.print(table)
