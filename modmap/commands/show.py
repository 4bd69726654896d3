"""Show configured mappings."""

import click
from rich.table import Table

from ..autoloader import AutoloaderManager
from ..console import console


@click.command()
@click.option("--namespaces", "only_namespaces", is_flag=True, help="Only show namespace mappings")
@click.option("--classes", "only_classes", is_flag=True, help="Only show class map entries")
@click.option("--files", "only_files", is_flag=True, help="Only show bootstrap files")
@click.pass_obj
def show(obj: dict, only_namespaces: bool, only_classes: bool, only_files: bool):
    """Show namespaces, class map and files from the active configuration."""
    autoloader: AutoloaderManager = obj["autoloader"]
    show_all = not (only_namespaces or only_classes or only_files)

    if show_all or only_namespaces:
        namespaces = autoloader.get_namespaces()
        if namespaces:
            table = Table(title="Namespaces", show_header=True, header_style="bold cyan")
            table.add_column("Prefix", style="green")
            table.add_column("Directories")
            for prefix, paths in namespaces.items():
                table.add_row(prefix, "\n".join(paths))
            console.print(table)
        else:
            console.print("[dim]No namespaces configured[/dim]")

    if show_all or only_classes:
        classes = autoloader.get_class_map().get_all_classes()
        if classes:
            table = Table(title="Class map", show_header=True, header_style="bold cyan")
            table.add_column("Identifier", style="green")
            table.add_column("File")
            for identifier, file_path in classes.items():
                table.add_row(identifier, file_path)
            console.print(table)
        else:
            console.print("[dim]No class map entries[/dim]")

    if show_all or only_files:
        files = autoloader.get_files()
        if files:
            table = Table(title="Files", show_header=True, header_style="bold cyan")
            table.add_column("File")
            for file_path in files:
                table.add_row(file_path)
            console.print(table)
        else:
            console.print("[dim]No bootstrap files[/dim]")
