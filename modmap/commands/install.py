"""Install the bootstrap file and patch entry points."""

from pathlib import Path

import click
from rich.table import Table

from ..console import console
from ..installer import AutoloadInstaller
from ..installer import InstallError
from ..utils.error_format import escape_markup
from ..utils.error_format import format_error_message

STATUS_STYLES = {
    "created": "green",
    "patched": "green",
    "exists": "dim",
    "already-patched": "dim",
    "missing": "yellow",
}


@click.command()
@click.option(
    "--root",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Project root (default: current directory)",
)
@click.option("--entry", "entries", multiple=True, help="Entry point script to patch (repeatable)")
def install(root: Path | None, entries: tuple[str, ...]):
    """Write bootstrap_autoload.py and hook it into entry points.

    Without --entry, manage.py, main.py, app.py and wsgi.py are patched
    when they exist.
    """
    installer = AutoloadInstaller(root)
    try:
        report = installer.install(list(entries) or None)
    except InstallError as e:
        console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e, include_type=False))}")
        raise SystemExit(1)

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("File")
    table.add_column("Status")
    for target, status in report.actions:
        style = STATUS_STYLES.get(status, "white")
        table.add_row(escape_markup(target), f"[{style}]{status}[/{style}]")
    console.print(table)
