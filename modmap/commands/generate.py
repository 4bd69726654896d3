"""Generate the autoload snapshot."""

from pathlib import Path

import click

from ..config import AutoloadConfig
from ..config import ConfigError
from ..console import console
from ..generator import AutoloadGenerator
from ..generator import GeneratorError
from ..utils.error_format import escape_markup
from ..utils.error_format import format_error_message


@click.command()
@click.option("--force", is_flag=True, help="Regenerate even when the snapshot is up to date")
@click.option("--optimize", is_flag=True, help="Scan namespace directories into a full class map")
@click.option("--output", "-o", type=click.Path(path_type=Path, dir_okay=False), default=None, help="Snapshot file")
@click.option("--modules", type=click.Path(path_type=Path, file_okay=False), default=None, help="Modules directory")
@click.pass_obj
def generate(obj: dict, force: bool, optimize: bool, output: Path | None, modules: Path | None):
    """Write a snapshot module that registers every mapping at import."""
    config: AutoloadConfig = obj["config"]
    generator = AutoloadGenerator(base_path=Path.cwd(), output_path=output, modules_path=modules)

    try:
        if not force and generator.is_up_to_date(config):
            console.print(f"[dim]Snapshot is up to date: {escape_markup(generator.get_output_path())}[/dim]")
            return

        output_path = generator.generate(config, optimize=optimize)
    except (GeneratorError, ConfigError) as e:
        console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e, include_type=False))}")
        raise SystemExit(1)

    console.print(f"[green]✓ Generated {escape_markup(output_path)}[/green]")
