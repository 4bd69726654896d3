"""modmap CLI - inspect and install autoload mappings."""

import logging
import os
from pathlib import Path

import click

from .autoloader import AutoloaderManager
from .commands.discover import discover
from .commands.generate import generate
from .commands.install import install
from .commands.resolve import load
from .commands.resolve import resolve
from .commands.show import show
from .config import AutoloadConfig
from .config import ConfigError
from .console import console
from .discovery import ConfigurableDiscoveryManager
from .import_hook import MetaPathHost
from .logging_setup import init_json_logging
from .settings import ScopedSettings
from .settings import SettingsPaths
from .utils.error_format import escape_markup
from .utils.error_format import format_error_message

logger = logging.getLogger(__name__)


def _load_config(config_path: Path | None) -> AutoloadConfig:
    if config_path is not None:
        return AutoloadConfig().load_from_file(config_path)
    return ScopedSettings(SettingsPaths.default(Path.cwd())).load_config()


@click.group(invoke_without_command=True)
@click.version_option(package_name="modmap")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Autoload configuration file (default: .modmap settings of the current project)",
)
@click.option("--log-file", type=click.Path(path_type=Path, dir_okay=False), default=None, help="Write JSONL logs here")
@click.option("--debug", is_flag=True, help="Log at DEBUG level")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, log_file: Path | None, debug: bool):
    """modmap - map dotted identifiers to source files."""
    try:
        config = _load_config(config_path)
        debug = debug or config.validate().development.debug
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e, include_type=False))}")
        ctx.exit(1)

    if log_file is not None or os.environ.get("MODMAP_LOG_PATH"):
        init_json_logging(log_file, "DEBUG" if debug else None)
    elif debug:
        logging.basicConfig(level=logging.DEBUG)

    # Never registered: bootstrap files only run when a command includes them
    autoloader = AutoloaderManager(host=MetaPathHost(meta_path=[]))
    try:
        config.apply(autoloader, register=False)
        ConfigurableDiscoveryManager(base_path=config.base_path or Path.cwd()).load_config(
            config
        ).perform_auto_discovery(autoloader)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e, include_type=False))}")
        ctx.exit(1)

    ctx.obj = {"config": config, "autoloader": autoloader}
    logger.debug(f"[autoload:cli] {config!r}")

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


cli.add_command(resolve)
cli.add_command(load)
cli.add_command(show)
cli.add_command(discover)
cli.add_command(generate)
cli.add_command(install)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
