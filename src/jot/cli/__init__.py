"""jot CLI: entry point for writing entries and managing journals."""

import click

from jot import __version__

from .common import DEFAULT_CONFIG_PATH, build_config


@click.group()
@click.version_option(version=__version__, package_name="jot")
@click.option("--data-dir", type=click.Path(file_okay=False), default=None, help="Data root (default ~/.jot).")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help=f"Config file (default {DEFAULT_CONFIG_PATH}).",
)
@click.pass_context
def main(ctx: click.Context, data_dir: str | None, config_file: str | None) -> None:
    """jot: a simple, secure journaling tool."""
    ctx.obj = build_config(config_file=config_file, data_dir=data_dir)


from .entry_cmd import collection, nuke, orphans, write
from .journal_cmd import journal

main.add_command(write)
main.add_command(collection)
main.add_command(journal)
main.add_command(orphans)
main.add_command(nuke)
