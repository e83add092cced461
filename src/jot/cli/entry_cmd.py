"""Top-level commands: write, collection, orphans, nuke."""

from __future__ import annotations

import click

from .common import open_collection, reporting_errors


@click.command()
@click.option("-j", "--journal", "journal_name", default=None, help="Journal to write to (default journal if omitted).")
@click.argument("text", nargs=-1, required=True)
@click.pass_obj
def write(config, journal_name: str | None, text: tuple[str, ...]) -> None:
    """Write a new entry."""
    with reporting_errors():
        coll = open_collection(config)
        entry = coll.add_entry(journal_name, " ".join(text))
    click.echo(f"Entry {entry.id} added to journal '{entry.journal_id}'")


@click.command()
@click.pass_obj
def collection(config) -> None:
    """List all journals."""
    with reporting_errors():
        coll = open_collection(config)
    names = sorted(coll.list())
    if not names:
        click.echo("No journals found")
        return
    click.echo("Available Journals:")
    click.echo("------------------")
    for name in names:
        click.echo(f"  {name}")
    click.echo("\nNote: * indicates default journal")


@click.command()
@click.option("--prune", is_flag=True, help="Delete unreferenced records and drop dangling references.")
@click.pass_obj
def orphans(config, prune: bool) -> None:
    """Report entry records and journal references that have lost their other half."""
    with reporting_errors():
        coll = open_collection(config)
        report = coll.prune_orphans() if prune else coll.find_orphans()
    if report.clean:
        click.echo("No orphans found")
        return
    verb = "Pruned" if prune else "Found"
    for entry_id in report.unreferenced:
        click.echo(f"{verb} unreferenced entry record {entry_id}")
    for name, ids in sorted(report.dangling.items()):
        click.echo(f"{verb} dangling references in '{name}': {', '.join(ids)}")


@click.command()
@click.confirmation_option(prompt="WARNING: This will delete all journals, entries and keys. Are you sure?")
@click.pass_obj
def nuke(config) -> None:
    """Delete all data and regenerate encryption keys."""
    from jot.journal import reset_store

    with reporting_errors():
        reset_store(config)
    click.echo("All data has been deleted and encryption keys have been regenerated.")
