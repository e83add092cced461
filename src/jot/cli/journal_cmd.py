"""jot journal: journal management commands."""

from __future__ import annotations

import click

from .common import open_collection, reporting_errors


@click.group()
def journal() -> None:
    """Manage journals."""


@journal.command("new")
@click.argument("name")
@click.pass_obj
def new(config, name: str) -> None:
    """Create a new journal."""
    with reporting_errors():
        open_collection(config).add_journal(name)
    click.echo(f"Created journal: {name}")


@journal.command("delete")
@click.argument("name")
@click.pass_obj
def delete(config, name: str) -> None:
    """Delete a journal and its entries."""
    with reporting_errors():
        removal = open_collection(config).remove_journal(name)
    for entry_id, err in removal.failed.items():
        click.echo(f"Warning: failed to delete entry {entry_id}: {err}", err=True)
    click.echo(f"Deleted journal: {name}")


@journal.command("default")
@click.argument("name")
@click.pass_obj
def default(config, name: str) -> None:
    """Set the default journal."""
    with reporting_errors():
        open_collection(config).set_default(name)
    click.echo(f"Set default journal to: {name}")


@journal.command("read")
@click.argument("name")
@click.pass_obj
def read(config, name: str) -> None:
    """Display all entries in a journal."""
    with reporting_errors():
        entries = open_collection(config).journal(name).read()
    if not entries:
        click.echo(f"No entries found in journal '{name}'")
        return
    click.echo(f"Entries in journal '{name}':")
    click.echo("------------------------")
    for result in entries:
        entry = result.entry
        if not result.ok:
            click.echo(f"Error decrypting entry {entry.id}: {result.error}")
            continue
        click.echo(f"[{entry.created:%Y-%m-%d %H:%M:%S}] ({entry.id}) {result.text}")


@journal.command("describe")
@click.argument("name")
@click.pass_obj
def describe(config, name: str) -> None:
    """Show journal metadata."""
    with reporting_errors():
        click.echo(open_collection(config).journal(name).describe())


@journal.command("delete-entry")
@click.argument("name")
@click.argument("entry_id")
@click.pass_obj
def delete_entry(config, name: str, entry_id: str) -> None:
    """Delete an entry from a journal."""
    with reporting_errors():
        open_collection(config).remove_entry(name, entry_id)
    click.echo(f"Entry {entry_id} deleted from journal '{name}'")
