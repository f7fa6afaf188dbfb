"""Entries command group: add, edit, remove, list and show duty entries."""

import json
from datetime import date
from typing import Optional

import click
from rich.console import Console

from otcalc.cli.renderers.report_renderer import render_entries, render_entry
from otcalc.sdk import (
    Allowance,
    Entry,
    EntryNotFoundError,
    EntryStoreError,
    default_entry_date,
    default_store,
    find_period_index,
    in_fiscal_year,
    load_rate_config,
    save_entry,
    valuate,
)

ALLOWANCE_CHOICES = [a.value for a in Allowance]


def _entry_options(f):
    """Options shared by add and edit. Hours are taken as raw text and
    coerced the same way stored values are (blank or invalid = 0)."""
    f = click.option("--comments", help="Additional details.")(f)
    f = click.option("--pa", "allowance", type=click.Choice(ALLOWANCE_CHOICES, case_sensitive=False),
                     help="Allowance code (None, PA1, PA2, PA3).")(f)
    f = click.option("--h200", "hours_200", help="Hours at 2.0x.")(f)
    f = click.option("--h150", "hours_150", help="Hours at 1.5x.")(f)
    f = click.option("--h133", "hours_133", help="Hours at 1.33x.")(f)
    f = click.option("--reason", help="Reason / duty description.")(f)
    f = click.option("--date", "entry_date", type=click.DateTime(formats=["%Y-%m-%d"]),
                     help="Duty date (YYYY-MM-DD).")(f)
    return f


def _collect_fields(entry_date, reason, hours_133, hours_150, hours_200, allowance, comments) -> dict:
    """Options actually given on the command line."""
    fields = {
        "date": entry_date.date() if entry_date else None,
        "reason": reason,
        "hours_133": hours_133,
        "hours_150": hours_150,
        "hours_200": hours_200,
        "allowance": allowance,
        "comments": comments,
    }
    return {k: v for k, v in fields.items() if v is not None}


def _save(store, entry: Entry) -> Optional[str]:
    try:
        return save_entry(store, entry)
    except EntryNotFoundError as e:
        raise click.ClickException(str(e))
    except EntryStoreError as e:
        raise click.ClickException(f"Could not save entry: {e}")


def _warn_outside_fy(entry: Entry):
    if not in_fiscal_year(entry.date):
        click.echo(click.style(
            f"Note: {entry.date} is outside the fiscal year; the entry is kept but not counted in totals.",
            fg="yellow",
        ))


@click.group("entries")
def entries_cli():
    """Manage overtime and allowance entries.

    Entries are stored one file per entry under the data directory
    (see 'ot-calc settings show').
    """
    pass


@entries_cli.command("add")
@_entry_options
def entries_add(entry_date, reason, hours_133, hours_150, hours_200, allowance, comments):
    """Record a new entry.

    The date defaults to today, or the fiscal year start if today is
    outside the fiscal year. An entry with no hours, no allowance, no
    reason and no comments is not saved.

    \b
    Examples:
      ot-calc entries add --date 2026-03-02 --reason "Late arrest" --h150 2.5
      ot-calc entries add --pa PA2 --comments "Football"
    """
    fields = _collect_fields(entry_date, reason, hours_133, hours_150, hours_200, allowance, comments)
    fields.setdefault("date", default_entry_date(date.today()))
    entry = Entry.model_validate(fields)

    store = default_store()
    entry_id = _save(store, entry)
    if entry_id is None:
        click.echo("Nothing to save: entry has no hours, allowance, reason or comments.")
        return

    click.echo(click.style(f"Saved entry {entry_id} ({entry.date})", fg="green"))
    _warn_outside_fy(entry)


@entries_cli.command("edit")
@click.argument("entry_id")
@_entry_options
def entries_edit(entry_id, entry_date, reason, hours_133, hours_150, hours_200, allowance, comments):
    """Update an existing entry in place.

    Only the options given are changed; the entry keeps its ID.
    """
    store = default_store()
    existing = store.get(entry_id)
    if existing is None:
        raise click.ClickException(f"Entry not found: {entry_id}")

    fields = _collect_fields(entry_date, reason, hours_133, hours_150, hours_200, allowance, comments)
    if not fields:
        raise click.ClickException("Nothing to change. Pass at least one option (see --help).")

    updated = Entry.model_validate({**existing.model_dump(), **fields})
    if _save(store, updated) is None:
        click.echo("Not saved: the edit would leave the entry empty. Use 'entries remove' to delete it.")
        return

    click.echo(click.style(f"Updated entry {entry_id}", fg="green"))
    _warn_outside_fy(updated)


@entries_cli.command("remove")
@click.argument("entry_id")
@click.option("--force", is_flag=True, help="Skip confirmation prompt.")
def entries_remove(entry_id: str, force: bool):
    """Delete an entry by ID."""
    store = default_store()
    entry = store.get(entry_id)
    if entry is None:
        raise click.ClickException(f"Entry not found: {entry_id}")

    click.echo(f"Will remove: {entry.date} {entry.reason or '(no reason)'}")
    if not force:
        click.confirm("Proceed?", abort=True)

    try:
        removed = store.delete(entry_id)
    except EntryStoreError as e:
        raise click.ClickException(str(e))

    if removed:
        click.echo(click.style(f"Removed entry {entry_id}", fg="green"))
    else:
        raise click.ClickException(f"Failed to remove entry {entry_id}")


@entries_cli.command("list")
@click.option("--fy-only", is_flag=True, help="Only entries inside the fiscal year.")
@click.option("--count", "count_only", is_flag=True, help="Print only the number of matching entries.")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def entries_list(fy_only: bool, count_only: bool, output_format: str):
    """List stored entries, oldest first.

    Entries outside the fiscal year are shown (and editable) but do not
    count toward any totals.
    """
    config = load_rate_config()
    entries = default_store().list()
    if fy_only:
        entries = [e for e in entries if in_fiscal_year(e.date)]

    if count_only:
        click.echo(len(entries))
        return

    rows = [(e, valuate(e, config.rates, config.effective_tax_rate)) for e in entries]

    if output_format == "json":
        payload = [
            {
                **e.model_dump(mode="json"),
                "period_index": find_period_index(e.date),
                "valuation": v.model_dump(mode="json"),
            }
            for e, v in rows
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    if not rows:
        click.echo("No entries.")
        return

    render_entries(Console(), rows)


@entries_cli.command("show")
@click.argument("entry_id")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def entries_show(entry_id: str, output_format: str):
    """Show one entry with its pay calculation."""
    entry = default_store().get(entry_id)
    if entry is None:
        raise click.ClickException(f"Entry not found: {entry_id}")

    config = load_rate_config()
    valuation = valuate(entry, config.rates, config.effective_tax_rate)

    if output_format == "json":
        click.echo(json.dumps({
            **entry.model_dump(mode="json"),
            "valuation": valuation.model_dump(mode="json"),
        }, indent=2))
        return

    render_entry(Console(), entry, valuation, config)
