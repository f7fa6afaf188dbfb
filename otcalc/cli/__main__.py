"""OT Calc CLI - Command-line interface for overtime and allowance pay."""

import json
import sys
from datetime import date

import click
from rich.console import Console

from otcalc import __version__
from otcalc.sdk import (
    FY_END,
    FY_START,
    PAY_PERIODS,
    EntryStoreError,
    dashboard as build_dashboard,
    default_store,
    find_period_index,
    graph_series,
    load_rate_config,
    monthly_breakdown,
    validate_calendar,
)

from .entries_commands import entries_cli as entries_group
from .renderers.report_renderer import render_breakdown, render_dashboard, render_graph
from .settings_commands import settings as settings_group

FISCAL_LABEL = f"{FY_START:%y}/{FY_END:%y}"


@click.group()
@click.version_option(version=__version__, prog_name="ot-calc")
def cli():
    """OT Calc - Overtime and allowance pay tracker.

    Record duty entries, then see gross and estimated net pay per pay
    month and for the whole fiscal year.

    Configuration is loaded from (in order):

    \b
    1. OT_CALC_CONFIG_PATH environment variable (config directory)
    2. settings.json 'profile' key
    3. ~/.config/ot-calc/profile.yaml (XDG default)

    Run 'ot-calc settings show' to see the current rank and tax rate.
    """
    pass


cli.add_command(entries_group, name="entries")
cli.add_command(settings_group)


def _load_entries():
    try:
        return default_store().list()
    except EntryStoreError as e:
        raise click.ClickException(f"Could not read entries: {e}")


def _match_period(value: str) -> int:
    """Resolve a period by 1-based number, short name or full label."""
    if value.isdigit():
        index = int(value) - 1
        if 0 <= index < len(PAY_PERIODS):
            return index
    wanted = value.strip().lower()
    for index, period in enumerate(PAY_PERIODS):
        if wanted in (period.short.lower(), period.label.lower()):
            return index
    raise click.BadParameter(
        f"Unknown pay month '{value}'. Use 1-{len(PAY_PERIODS)}, a short name (Apr) or a label (April 2026).",
        param_hint="--period",
    )


@cli.command("dashboard")
@click.option("--today", "today_str", help="Reference date (YYYY-MM-DD) for the current pay month. Default: today.")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def dashboard(today_str, output_format):
    """Fiscal-year totals and the previous/current/next pay months."""
    if today_str:
        try:
            today = date.fromisoformat(today_str)
        except ValueError:
            raise click.BadParameter(f"Invalid date '{today_str}'. Use YYYY-MM-DD.", param_hint="--today")
    else:
        today = date.today()

    config = load_rate_config()
    data = build_dashboard(_load_entries(), config, today)

    if output_format == "json":
        payload = data.model_dump(mode="json")
        payload["fiscal_year"] = FISCAL_LABEL
        click.echo(json.dumps(payload, indent=2))
        return

    render_dashboard(Console(), data, FISCAL_LABEL)


@cli.command("breakdown")
@click.option("--period", help="Only this pay month (number, short name or label).")
@click.option("--entries", "show_entries", is_flag=True, help="List the entries under each pay month.")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def breakdown(period, show_entries, output_format):
    """Per-pay-month hours, allowances and pay.

    All twelve pay months are shown, including empty ones.
    """
    config = load_rate_config()
    periods = monthly_breakdown(_load_entries(), config)
    if period:
        periods = [periods[_match_period(period)]]

    if output_format == "json":
        click.echo(json.dumps([p.model_dump(mode="json") for p in periods], indent=2))
        return

    render_breakdown(Console(), periods, show_entries=show_entries)


@cli.command("graph")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def graph(output_format):
    """Overtime-only gross vs net per pay month (allowances excluded)."""
    config = load_rate_config()
    points = graph_series(_load_entries(), config)

    if output_format == "json":
        click.echo(json.dumps([p.model_dump(mode="json") for p in points], indent=2))
        return

    render_graph(Console(), points)


@cli.command("periods")
@click.option("--check", is_flag=True, help="Verify the calendar covers the fiscal year with no gaps or overlaps.")
def periods(check):
    """List the pay months of the fiscal year and their date ranges."""
    today_index = find_period_index(date.today())
    click.echo(f"Fiscal year {FISCAL_LABEL}: {FY_START} to {FY_END}")
    for index, period in enumerate(PAY_PERIODS):
        marker = "*" if index == today_index else " "
        click.echo(f"{marker} {index + 1:>2}. {period.label:<15} {period.start} to {period.end}")

    if not check:
        return

    problems = validate_calendar()
    if problems:
        click.echo(click.style("\nCalendar problems:", fg="red"), err=True)
        for problem in problems:
            click.echo(f"  - {problem}", err=True)
        sys.exit(1)
    click.echo(click.style("\nCalendar OK", fg="green"))


@cli.command("reset")
@click.option("--force", is_flag=True, help="Skip confirmation prompt.")
def reset(force: bool):
    """Delete all entries.

    Settings (rank, service, tax rate, data_dir) are preserved.
    """
    store = default_store()
    count = len(_load_entries())

    if count == 0:
        click.echo("No entries to delete.")
        return

    click.echo(f"Entries directory: {store.root}")
    click.echo(f"Will delete {count} entries.")
    click.echo("Settings preserved.")

    if not force:
        click.confirm("\nProceed with reset?", abort=True)

    try:
        deleted = store.clear()
    except EntryStoreError as e:
        raise click.ClickException(str(e))

    click.echo(click.style(f"\nDeleted {deleted} entries.", fg="green"))


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
