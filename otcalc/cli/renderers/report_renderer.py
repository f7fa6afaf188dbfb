"""Rich renderers for dashboard, breakdown, graph and entry listings.

Transforms SDK view models into formatted Rich tables.
"""

from typing import List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from otcalc.sdk.periods import find_period_index, get_period
from otcalc.sdk.schemas import (
    Allowance,
    Dashboard,
    Entry,
    EntryValuation,
    GraphPoint,
    PeriodBreakdown,
    PeriodStats,
    RateConfig,
)

CURRENCY = "£"
BAR_WIDTH = 40


def money(amount: float) -> str:
    return f"{CURRENCY}{amount:,.2f}"


def hours(value: float) -> str:
    return f"{value:g}" if value else "-"


def render_dashboard(console: Console, data: Dashboard, fiscal_label: str) -> None:
    """Render year totals and the previous/current/next period cards."""
    if not data.rank_configured:
        console.print(Panel(
            "[yellow]Set your rank with 'ot-calc settings rank' to calculate overtime pay.[/yellow]",
            title="Setup",
            border_style="yellow",
        ))

    totals = data.totals
    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("key", style="dim")
    summary.add_column("value", justify="right")
    summary.add_row(f"Total Gross Pay {fiscal_label}", f"[bold]{money(totals.total_gross)}[/bold]")
    summary.add_row(f"Est. Net Pay ({data.tax_rate:g}% tax)", f"[green]{money(totals.total_net)}[/green]")
    summary.add_row("Overtime (gross)", money(totals.gross_overtime))
    summary.add_row("Allowances (gross)", money(totals.gross_allowance))
    summary.add_row("Total Hours", f"{totals.total_hours:.1f}")
    console.print(Panel(summary, title="Fiscal Year", border_style="blue"))

    window = data.window
    cards = Table(box=box.SIMPLE_HEAD)
    cards.add_column("")
    cards.add_column("Pay Month")
    cards.add_column("Gross", justify="right")
    cards.add_column("Net", justify="right")
    for label, stats in (
        ("Previous", window.previous),
        ("Current", window.current),
        ("Next", window.next),
    ):
        _add_period_row(cards, label, stats)
    console.print(cards)


def _add_period_row(table: Table, label: str, stats: Optional[PeriodStats]) -> None:
    if stats is None:
        table.add_row(label, "[dim]n/a[/dim]", "-", "-")
        return
    style = "bold" if label == "Current" else ""
    table.add_row(label, stats.label, money(stats.gross), money(stats.net), style=style)


def render_breakdown(console: Console, periods: List[PeriodBreakdown], show_entries: bool = False) -> None:
    """Render one row per pay period, optionally followed by entry detail."""
    table = Table(title="Pay Breakdown", box=box.SIMPLE_HEAD)
    table.add_column("Pay Month")
    table.add_column("Dates", style="dim")
    table.add_column("1.33x", justify="right")
    table.add_column("1.5x", justify="right")
    table.add_column("2.0x", justify="right")
    table.add_column("OT Gross", justify="right")
    table.add_column("PA", justify="left")
    table.add_column("PA Gross", justify="right")
    table.add_column("Total Gross", justify="right")
    table.add_column("Total Net", justify="right", style="green")

    for p in periods:
        pa = " ".join(f"{code}:{n}" for code, n in p.allowance_counts.items() if n) or "-"
        table.add_row(
            p.label,
            f"{p.start:%d %b} - {p.end:%d %b}",
            hours(p.hours_133),
            hours(p.hours_150),
            hours(p.hours_200),
            money(p.overtime_gross),
            pa,
            money(p.allowance_gross),
            money(p.total_gross),
            money(p.total_net),
        )
    console.print(table)

    if not show_entries:
        return

    for p in periods:
        if not p.entries:
            continue
        detail = Table(title=f"{p.label} entries", box=box.MINIMAL)
        detail.add_column("ID", style="dim")
        detail.add_column("Date")
        detail.add_column("Reason")
        detail.add_column("Hours", justify="right")
        detail.add_column("PA")
        detail.add_column("Gross", justify="right")
        detail.add_column("Net", justify="right", style="green")
        for line in p.entries:
            e, v = line.entry, line.valuation
            detail.add_row(
                e.id or "",
                f"{e.date:%a %d %b}",
                e.reason or "[dim]-[/dim]",
                hours(v.hours),
                e.allowance.value if e.allowance is not Allowance.NONE else "-",
                money(v.total_gross),
                money(v.total_net),
            )
        console.print(detail)


def render_graph(console: Console, points: List[GraphPoint]) -> None:
    """Horizontal bar chart of overtime gross vs net per period."""
    scale = max([p.gross_overtime for p in points] + [100])

    table = Table(title="Overtime Only (Gross vs Net)", box=None, show_header=False, padding=(0, 1))
    table.add_column("month")
    table.add_column("bars")
    table.add_column("amounts", justify="right")

    for p in points:
        gross_len = round(p.gross_overtime / scale * BAR_WIDTH)
        net_len = round(p.net_overtime / scale * BAR_WIDTH)
        bars = f"[blue]{'█' * gross_len}[/blue]\n[green]{'█' * net_len}[/green]"
        amounts = f"{CURRENCY}{p.gross_overtime:,.0f}\n{CURRENCY}{p.net_overtime:,.0f}"
        table.add_row(p.short, bars, amounts)

    console.print(table)
    console.print("[blue]█[/blue] Gross OT   [green]█[/green] Net OT")


def render_entries(console: Console, rows: List[tuple]) -> None:
    """Render (entry, valuation) pairs as a table.

    Entries outside the fiscal year are listed with no pay month.
    """
    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("ID", style="dim")
    table.add_column("Date")
    table.add_column("Pay Month")
    table.add_column("Reason")
    table.add_column("1.33x", justify="right")
    table.add_column("1.5x", justify="right")
    table.add_column("2.0x", justify="right")
    table.add_column("PA")
    table.add_column("Gross", justify="right")

    for entry, valuation in rows:
        index = find_period_index(entry.date)
        period = get_period(index) if index is not None else None
        table.add_row(
            entry.id or "",
            entry.date.isoformat(),
            period.short if period else "[dim]outside FY[/dim]",
            entry.reason,
            hours(entry.hours_133),
            hours(entry.hours_150),
            hours(entry.hours_200),
            entry.allowance.value if entry.allowance is not Allowance.NONE else "-",
            money(valuation.total_gross),
        )
    console.print(table)


def render_entry(console: Console, entry: Entry, valuation: EntryValuation, config: RateConfig) -> None:
    """Render a single entry with its pay calculation."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value")

    table.add_row("Date", f"{entry.date:%A %d %B %Y}")
    table.add_row("Reason", entry.reason or "-")
    table.add_row("1.33x", f"{hours(entry.hours_133)} @ {money(config.rates.r133)}")
    table.add_row("1.5x", f"{hours(entry.hours_150)} @ {money(config.rates.r150)}")
    table.add_row("2.0x", f"{hours(entry.hours_200)} @ {money(config.rates.r200)}")
    table.add_row("Overtime", money(valuation.overtime_gross))
    if valuation.allowance_gross:
        table.add_row(f"{entry.allowance.value} Allowance", money(valuation.allowance_gross))
    table.add_row("Entry Total (Gross)", f"[bold]{money(valuation.total_gross)}[/bold]")
    table.add_row("Entry Total (Net)", f"[green]{money(valuation.total_net)}[/green]")
    if entry.comments:
        table.add_row("Comments", entry.comments)

    console.print(Panel(table, title=f"Entry {entry.id}", border_style="blue"))
