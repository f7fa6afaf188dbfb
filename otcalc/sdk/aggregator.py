"""Pay period aggregation.

SDK layer - pure functions over an entry snapshot and a RateConfig. Nothing
here reads storage or the clock; callers pass `today` explicitly and get a
freshly built view back on every call, so re-running after any store
change is always safe.

Money figures:
    overtime   hours x tier rate (zero when no rank is selected)
    allowance  flat amount per entry code (rank-independent)
    net        gross x (1 - tax_rate / 100)
"""

from datetime import date
from typing import Iterable, List, Optional, Sequence

from .periods import FY_END, FY_START, PAY_PERIODS, find_period_index, get_period
from .rates import ALLOWANCE_RATES
from .schemas import (
    Allowance,
    Dashboard,
    Entry,
    EntryLine,
    GraphPoint,
    PayPeriod,
    PeriodBreakdown,
    PeriodStats,
    PeriodWindow,
    RateConfig,
    YearTotals,
)
from .valuation import apply_tax, overtime_gross, valuate

__all__ = [
    "fiscal_year_entries",
    "entries_in_period",
    "year_totals",
    "period_stats",
    "current_period_window",
    "monthly_breakdown",
    "graph_series",
    "dashboard",
]

COUNTED_ALLOWANCES = [a for a in Allowance if a is not Allowance.NONE]


def fiscal_year_entries(entries: Iterable[Entry]) -> List[Entry]:
    """Entries dated within [FY_START, FY_END], in input order."""
    return [e for e in entries if FY_START <= e.date <= FY_END]


def entries_in_period(entries: Iterable[Entry], period: PayPeriod) -> List[Entry]:
    """Fiscal-year entries whose date falls inside period (inclusive)."""
    return [e for e in fiscal_year_entries(entries) if period.contains(e.date)]


def year_totals(entries: Sequence[Entry], config: RateConfig) -> YearTotals:
    """Roll up every fiscal-year entry.

    total_hours counts worked hours even when no rank is selected, while
    the money totals stay at zero overtime in that case.
    """
    gross_ot = 0.0
    gross_pa = 0.0
    total_hours = 0.0

    for entry in fiscal_year_entries(entries):
        total_hours += entry.total_hours
        gross_ot += overtime_gross(entry, config.rates)
        gross_pa += ALLOWANCE_RATES.get(entry.allowance, 0)

    total_gross = gross_ot + gross_pa
    return YearTotals(
        gross_overtime=gross_ot,
        gross_allowance=gross_pa,
        total_gross=total_gross,
        total_net=apply_tax(total_gross, config.effective_tax_rate),
        total_hours=total_hours,
    )


def period_stats(entries: Sequence[Entry], config: RateConfig, index: int) -> Optional[PeriodStats]:
    """Gross and net (allowances included) for the period at index.

    Returns:
        PeriodStats, or None if index is outside the calendar
    """
    period = get_period(index)
    if period is None:
        return None

    gross = 0.0
    for entry in entries_in_period(entries, period):
        gross += overtime_gross(entry, config.rates) + ALLOWANCE_RATES.get(entry.allowance, 0)

    return PeriodStats(
        label=period.label,
        gross=gross,
        net=apply_tax(gross, config.effective_tax_rate),
    )


def current_period_window(entries: Sequence[Entry], config: RateConfig, today: date) -> PeriodWindow:
    """Stats for the periods before, containing, and after today.

    If today is outside the fiscal year there is no current period and all
    three slots are None. At the first/last period the missing neighbour is
    None on its own.
    """
    index = find_period_index(today)
    if index is None:
        return PeriodWindow()

    return PeriodWindow(
        previous=period_stats(entries, config, index - 1),
        current=period_stats(entries, config, index),
        next=period_stats(entries, config, index + 1),
    )


def _breakdown_for(index: int, period: PayPeriod, entries: List[Entry], config: RateConfig) -> PeriodBreakdown:
    tax = config.effective_tax_rate
    h133 = h150 = h200 = 0.0
    counts = {a.value: 0 for a in COUNTED_ALLOWANCES}
    gross_ot = 0.0
    gross_pa = 0.0

    for entry in entries:
        h133 += entry.hours_133
        h150 += entry.hours_150
        h200 += entry.hours_200
        gross_ot += overtime_gross(entry, config.rates)
        gross_pa += ALLOWANCE_RATES.get(entry.allowance, 0)
        if entry.allowance in COUNTED_ALLOWANCES:
            counts[entry.allowance.value] += 1

    net_ot = apply_tax(gross_ot, tax)
    net_pa = apply_tax(gross_pa, tax)

    # sorted() is stable, so same-day entries keep their stored order
    lines = [
        EntryLine(entry=e, valuation=valuate(e, config.rates, tax))
        for e in sorted(entries, key=lambda e: e.date)
    ]

    return PeriodBreakdown(
        index=index,
        label=period.label,
        short=period.short,
        start=period.start,
        end=period.end,
        hours_133=h133,
        hours_150=h150,
        hours_200=h200,
        allowance_counts=counts,
        overtime_gross=gross_ot,
        overtime_net=net_ot,
        allowance_gross=gross_pa,
        allowance_net=net_pa,
        total_gross=gross_ot + gross_pa,
        total_net=net_ot + net_pa,
        entries=lines,
    )


def monthly_breakdown(entries: Sequence[Entry], config: RateConfig) -> List[PeriodBreakdown]:
    """Per-period detail for all twelve periods, in calendar order."""
    fy = fiscal_year_entries(entries)
    return [
        _breakdown_for(index, period, [e for e in fy if period.contains(e.date)], config)
        for index, period in enumerate(PAY_PERIODS)
    ]


def graph_series(entries: Sequence[Entry], config: RateConfig) -> List[GraphPoint]:
    """Overtime-only gross/net per period for charting.

    Allowances are flat payments and are left out of the series.
    """
    fy = fiscal_year_entries(entries)
    points = []
    for period in PAY_PERIODS:
        gross = sum(overtime_gross(e, config.rates) for e in fy if period.contains(e.date))
        points.append(GraphPoint(
            label=period.label,
            short=period.short,
            gross_overtime=gross,
            net_overtime=apply_tax(gross, config.effective_tax_rate),
        ))
    return points


def dashboard(entries: Sequence[Entry], config: RateConfig, today: date) -> Dashboard:
    """Year totals and the current period window in one view."""
    return Dashboard(
        totals=year_totals(entries, config),
        window=current_period_window(entries, config, today),
        rank_configured=config.rank_configured,
        tax_rate=config.effective_tax_rate,
    )
