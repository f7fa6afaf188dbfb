"""Fiscal-year pay period calendar.

Twelve contiguous pay periods cover the fiscal year exactly. Period labels
name the month the pay lands in, which is why the first period (worked
February-March) is "April 2026".
"""

from datetime import date, timedelta
from typing import List, Optional, Sequence

from .schemas import PayPeriod


FY_START = date(2026, 2, 9)
FY_END = date(2027, 2, 7)

PAY_PERIODS = (
    PayPeriod(label="April 2026", short="Apr", start=date(2026, 2, 9), end=date(2026, 3, 8)),
    PayPeriod(label="May 2026", short="May", start=date(2026, 3, 9), end=date(2026, 4, 12)),
    PayPeriod(label="June 2026", short="Jun", start=date(2026, 4, 13), end=date(2026, 5, 10)),
    PayPeriod(label="July 2026", short="Jul", start=date(2026, 5, 11), end=date(2026, 6, 7)),
    PayPeriod(label="August 2026", short="Aug", start=date(2026, 6, 8), end=date(2026, 7, 12)),
    PayPeriod(label="September 2026", short="Sep", start=date(2026, 7, 13), end=date(2026, 8, 9)),
    PayPeriod(label="October 2026", short="Oct", start=date(2026, 8, 10), end=date(2026, 9, 6)),
    PayPeriod(label="November 2026", short="Nov", start=date(2026, 9, 7), end=date(2026, 10, 11)),
    PayPeriod(label="December 2026", short="Dec", start=date(2026, 10, 12), end=date(2026, 11, 8)),
    PayPeriod(label="January 2027", short="Jan", start=date(2026, 11, 9), end=date(2026, 12, 6)),
    PayPeriod(label="February 2027", short="Feb", start=date(2026, 12, 7), end=date(2027, 1, 10)),
    PayPeriod(label="March 2027", short="Mar", start=date(2027, 1, 11), end=date(2027, 2, 7)),
)


def in_fiscal_year(day: date) -> bool:
    """True if day falls inside [FY_START, FY_END]."""
    return FY_START <= day <= FY_END


def find_period_index(day: date, periods: Sequence[PayPeriod] = PAY_PERIODS) -> Optional[int]:
    """Index of the period containing day, or None outside the calendar."""
    for index, period in enumerate(periods):
        if period.contains(day):
            return index
    return None


def get_period(index: int, periods: Sequence[PayPeriod] = PAY_PERIODS) -> Optional[PayPeriod]:
    """Period at index, or None when out of range (negatives included)."""
    if index < 0 or index >= len(periods):
        return None
    return periods[index]


def default_entry_date(today: date) -> date:
    """Date to pre-fill for a new entry: today, clamped into the fiscal year."""
    return today if in_fiscal_year(today) else FY_START


def validate_calendar(
    periods: Sequence[PayPeriod] = PAY_PERIODS,
    start: date = FY_START,
    end: date = FY_END,
) -> List[str]:
    """Check that periods tile [start, end] with no gaps or overlaps.

    Returns:
        List of problems (empty if the calendar is sound)
    """
    errors = []

    if not periods:
        return ["calendar has no periods"]

    for period in periods:
        if period.end < period.start:
            errors.append(f"{period.label}: ends ({period.end}) before it starts ({period.start})")

    if periods[0].start != start:
        errors.append(f"first period starts {periods[0].start}, fiscal year starts {start}")
    if periods[-1].end != end:
        errors.append(f"last period ends {periods[-1].end}, fiscal year ends {end}")

    for prev, nxt in zip(periods, periods[1:]):
        expected = prev.end + timedelta(days=1)
        if nxt.start < expected:
            errors.append(f"{prev.label} overlaps {nxt.label} ({nxt.start} <= {prev.end})")
        elif nxt.start > expected:
            errors.append(f"gap between {prev.label} and {nxt.label} ({expected} to {nxt.start - timedelta(days=1)})")

    return errors
