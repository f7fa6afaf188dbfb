"""Per-entry pay valuation.

SDK layer - pure calculation. Takes an entry and a rate snapshot, returns
gross and net figures. Malformed hours never raise; they were already
coerced to zero when the Entry was built.
"""

from .rates import allowance_amount
from .schemas import Entry, EntryValuation, TierRates, coerce_hours

__all__ = ["valuate", "overtime_gross", "apply_tax", "coerce_hours"]


def apply_tax(gross: float, tax_rate: float) -> float:
    """Net of a flat percentage tax."""
    return gross * (1 - tax_rate / 100)


def overtime_gross(entry: Entry, rates: TierRates) -> float:
    """Hours at each tier times that tier's hourly rate."""
    return (
        entry.hours_133 * rates.r133
        + entry.hours_150 * rates.r150
        + entry.hours_200 * rates.r200
    )


def valuate(entry: Entry, rates: TierRates, tax_rate: float) -> EntryValuation:
    """Compute overtime, allowance and total pay for one entry.

    Args:
        entry: The entry to value
        rates: Tier rate snapshot (all zero when no rank is selected)
        tax_rate: Flat tax percentage applied for the net figure

    Returns:
        EntryValuation with gross components, total gross/net and hours
    """
    ot = overtime_gross(entry, rates)
    pa = allowance_amount(entry.allowance)
    total = ot + pa
    return EntryValuation(
        overtime_gross=ot,
        allowance_gross=pa,
        total_gross=total,
        total_net=apply_tax(total, tax_rate),
        hours=entry.total_hours,
    )
