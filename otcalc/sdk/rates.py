"""Static pay tables: overtime tier rates, allowances, tax-rate choices.

Rates are hourly and already include the tier multiplier (the r133 column
is 1.33x the base hourly rate, and so on).
"""

from typing import Any, Dict, List, Optional

from .schemas import DEFAULT_TAX_RATE, Allowance, Rank, TierRates


RATE_TABLE: Dict[Rank, Dict[str, TierRates]] = {
    Rank.CONSTABLE_PRE_2013: {
        "PC - Year 4": TierRates(r133=25.688, r150=28.906, r200=38.541),
        "PC - Year 5": TierRates(r133=26.47, r150=29.787, r200=39.715),
        "PC - Year 6": TierRates(r133=28.677, r150=32.27, r200=43.027),
        "PC - Year 7+": TierRates(r133=30.91, r150=34.782, r200=46.376),
    },
    Rank.CONSTABLE_POST_2013: {
        "PC - Year 3": TierRates(r133=20.781, r150=23.385, r200=31.18),
        "PC - Year 4": TierRates(r133=21.591, r150=24.296, r200=32.394),
        "PC - Year 5": TierRates(r133=23.21, r150=26.117, r200=34.823),
        "PC - Year 6": TierRates(r133=26.47, r150=29.787, r200=39.715),
        "PC - Year 7+": TierRates(r133=30.91, r150=34.782, r200=46.376),
    },
    Rank.SERGEANT: {
        "Sgt - Point 1": TierRates(r133=32.946, r150=37.073, r200=49.431),
        "Sgt - Point 2": TierRates(r133=33.619, r150=37.83, r200=50.44),
        "Sgt - Point 3+": TierRates(r133=34.57, r150=38.901, r200=51.868),
    },
}

ALLOWANCE_RATES: Dict[Allowance, float] = {
    Allowance.NONE: 0,
    Allowance.PA1: 40,
    Allowance.PA2: 90,
    Allowance.PA3: 125,
}

TAX_RATES = (20, 40, 45)

__all__ = [
    "RATE_TABLE",
    "ALLOWANCE_RATES",
    "TAX_RATES",
    "DEFAULT_TAX_RATE",
    "service_bands",
    "lookup_rates",
    "allowance_amount",
    "parse_rank",
]


def parse_rank(value: Any) -> Optional[Rank]:
    """Resolve a rank from its enum or display name; None if unknown."""
    if isinstance(value, Rank):
        return value
    if not value:
        return None
    try:
        return Rank(value)
    except ValueError:
        return None


def service_bands(rank: Rank) -> List[str]:
    """Service bands for a rank, in table order."""
    return list(RATE_TABLE.get(rank, {}))


def lookup_rates(rank: Rank, service: str) -> Optional[TierRates]:
    """Tier rates for (rank, service), or None if the pair is not in the table."""
    return RATE_TABLE.get(rank, {}).get(service)


def allowance_amount(code: Any) -> float:
    """Flat amount for an allowance code (0 for None or unknown codes)."""
    if not isinstance(code, Allowance):
        try:
            code = Allowance(code)
        except ValueError:
            return 0
    return ALLOWANCE_RATES.get(code, 0)
