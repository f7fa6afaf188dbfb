"""Pydantic schemas for ot-calc data and report views.

Entries and rate settings are read from loosely-typed storage (JSON files,
profile.yaml, MCP tool arguments), so the entry model coerces bad numeric
input to zero instead of rejecting it. Report views are plain value objects
rebuilt from scratch on every aggregation.
"""

import datetime as dt
import decimal
import math
import numbers
import re
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_TAX_RATE = 40

# Leading decimal number, the way a lenient float parse reads "2.5h" as 2.5
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


class Rank(str, Enum):
    """Rank categories with an entry in the rate table."""

    CONSTABLE_PRE_2013 = "Constable (Joined Pre 2013)"
    CONSTABLE_POST_2013 = "Constable (Joined Post 2013)"
    SERGEANT = "Sergeant"


class Allowance(str, Enum):
    """Flat allowance codes selectable per entry."""

    NONE = "None"
    PA1 = "PA1"
    PA2 = "PA2"
    PA3 = "PA3"


def coerce_hours(value: Any) -> float:
    """Convert a raw hours value to a non-negative float.

    Any real number (int, float, Decimal, Fraction) is accepted. None,
    blanks, booleans, unparseable text, values too large for a float,
    NaN/inf and negatives all become 0. Never raises.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return 0.0
        value = match.group(0)
    elif not isinstance(value, numbers.Real) and not isinstance(value, decimal.Decimal):
        return 0.0

    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0

    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def coerce_allowance(value: Any) -> Allowance:
    """Map a raw allowance code to an Allowance; unknown codes become NONE."""
    if isinstance(value, Allowance):
        return value
    if not isinstance(value, str):
        return Allowance.NONE
    by_code = {a.value.lower(): a for a in Allowance}
    return by_code.get(value.strip().lower(), Allowance.NONE)


# =============================================================================
# Stored data
# =============================================================================


class TierRates(BaseModel):
    """Hourly rates for the three overtime tiers."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    r133: float = Field(default=0, ge=0, description="Hourly rate at time and a third")
    r150: float = Field(default=0, ge=0, description="Hourly rate at time and a half")
    r200: float = Field(default=0, ge=0, description="Hourly rate at double time")

    @classmethod
    def zero(cls) -> "TierRates":
        """Rates used when no rank is selected."""
        return cls(r133=0, r150=0, r200=0)


class Entry(BaseModel):
    """One recorded duty: overtime hours and/or an allowance on a date.

    Accepts the legacy storage keys (hours133, hours150, hours200, paRate)
    as aliases.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: Optional[str] = Field(default=None, description="Assigned by the store on create")
    date: dt.date
    reason: str = ""
    hours_133: float = Field(default=0, alias="hours133")
    hours_150: float = Field(default=0, alias="hours150")
    hours_200: float = Field(default=0, alias="hours200")
    allowance: Allowance = Field(default=Allowance.NONE, alias="paRate")
    comments: str = ""

    @field_validator("hours_133", "hours_150", "hours_200", mode="before")
    @classmethod
    def _coerce_hours(cls, value: Any) -> float:
        return coerce_hours(value)

    @field_validator("allowance", mode="before")
    @classmethod
    def _coerce_allowance(cls, value: Any) -> Allowance:
        return coerce_allowance(value)

    @field_validator("reason", "comments", mode="before")
    @classmethod
    def _text_or_blank(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @property
    def total_hours(self) -> float:
        return self.hours_133 + self.hours_150 + self.hours_200

    @property
    def is_empty(self) -> bool:
        """True when the entry carries nothing worth saving."""
        has_hours = self.hours_133 > 0 or self.hours_150 > 0 or self.hours_200 > 0
        return (
            not has_hours
            and self.allowance is Allowance.NONE
            and not self.reason.strip()
            and not self.comments.strip()
        )

    def to_record(self) -> Dict[str, Any]:
        """Storage form: JSON-safe dict without the id."""
        return self.model_dump(mode="json", exclude={"id"})


class RateConfig(BaseModel):
    """The user's rank selection, rate snapshot and tax choice.

    `rates` is copied from the rate table when the rank or service band is
    chosen; editing the table later leaves a saved config untouched.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    rank: Optional[Rank] = None
    service: Optional[str] = None
    rates: TierRates = Field(default_factory=TierRates.zero)
    tax_rate: Optional[float] = Field(default=None, ge=0, le=100)

    @property
    def effective_tax_rate(self) -> float:
        return self.tax_rate if self.tax_rate is not None else DEFAULT_TAX_RATE

    @property
    def rank_configured(self) -> bool:
        return self.rank is not None


class PayPeriod(BaseModel):
    """A named pay period with inclusive start and end dates."""

    model_config = ConfigDict(frozen=True)

    label: str
    short: str
    start: dt.date
    end: dt.date

    def contains(self, day: dt.date) -> bool:
        return self.start <= day <= self.end


# =============================================================================
# Report views
# =============================================================================


class EntryValuation(BaseModel):
    """Pay computed for a single entry."""

    overtime_gross: float
    allowance_gross: float
    total_gross: float
    total_net: float
    hours: float


class YearTotals(BaseModel):
    """Fiscal-year rollup."""

    gross_overtime: float = 0
    gross_allowance: float = 0
    total_gross: float = 0
    total_net: float = 0
    total_hours: float = 0


class PeriodStats(BaseModel):
    """Gross/net for one pay period, allowances included."""

    label: str
    gross: float
    net: float


class PeriodWindow(BaseModel):
    """Previous, current and next pay period around a reference date."""

    previous: Optional[PeriodStats] = None
    current: Optional[PeriodStats] = None
    next: Optional[PeriodStats] = None


class EntryLine(BaseModel):
    """An entry paired with its valuation, for drill-down listings."""

    entry: Entry
    valuation: EntryValuation


class PeriodBreakdown(BaseModel):
    """Full detail for one pay period."""

    index: int
    label: str
    short: str
    start: dt.date
    end: dt.date
    hours_133: float = 0
    hours_150: float = 0
    hours_200: float = 0
    allowance_counts: Dict[str, int] = Field(default_factory=dict)
    overtime_gross: float = 0
    overtime_net: float = 0
    allowance_gross: float = 0
    allowance_net: float = 0
    total_gross: float = 0
    total_net: float = 0
    entries: List[EntryLine] = Field(default_factory=list)


class GraphPoint(BaseModel):
    """Overtime-only gross/net for one pay period."""

    label: str
    short: str
    gross_overtime: float
    net_overtime: float


class Dashboard(BaseModel):
    """Year totals plus the pay periods around today."""

    totals: YearTotals
    window: PeriodWindow
    rank_configured: bool
    tax_rate: float
