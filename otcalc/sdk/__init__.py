"""OT Calc SDK - pay tables, period calendar, aggregation and storage."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    clear_setting,
    get_profile_path,
    load_profile,
    save_profile,
    get_data_path,
    load_rate_config,
    save_rate_config,
    SettingsSaveError,
)

from .schemas import (
    Allowance,
    Dashboard,
    Entry,
    EntryLine,
    EntryValuation,
    GraphPoint,
    PayPeriod,
    PeriodBreakdown,
    PeriodStats,
    PeriodWindow,
    Rank,
    RateConfig,
    TierRates,
    YearTotals,
)

from .rates import (
    RATE_TABLE,
    ALLOWANCE_RATES,
    TAX_RATES,
    DEFAULT_TAX_RATE,
    service_bands,
    lookup_rates,
    allowance_amount,
    parse_rank,
)

from .periods import (
    FY_START,
    FY_END,
    PAY_PERIODS,
    find_period_index,
    get_period,
    in_fiscal_year,
    default_entry_date,
    validate_calendar,
)

from .valuation import valuate, apply_tax, coerce_hours

from .aggregator import (
    fiscal_year_entries,
    year_totals,
    period_stats,
    current_period_window,
    monthly_breakdown,
    graph_series,
    dashboard,
)

from .rate_config import set_rank, set_service_band, set_tax_rate

from .entries import (
    EntryStore,
    FileEntryStore,
    MemoryEntryStore,
    EntryChange,
    EntryStoreError,
    EntryNotFoundError,
    default_store,
    save_entry,
)

from .live import LiveReport

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "clear_setting",
    "get_profile_path",
    "load_profile",
    "save_profile",
    "get_data_path",
    "load_rate_config",
    "save_rate_config",
    "SettingsSaveError",
    # Schemas
    "Allowance",
    "Dashboard",
    "Entry",
    "EntryLine",
    "EntryValuation",
    "GraphPoint",
    "PayPeriod",
    "PeriodBreakdown",
    "PeriodStats",
    "PeriodWindow",
    "Rank",
    "RateConfig",
    "TierRates",
    "YearTotals",
    # Rate table
    "RATE_TABLE",
    "ALLOWANCE_RATES",
    "TAX_RATES",
    "DEFAULT_TAX_RATE",
    "service_bands",
    "lookup_rates",
    "allowance_amount",
    "parse_rank",
    # Calendar
    "FY_START",
    "FY_END",
    "PAY_PERIODS",
    "find_period_index",
    "get_period",
    "in_fiscal_year",
    "default_entry_date",
    "validate_calendar",
    # Valuation
    "valuate",
    "apply_tax",
    "coerce_hours",
    # Aggregation
    "fiscal_year_entries",
    "year_totals",
    "period_stats",
    "current_period_window",
    "monthly_breakdown",
    "graph_series",
    "dashboard",
    # Rank/service selection
    "set_rank",
    "set_service_band",
    "set_tax_rate",
    # Storage
    "EntryStore",
    "FileEntryStore",
    "MemoryEntryStore",
    "EntryChange",
    "EntryStoreError",
    "EntryNotFoundError",
    "default_store",
    "save_entry",
    "LiveReport",
]
