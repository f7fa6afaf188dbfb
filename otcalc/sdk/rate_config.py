"""Rank / service band / tax selection.

Every transition returns a new RateConfig; the rates field is always a
fresh snapshot from the rate table for the resolved (rank, service) pair.
A service band that does not belong to the rank is never an error: the
rank's first band is used instead.
"""

import logging
from typing import Optional

from .rates import TAX_RATES, lookup_rates, parse_rank, service_bands
from .schemas import Rank, RateConfig, TierRates

logger = logging.getLogger(__name__)

__all__ = ["set_rank", "set_service_band", "set_tax_rate", "resolve_service", "repair"]


def resolve_service(rank: Rank, service: Optional[str]) -> str:
    """Return service if it is a band of rank, else the rank's first band."""
    bands = service_bands(rank)
    if service in bands:
        return service
    if service:
        logger.debug(f"service band '{service}' not valid for {rank.value}, using '{bands[0]}'")
    return bands[0]


def set_rank(config: RateConfig, rank, service: Optional[str] = None) -> RateConfig:
    """Select a rank (or clear it with None).

    Args:
        config: Current settings
        rank: Rank enum, rank display name, or None/"" to clear
        service: Preferred band; defaults to the currently selected one

    Returns:
        New RateConfig with service resolved and rates re-snapshotted
    """
    resolved_rank = parse_rank(rank)
    if resolved_rank is None:
        if rank:
            logger.warning(f"Unknown rank '{rank}', clearing rank selection")
        return config.model_copy(update={"rank": None, "service": None, "rates": TierRates.zero()})

    preferred = service if service is not None else config.service
    band = resolve_service(resolved_rank, preferred)
    return config.model_copy(update={
        "rank": resolved_rank,
        "service": band,
        "rates": lookup_rates(resolved_rank, band).model_copy(),
    })


def set_service_band(config: RateConfig, service: str) -> RateConfig:
    """Select a service band under the current rank.

    With no rank selected there is nothing to snapshot, so the config is
    returned unchanged.
    """
    if config.rank is None:
        logger.debug(f"ignoring service band '{service}': no rank selected")
        return config
    return set_rank(config, config.rank, service)


def set_tax_rate(config: RateConfig, tax_rate: float) -> RateConfig:
    """Store the flat tax percentage.

    Raises:
        ValueError: If tax_rate is not one of TAX_RATES
    """
    if tax_rate not in TAX_RATES:
        raise ValueError(f"tax rate must be one of {', '.join(str(t) for t in TAX_RATES)}, got {tax_rate}")
    return config.model_copy(update={"tax_rate": tax_rate})


def repair(config: RateConfig) -> RateConfig:
    """Fix a loaded config whose service band is invalid for its rank.

    A valid (rank, service) pair keeps its stored rate snapshot untouched.
    """
    if config.rank is None:
        if config.service is not None or config.rates != TierRates.zero():
            return config.model_copy(update={"service": None, "rates": TierRates.zero()})
        return config
    if config.service in service_bands(config.rank):
        return config
    logger.warning(f"Stored service band '{config.service}' is not valid for {config.rank.value}, repairing")
    return set_rank(config, config.rank, config.service)
