"""Configuration management for OT Calc.

Two files live in the config directory:

1. settings.json - where things are on this machine
   - data_dir: where entry files are stored
   - profile: alternative location of profile.yaml

2. profile.yaml - how the user is paid
   - rank, service: selected rank and service band
   - rates: tier rate snapshot taken when rank/service were chosen
   - tax_rate: flat tax percentage (one of TAX_RATES)

Config directory: OT_CALC_CONFIG_PATH, else $XDG_CONFIG_HOME/ot-calc
(~/.config/ot-calc). Data directory: settings.json "data_dir", else
$XDG_DATA_HOME/ot-calc (~/.local/share/ot-calc).

Reading is forgiving: a missing, unparseable or wrongly shaped file reads
as empty, with a warning. Writing is strict: any OSError is raised as
SettingsSaveError.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional

import yaml
from pydantic import ValidationError

from .rate_config import repair, set_rank
from .rates import TAX_RATES, parse_rank
from .schemas import RateConfig, TierRates

logger = logging.getLogger(__name__)

APP_NAME = "ot-calc"
CONFIG_ENV_VAR = "OT_CALC_CONFIG_PATH"
SETTINGS_FILENAME = "settings.json"
PROFILE_FILENAME = "profile.yaml"


class SettingsSaveError(Exception):
    """Raised when settings.json or profile.yaml cannot be written."""
    pass


def _xdg_dir(env_var: str, fallback: Path) -> Path:
    return Path(os.environ.get(env_var) or fallback) / APP_NAME


def _read_mapping(path: Path, parse: Callable, errors: tuple) -> dict:
    """Parse a config file that should hold a mapping; anything else reads as {}."""
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            content = parse(f)
    except errors as e:
        logger.warning(f"{path}: cannot parse ({e}), using defaults")
        return {}
    if content is None:
        return {}
    if not isinstance(content, dict):
        logger.warning(f"{path}: expected a mapping, found {type(content).__name__}, using defaults")
        return {}
    return content


def _write_file(path: Path, dump: Callable, data: dict) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            dump(data, f)
    except OSError as e:
        raise SettingsSaveError(f"Cannot write {path}: {e}") from e
    return path


# =============================================================================
# settings.json
# =============================================================================

def get_config_dir() -> Path:
    """Directory holding settings.json and (by default) profile.yaml."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return _xdg_dir("XDG_CONFIG_HOME", Path.home() / ".config")


def get_settings_path() -> Path:
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Machine settings, or {} when settings.json is absent or unreadable."""
    return _read_mapping(get_settings_path(), json.load, (json.JSONDecodeError, OSError))


def save_settings(settings: dict) -> Path:
    """Replace settings.json.

    Raises:
        SettingsSaveError: If the file cannot be written
    """
    return _write_file(get_settings_path(), lambda d, f: json.dump(d, f, indent=2), settings)


def get_setting(key: str, default: Any = None) -> Any:
    return load_settings().get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Store one settings.json key, keeping the others."""
    return save_settings({**load_settings(), key: value})


def clear_setting(key: str) -> bool:
    """Remove one settings.json key.

    Returns:
        True if the key was present and removed
    """
    settings = load_settings()
    if key not in settings:
        return False
    del settings[key]
    save_settings(settings)
    return True


def get_data_path() -> Path:
    """Directory holding entry files, created on first use."""
    custom = get_setting("data_dir")
    if custom:
        data_path = Path(custom).expanduser()
    else:
        data_path = _xdg_dir("XDG_DATA_HOME", Path.home() / ".local" / "share")
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path


# =============================================================================
# profile.yaml
# =============================================================================

def get_profile_path() -> Path:
    """settings.json "profile" if set, else profile.yaml in the config dir."""
    custom = load_settings().get("profile")
    if custom:
        return Path(custom).expanduser()
    return get_config_dir() / PROFILE_FILENAME


def load_profile() -> dict:
    """Profile contents, or {} when missing, unparseable or not a mapping."""
    return _read_mapping(get_profile_path(), yaml.safe_load, (yaml.YAMLError, OSError))


def save_profile(profile: dict, path: Optional[Path] = None) -> Path:
    """Write profile.yaml, keys in insertion order.

    Raises:
        SettingsSaveError: If the file cannot be written
    """
    target = path if path is not None else get_profile_path()
    return _write_file(
        target,
        lambda d, f: yaml.dump(d, f, default_flow_style=False, sort_keys=False),
        profile,
    )


def _stored_tax_rate(value: Any) -> Optional[float]:
    """A stored tax rate if it is one of the offered choices, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if value in TAX_RATES else None


def load_rate_config() -> RateConfig:
    """Load the user's rank, rate snapshot and tax rate.

    Never raises. An unknown rank is dropped, a band that does not belong
    to the rank is repaired, a broken rate snapshot is re-read from the
    rate table, and a tax rate outside TAX_RATES falls back to the default.

    Returns:
        RateConfig
    """
    profile = load_profile()
    if not profile:
        return RateConfig()

    raw_rank = profile.get("rank")
    rank = parse_rank(raw_rank)
    if raw_rank and rank is None:
        logger.warning(f"{get_profile_path()}: unknown rank '{raw_rank}', ignoring")

    try:
        rates = TierRates.model_validate(profile.get("rates") or {})
    except ValidationError as e:
        logger.warning(f"{get_profile_path()}: invalid rates snapshot, re-deriving ({e.error_count()} error(s))")
        rates = None

    service = profile.get("service")
    if not isinstance(service, str) or not service:
        service = None

    raw_tax = profile.get("tax_rate")
    tax_rate = _stored_tax_rate(raw_tax)
    if raw_tax is not None and tax_rate is None:
        logger.warning(f"{get_profile_path()}: tax_rate {raw_tax!r} is not one of {TAX_RATES}, using default")

    config = RateConfig(
        rank=rank,
        service=service,
        rates=rates if rates is not None else TierRates.zero(),
        tax_rate=tax_rate,
    )
    if rank is not None and rates is None:
        return set_rank(config, rank, config.service)
    return repair(config)


def rate_config_to_profile(config: RateConfig) -> dict:
    """Serialize a RateConfig into profile.yaml keys."""
    return {
        "rank": config.rank.value if config.rank else None,
        "service": config.service,
        "rates": config.rates.model_dump(),
        "tax_rate": config.tax_rate,
    }


def save_rate_config(config: RateConfig) -> Path:
    """Persist a RateConfig to profile.yaml, keeping unrelated keys.

    Returns:
        Path to the saved profile file

    Raises:
        SettingsSaveError: If the profile cannot be written
    """
    profile = load_profile()
    profile.update(rate_config_to_profile(config))
    path = save_profile(profile)
    logger.debug(f"saved rate settings to {path}")
    return path
