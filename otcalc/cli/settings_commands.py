"""Settings CLI commands for OT Calc.

Manages profile.yaml (rank, service band, rate snapshot, tax rate) and
settings.json (data directory).
"""

from pathlib import Path

import click

from otcalc.sdk import (
    RATE_TABLE,
    TAX_RATES,
    Rank,
    SettingsSaveError,
    clear_setting,
    get_data_path,
    get_profile_path,
    get_setting,
    get_settings_path,
    load_rate_config,
    load_settings,
    save_rate_config,
    service_bands,
    set_rank,
    set_service_band,
    set_setting,
    set_tax_rate,
)


def _save(config):
    try:
        save_rate_config(config)
    except SettingsSaveError as e:
        raise click.ClickException(str(e))


def _show_rates(config):
    click.echo(f"  1.33x: £{config.rates.r133:.3f}")
    click.echo(f"  1.5x:  £{config.rates.r150:.3f}")
    click.echo(f"  2.0x:  £{config.rates.r200:.3f}")


def _resolve_choice(value: str, options: list, kind: str) -> str:
    """Match value against options by 1-based number or case-insensitive name."""
    if value.isdigit():
        index = int(value) - 1
        if 0 <= index < len(options):
            return options[index]
    for option in options:
        if option.lower() == value.strip().lower():
            return option
    listed = "\n".join(f"  {i}. {o}" for i, o in enumerate(options, start=1))
    raise click.BadParameter(f"Unknown {kind} '{value}'. Choose one of:\n{listed}")


@click.group()
def settings():
    """Manage settings (profile.yaml and settings.json).

    \b
    Pay settings (profile.yaml):
    - rank / service: selects the overtime rate snapshot
    - tax: flat tax percentage for net estimates
    Machine settings (settings.json):
    - data_dir: custom data directory path
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their values."""
    config = load_rate_config()

    click.echo(f"Profile file: {get_profile_path()}")
    click.echo(f"Settings file: {get_settings_path()}")
    click.echo()

    if config.rank is None:
        click.echo("Rank: (not set) - overtime pay will show as £0.00")
    else:
        click.echo(f"Rank: {config.rank.value}")
        click.echo(f"Service: {config.service}")
    click.echo("Rates:")
    _show_rates(config)
    suffix = "" if config.tax_rate is not None else " (default)"
    click.echo(f"Tax rate: {config.effective_tax_rate:g}%{suffix}")

    click.echo()
    current = load_settings()
    click.echo("Effective paths:")
    if current.get("data_dir"):
        click.echo(f"  data_dir: {get_data_path()}")
    else:
        click.echo(f"  data_dir: {get_data_path()} (default)")


@settings.command("rank")
@click.argument("rank", required=False)
@click.option("--clear", is_flag=True, help="Clear the rank selection (overtime rates become zero).")
def settings_rank(rank, clear):
    """Select your rank, by name or number.

    Keeps the current service band if it exists for the new rank,
    otherwise picks the rank's first band. Rates are re-read from the
    rate table.

    \b
    Examples:
        ot-calc settings rank Sergeant
        ot-calc settings rank 2
        ot-calc settings rank --clear
    """
    config = load_rate_config()
    ranks = [r.value for r in RATE_TABLE]

    if clear:
        _save(set_rank(config, None))
        click.echo("Cleared rank. Overtime rates are now zero.")
        return

    if not rank:
        for i, name in enumerate(ranks, start=1):
            marker = "*" if config.rank and config.rank.value == name else " "
            click.echo(f"{marker} {i}. {name}")
        return

    chosen = _resolve_choice(rank, ranks, "rank")
    updated = set_rank(config, Rank(chosen))
    _save(updated)

    click.echo(f"Rank: {updated.rank.value}")
    click.echo(f"Service: {updated.service}")
    _show_rates(updated)


@settings.command("service")
@click.argument("service", required=False)
def settings_service(service):
    """Select your service band (pay point) within the current rank."""
    config = load_rate_config()
    if config.rank is None:
        raise click.ClickException("No rank selected. Set one first: ot-calc settings rank")

    bands = service_bands(config.rank)
    if not service:
        for i, band in enumerate(bands, start=1):
            marker = "*" if band == config.service else " "
            click.echo(f"{marker} {i}. {band}")
        return

    chosen = _resolve_choice(service, bands, "service band")
    updated = set_service_band(config, chosen)
    _save(updated)

    click.echo(f"Service: {updated.service}")
    _show_rates(updated)


@settings.command("tax")
@click.argument("rate", type=click.Choice([str(t) for t in TAX_RATES]))
def settings_tax(rate):
    """Set the flat tax percentage used for net figures."""
    config = load_rate_config()
    _save(set_tax_rate(config, int(rate)))
    click.echo(f"Tax rate: {rate}%")


def _prepare_data_dir(path: str) -> Path:
    """Resolve PATH, create it if needed and confirm entries can be written there."""
    target = Path(path).expanduser().resolve()
    if target.exists() and not target.is_dir():
        raise click.ClickException(f"{target} is a file, not a directory")

    created = not target.exists()
    check_file = target / ".ot-calc-write-check"
    try:
        target.mkdir(parents=True, exist_ok=True)
        check_file.write_text("")
        check_file.unlink()
    except OSError as e:
        raise click.ClickException(f"Cannot store entries in {target}: {e}")

    if created:
        click.echo(f"Created {target}")
    return target


@settings.command("data-dir")
@click.argument("path", required=False, type=click.Path())
@click.option("--clear", is_flag=True, help="Forget the custom directory and use the default.")
def settings_data_dir(path, clear):
    """Show, set or clear where entry files are kept.

    \b
    Examples:
        ot-calc settings data-dir
        ot-calc settings data-dir ~/Documents/overtime
        ot-calc settings data-dir --clear
    """
    try:
        if clear:
            if clear_setting("data_dir"):
                click.echo(f"Entries now go to the default directory: {get_data_path()}")
            else:
                click.echo("No custom data directory was set.")
            return

        if not path:
            custom = get_setting("data_dir")
            label = "custom" if custom else "default"
            click.echo(f"Entries directory ({label}): {custom or get_data_path()}")
            return

        target = _prepare_data_dir(path)
        set_setting("data_dir", str(target))
        click.echo(f"Entries directory: {target} (recorded in {get_settings_path()})")
    except SettingsSaveError as e:
        raise click.ClickException(str(e))
