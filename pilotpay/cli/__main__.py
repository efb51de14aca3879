"""Pilot Pay CLI - Command-line interface for contract pay estimates."""

import json
import logging
from datetime import date

import click
from pydantic import BaseModel, ValidationError
from rich.console import Console

from pilotpay import __version__
from pilotpay.sdk import (
    AnnualInputs,
    OvertimeInputs,
    PayTableLookupError,
    compute_annual,
    compute_overtime,
    get_registry,
    get_setting,
    profile_defaults,
    step_on_jan1,
)

from .profile_commands import profile as profile_group
from .renderers.result_renderer import render_annual, render_ladders, render_overtime

logger = logging.getLogger(__name__)

SEAT_CHOICE = click.Choice(["CA", "FO", "RP"], case_sensitive=False)
FORMAT_OPTION = click.option(
    "--format", "output_format", type=click.Choice(["table", "json"]), default=None,
    help="Output format (default: settings.json output_format, else table)",
)


@click.group()
@click.version_option(version=__version__, prog_name="pilot-pay")
def cli():
    """Pilot Pay - Contract pay, deductions and VO estimates.

    Seat, aircraft, step and other defaults are read from the pilot
    section of your profile. Command-line options override them.

    Configuration is loaded from (in order):

    \b
    1. PILOT_PAY_CONFIG_PATH environment variable
    2. settings.json 'profile' key (if set via CLI)
    3. ~/.config/pilot-pay/profile.yaml (XDG default)

    Run 'pilot-pay profile show' to see the active defaults.
    """
    pass


cli.add_command(profile_group)


def _output_format(output_format):
    return output_format or get_setting("output_format", "table")


def _build_inputs(model: type[BaseModel], options: dict) -> BaseModel:
    """Merge profile defaults with explicit options and validate.

    Profile keys the model does not accept (e.g. ESOP % for a VO estimate)
    are ignored. Without --year, a step tied to the year picks the year
    that step falls in; otherwise the current year is used.
    """
    try:
        defaults = profile_defaults()
    except ValueError as e:
        raise click.ClickException(str(e))

    merged = {k: v for k, v in defaults.items() if k in model.model_fields}
    merged.update({k: v for k, v in options.items() if v is not None})
    if "seat" in merged:
        merged["seat"] = merged["seat"].upper()
    if "year" not in merged:
        if merged.get("tie_step_to_year") and "step" in merged:
            merged["year"] = get_registry().year_for_step(merged["step"])
        else:
            merged["year"] = date.today().year

    missing = [name for name in ("seat", "aircraft") if name not in merged]
    if missing:
        raise click.ClickException(
            f"Missing {', '.join('--' + m for m in missing)}. "
            f"Pass on the command line or set with: pilot-pay profile set pilot.{missing[0]} VALUE"
        )

    try:
        return model.model_validate(merged)
    except ValidationError as e:
        raise click.ClickException(f"Invalid inputs: {e}")


def _parse_credit(credit: str) -> tuple[float, float]:
    """Parse an H:MM (or plain hours) credit value."""
    hours, _, minutes = credit.partition(":")
    try:
        return float(hours or 0), float(minutes or 0)
    except ValueError:
        raise click.BadParameter(f"Invalid credit '{credit}'. Use H:MM, e.g. 2:30")


@cli.command("annual")
@click.option("--seat", type=SEAT_CHOICE, help="CA, FO or RP")
@click.option("--aircraft", help="Aircraft code (e.g. 777, 320)")
@click.option("--year", type=int, default=None, help="Pay year (default: the step's year with --tie-step, else current year)")
@click.option("--step", type=int, help="Step held on Jan 1 (1-12)")
@click.option("--tie-step/--no-tie-step", "tie_step_to_year", default=None,
              help="Derive the Jan 1 step from the year")
@click.option("--xlr/--no-xlr", default=None, help="Apply the XLR per-hour premium")
@click.option("--hours", "avg_monthly_hours", type=float, help="Average monthly duty hours")
@click.option("--province", help="Province of residence (e.g. ON, QC)")
@click.option("--esop", "esop_pct", type=float, help="ESOP contribution, percent of gross")
@FORMAT_OPTION
def annual(seat, aircraft, year, step, tie_step_to_year, xlr, avg_monthly_hours, province, esop_pct,
           output_format):
    """Estimate annual and monthly pay, taxes and deductions.

    Examples:
        pilot-pay annual --seat CA --aircraft 777 --year 2026 --step 3
        pilot-pay annual --seat FO --aircraft 320 --xlr --esop 10 --format json
    """
    inputs = _build_inputs(AnnualInputs, {
        "seat": seat,
        "aircraft": aircraft,
        "year": year,
        "step": step,
        "tie_step_to_year": tie_step_to_year,
        "xlr": xlr,
        "avg_monthly_hours": avg_monthly_hours,
        "province": province.upper() if province else None,
        "esop_pct": esop_pct,
    })

    try:
        result = compute_annual(inputs)
    except PayTableLookupError as e:
        logger.warning(f"annual calculation failed: {e}")
        raise click.ClickException(str(e))

    data = result.model_dump(mode="json")
    if _output_format(output_format) == "json":
        click.echo(json.dumps(data, indent=2))
        return

    render_annual(Console(width=120), data)


@cli.command("vo")
@click.argument("credit")
@click.option("--seat", type=SEAT_CHOICE, help="CA, FO or RP")
@click.option("--aircraft", help="Aircraft code (e.g. 777, 320)")
@click.option("--year", type=int, default=None, help="Pay year (default: the step's year with --tie-step, else current year)")
@click.option("--step", type=int, help="Step (1-12)")
@click.option("--tie-step/--no-tie-step", "tie_step_to_year", default=None,
              help="Derive the step from the year")
@click.option("--xlr/--no-xlr", default=None, help="Apply the XLR per-hour premium")
@click.option("--province", help="Province of residence (e.g. ON, QC)")
@FORMAT_OPTION
def vo(credit, seat, aircraft, year, step, tie_step_to_year, xlr, province, output_format):
    """Estimate gross and net pay for a VO credit.

    CREDIT is the credited time as H:MM. Duty hours are twice the credit.

    Examples:
        pilot-pay vo 2:30 --seat FO --aircraft 787
        pilot-pay vo 4 --year 2027 --format json
    """
    credit_hours, credit_minutes = _parse_credit(credit)
    inputs = _build_inputs(OvertimeInputs, {
        "seat": seat,
        "aircraft": aircraft,
        "year": year,
        "step": step,
        "tie_step_to_year": tie_step_to_year,
        "xlr": xlr,
        "province": province.upper() if province else None,
        "credit_hours": credit_hours,
        "credit_minutes": credit_minutes,
    })

    try:
        result = compute_overtime(inputs)
    except PayTableLookupError as e:
        logger.warning(f"VO calculation failed: {e}")
        raise click.ClickException(str(e))

    data = result.model_dump(mode="json")
    if _output_format(output_format) == "json":
        click.echo(json.dumps(data, indent=2))
        return

    render_overtime(Console(width=120), data)


@cli.command("rate")
@click.option("--seat", type=SEAT_CHOICE, help="CA, FO or RP")
@click.option("--aircraft", help="Aircraft code (e.g. 777, 320)")
@click.option("--year", type=int, default=None, help="Pay table year (default: the step's year with --tie-step, else current year)")
@click.option("--step", type=int, help="Step (1-12)")
@click.option("--tie-step/--no-tie-step", "tie_step_to_year", default=None,
              help="Derive the step from the year")
@click.option("--xlr/--no-xlr", default=None, help="Apply the XLR per-hour premium")
def rate(seat, aircraft, year, step, tie_step_to_year, xlr):
    """Print the hourly rate for a seat, aircraft, year and step."""
    inputs = _build_inputs(OvertimeInputs, {
        "seat": seat,
        "aircraft": aircraft,
        "year": year,
        "step": step,
        "tie_step_to_year": tie_step_to_year,
        "xlr": xlr,
    })

    registry = get_registry()
    resolved_step = step_on_jan1(inputs.step, inputs.tie_step_to_year, inputs.year, registry.rules.base_year)

    try:
        hourly = registry.rate_for(inputs.seat, inputs.aircraft, inputs.year, resolved_step, inputs.xlr)
    except PayTableLookupError as e:
        raise click.ClickException(str(e))

    click.echo(f"{hourly:.2f}")


# =============================================================================
# TABLES commands - pay table inspection
# =============================================================================

@cli.group("tables")
def tables_group():
    """Inspect contractual and forecast pay tables."""
    pass


@tables_group.command("show")
@click.argument("year", type=int)
@click.option("--seat", type=SEAT_CHOICE, default=None, help="Only show one seat")
@FORMAT_OPTION
def tables_show(year, seat, output_format):
    """Show every step ladder for YEAR.

    Years past the contract are forecast by projection and anchoring.
    """
    registry = get_registry()
    if year not in registry.years():
        years = registry.years()
        raise click.ClickException(f"No pay tables for {year}. Available: {years[0]}-{years[-1]}")

    seats = [seat.upper()] if seat else ["CA", "FO", "RP"]
    ladders = {}
    for s in seats:
        ladders[s] = {
            aircraft: list(registry.ladder(year, s, aircraft))
            for aircraft in registry.allowed_aircraft(s)
        }

    if _output_format(output_format) == "json":
        click.echo(json.dumps({"year": year, "tables": ladders}, indent=2))
        return

    console = Console(width=160)
    for s, by_aircraft in ladders.items():
        render_ladders(console, year, s, by_aircraft)


@tables_group.command("years")
def tables_years():
    """List years with pay tables (contractual and forecast)."""
    registry = get_registry()
    contract_years = set(registry.rules.pay_tables)
    for year in registry.years():
        kind = "contract" if year in contract_years else "forecast"
        click.echo(f"{year}  {kind}")


@tables_group.command("aircraft")
@click.option("--seat", type=SEAT_CHOICE, default="CA", help="Seat (RP is limited to long-haul fleets)")
def tables_aircraft(seat):
    """List aircraft a seat can be rated on."""
    for aircraft in get_registry().allowed_aircraft(seat.upper()):
        click.echo(aircraft)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
