"""Profile CLI commands for Pilot Pay.

Manages the pilot's calculation defaults (profile.yaml).
"""

from pathlib import Path

import click
import yaml
from pydantic import ValidationError

from pilotpay.sdk import (
    # Settings (for profile use command)
    get_config_dir,
    load_settings,
    set_setting,
    # Profile (user data)
    get_profile_path,
    load_profile,
    save_profile,
    get_profile_value,
    set_profile_value,
    # Profile validation
    PilotProfile,
    validate_profile,
)


def _parse_value(value: str):
    """Parse a CLI string into bool, int or float where it looks like one."""
    lowered = value.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        return value


def _validate_profile_file(path: Path) -> dict:
    """Load and validate a profile file.

    Raises:
        click.ClickException: If file is invalid YAML or fails schema validation
    """
    if not path.exists():
        raise click.ClickException(f"Profile file not found: {path}")

    if path.suffix not in (".yaml", ".yml"):
        raise click.ClickException(f"Profile must be a YAML file: {path}")

    try:
        with open(path, "r") as f:
            profile_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid YAML in {path}: {e}")

    if not isinstance(profile_data, dict):
        raise click.ClickException(f"Profile must be a YAML dictionary, got {type(profile_data).__name__}")

    try:
        validate_profile(profile=profile_data)
    except ValidationError as e:
        raise click.ClickException(f"Profile validation failed: {e}")

    return profile_data


# =============================================================================
# PROFILE commands - pilot defaults (profile.yaml)
# =============================================================================

@click.group()
def profile():
    """Manage your profile configuration (profile.yaml).

    The pilot section holds defaults for every calculation:
    seat, aircraft, step, tie_step_to_year, xlr, avg_monthly_hours,
    province and esop_pct.
    """
    pass


@profile.command("show")
def profile_show():
    """Show the active profile, its location and its defaults."""
    profile_path = get_profile_path(require_exists=False)

    settings = load_settings()
    if settings.get("profile"):
        location_label = "custom"
    elif profile_path.exists():
        location_label = "central (default)"
    else:
        location_label = "not created"

    click.echo(f"Profile: {profile_path}")
    click.echo(f"Location: {location_label}")

    if not profile_path.exists():
        click.echo()
        click.echo("Profile does not exist yet. Create with:")
        click.echo("  pilot-pay profile init --seat FO --aircraft 320")
        return

    profile_data = load_profile(require_exists=False)
    try:
        validate_profile(profile=profile_data)
    except ValidationError as e:
        click.echo()
        click.echo("Validation Errors (profile is invalid):")
        for error in e.errors():
            loc = ".".join(str(p) for p in error["loc"])
            click.echo(f"  ! pilot.{loc}: {error['msg']}")

    click.echo()
    click.echo("---")
    click.echo(yaml.dump(profile_data, default_flow_style=False, sort_keys=False))


@profile.command("get")
@click.argument("key")
def profile_get(key):
    """Get a profile value.

    KEY is a dot-notation path like 'pilot.step'
    """
    value = get_profile_value(key)
    if value is None:
        raise click.ClickException(f"Key '{key}' not found in profile")

    if isinstance(value, (dict, list)):
        raise click.ClickException(
            f"Key '{key}' is a complex value. Use 'pilot-pay profile show' to view."
        )

    click.echo(value)


@profile.command("set")
@click.argument("key")
@click.argument("value")
def profile_set(key, value):
    """Set a profile value.

    KEY is a dot-notation path like 'pilot.step'
    VALUE is the value to set

    Examples:
        pilot-pay profile set pilot.aircraft 787
        pilot-pay profile set pilot.province QC
        pilot-pay profile set pilot.tie_step_to_year true
    """
    section, _, field = key.partition(".")
    if section != "pilot" or field not in PilotProfile.model_fields:
        valid = ", ".join(f"pilot.{name}" for name in PilotProfile.model_fields)
        raise click.ClickException(f"Unknown profile key '{key}'. Valid keys: {valid}")

    parsed_value = value if field == "aircraft" else _parse_value(value)

    # Validate the resulting profile before writing
    candidate = load_profile(require_exists=False)
    pilot = dict(candidate.get("pilot") or {})
    pilot[field] = parsed_value
    try:
        PilotProfile.model_validate(pilot)
    except ValidationError as e:
        raise click.ClickException(f"Invalid value for {key}: {e.errors()[0]['msg']}")

    profile_file = set_profile_value(key, parsed_value)
    click.echo(f"Set {key} = {parsed_value}")
    click.echo(f"Saved to: {profile_file}")


@profile.command("init")
@click.option("--seat", type=click.Choice(["CA", "FO", "RP"], case_sensitive=False), required=True)
@click.option("--aircraft", required=True, help="Aircraft code (e.g. 777, 320)")
@click.option("--step", type=int, default=1, help="Step held on Jan 1")
@click.option("--province", default="ON", help="Province of residence")
@click.option("--hours", "avg_monthly_hours", type=float, default=75, help="Average monthly duty hours")
@click.option("--esop", "esop_pct", type=float, default=0, help="ESOP contribution, percent of gross")
@click.option("--force", is_flag=True, help="Overwrite an existing profile")
def profile_init(seat, aircraft, step, province, avg_monthly_hours, esop_pct, force):
    """Create a profile with the pilot's calculation defaults.

    Examples:
        pilot-pay profile init --seat FO --aircraft 320 --step 2
        pilot-pay profile init --seat CA --aircraft 777 --province QC --force
    """
    profile_path = get_profile_path(require_exists=False)
    if profile_path.exists() and not force:
        raise click.ClickException(
            f"Profile already exists: {profile_path}\n"
            f"Use --force to overwrite."
        )

    try:
        pilot = PilotProfile(
            seat=seat.upper(),
            aircraft=aircraft,
            step=step,
            province=province.upper(),
            avg_monthly_hours=avg_monthly_hours,
            esop_pct=esop_pct,
        )
    except ValidationError as e:
        raise click.ClickException(f"Invalid profile values: {e}")

    saved = save_profile({"pilot": pilot.model_dump(exclude_none=True)}, profile_path)
    click.echo(f"Created profile: {saved}")


@profile.command("use")
@click.argument("profile_path", type=click.Path(exists=True))
def profile_use(profile_path):
    """Set the active profile to an external file.

    PROFILE_PATH is the path to a profile.yaml file, typically in a
    config repo you manage separately.

    Examples:
        pilot-pay profile use ~/repos/my-config/pilot-pay/profile.yaml
    """
    path = Path(profile_path).expanduser().resolve()

    # Validate profile before switching (raises on errors)
    _validate_profile_file(path)

    settings_file = set_setting("profile", str(path))
    click.echo(f"Active profile set to: {path}")
    click.echo(f"Saved to: {settings_file}")
    click.echo(f"Config directory: {get_config_dir()}")
