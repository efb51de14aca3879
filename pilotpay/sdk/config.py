"""Configuration management for Pilot Pay Calc.

Configuration is split into two files:

1. settings.json - Machine-specific, ephemeral settings
   - profile: path to profile.yaml (optional, if not colocated)
   - output_format: default CLI output ("table" or "json")

2. profile.yaml - The pilot's own defaults for calculations
   - pilot: seat, aircraft, step, province, average monthly hours, ESOP %

Config directory resolution:
1. PILOT_PAY_CONFIG_PATH environment variable (if set)
2. ~/.config/pilot-pay/ (XDG_CONFIG_HOME fallback)

Profile resolution:
1. settings.json "profile" key (if set via CLI)
2. profile.yaml in same config directory
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .schemas import Province, Seat, aircraft_code


APP_NAME = "pilot-pay"
SETTINGS_FILENAME = "settings.json"
PROFILE_FILENAME = "profile.yaml"


class ProfileNotFoundError(Exception):
    """Raised when no profile is found."""
    pass


class PilotProfile(BaseModel):
    """Defaults applied to calculation requests. Every field is optional."""

    model_config = ConfigDict(extra="forbid")

    seat: Optional[Seat] = None
    aircraft: Optional[str] = None
    step: Optional[int] = Field(default=None, ge=1, le=12)
    tie_step_to_year: Optional[bool] = None
    xlr: Optional[bool] = None
    avg_monthly_hours: Optional[float] = Field(default=None, ge=0)
    province: Optional[Province] = None
    esop_pct: Optional[float] = Field(default=None, ge=0, le=100)

    aircraft_as_string = field_validator("aircraft", mode="before")(aircraft_code)


def get_config_dir() -> Path:
    """Config directory: PILOT_PAY_CONFIG_PATH, else $XDG_CONFIG_HOME/pilot-pay."""
    override = os.environ.get("PILOT_PAY_CONFIG_PATH")
    if override:
        return Path(override)
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / APP_NAME


def load_settings() -> dict:
    """Machine settings from settings.json (empty when the file is absent)."""
    path = get_config_dir() / SETTINGS_FILENAME
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return json.load(f)


def get_setting(key: str, default: Any = None) -> Any:
    return load_settings().get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Store one key in settings.json and return the file path."""
    settings = load_settings()
    settings[key] = value

    path = get_config_dir() / SETTINGS_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(settings, f, indent=2)
    return path


def get_profile_path(require_exists: bool = False) -> Path:
    """Active profile.yaml: the settings.json "profile" override, else the config dir.

    Raises:
        ProfileNotFoundError: If require_exists is set and the file is missing
    """
    custom = load_settings().get("profile")
    path = Path(custom) if custom else get_config_dir() / PROFILE_FILENAME

    if require_exists and not path.exists():
        if custom:
            hint = f"Profile not found at configured path: {path}\n\nUpdate with: pilot-pay profile use /path/to/profile.yaml"
        else:
            hint = f"No profile found at {path}\n\nCreate one with: pilot-pay profile init"
        raise ProfileNotFoundError(hint)

    return path


def load_profile(require_exists: bool = True) -> dict:
    """Parsed profile.yaml ({} when optional and missing).

    Raises:
        ProfileNotFoundError: If require_exists is set and the file is missing
    """
    path = get_profile_path(require_exists=require_exists)
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def save_profile(profile: dict, path: Optional[Path] = None) -> Path:
    path = path or get_profile_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(profile, f, default_flow_style=False, sort_keys=False)
    return path


def get_profile_value(key: str, default: Any = None) -> Any:
    """Look up a dotted key such as "pilot.seat"."""
    node: Any = load_profile(require_exists=False)
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def set_profile_value(key: str, value: Any) -> Path:
    """Write a dotted key such as "pilot.step", creating sections as needed."""
    profile = load_profile(require_exists=False)
    *sections, leaf = key.split(".")

    node = profile
    for part in sections:
        node = node.setdefault(part, {})
    node[leaf] = value

    return save_profile(profile)


def validate_profile(profile: Optional[dict] = None) -> PilotProfile:
    """Validate the pilot section of a profile.

    Args:
        profile: Profile dict (loads the active profile if not provided)

    Raises:
        ValidationError: If the pilot section has unknown keys or bad values
    """
    if profile is None:
        profile = load_profile(require_exists=False)
    return PilotProfile.model_validate(profile.get("pilot") or {})


def profile_defaults() -> Dict[str, Any]:
    """Calculation defaults from the active profile (only fields that are set)."""
    try:
        pilot = validate_profile()
    except ValidationError as e:
        raise ValueError(f"Invalid pilot profile at {get_profile_path()}: {e}") from e
    return pilot.model_dump(exclude_none=True)
