"""Tax rules loading from data/tax_rules/YYYY.yaml."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List

import yaml

from .schemas import TaxRules

logger = logging.getLogger(__name__)


def _get_tax_rules_dir() -> Path:
    """Get the tax_rules data directory path."""
    return Path(__file__).parent.parent.parent / "data" / "tax_rules"  # taxes -> sdk -> pilotpay


def _get_available_years() -> List[int]:
    """Get sorted list of available tax rule years (descending)."""
    rules_dir = _get_tax_rules_dir()
    years = [int(p.stem) for p in rules_dir.glob("*.yaml") if p.stem.isdigit()]
    return sorted(years, reverse=True)


def resolve_rules_year(year: int) -> int:
    """Pick the rules year to use for a calculation year.

    Uses the latest available year at or before the requested one. Years
    before the earliest file use the earliest file.
    """
    available = _get_available_years()
    if not available:
        raise FileNotFoundError(f"No tax rules files in {_get_tax_rules_dir()}")

    candidates = [y for y in available if y <= int(year)]
    return candidates[0] if candidates else available[-1]


@lru_cache(maxsize=None)
def load_tax_rules(year: int) -> TaxRules:
    """Load and validate tax rules applicable to a year."""
    rules_year = resolve_rules_year(year)
    if rules_year != int(year):
        logger.debug(f"tax rules for {year} fall back to {rules_year}")

    config_file = _get_tax_rules_dir() / f"{rules_year}.yaml"
    with open(config_file, "r") as f:
        return TaxRules.model_validate(yaml.safe_load(f))
