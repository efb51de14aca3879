"""Contract rules loading.

The collective agreement (pay tables, transition dates, payroll constants)
ships as data/contract.yaml and is validated into a ContractRules model once
per process.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml

from .schemas import ContractRules


def get_data_dir() -> Path:
    """Get the packaged data directory path."""
    return Path(__file__).parent.parent / "data"  # sdk -> pilotpay -> data


def load_contract_file(path: Path) -> ContractRules:
    """Load and validate a contract YAML file."""
    if not path.exists():
        raise FileNotFoundError(f"Contract rules file not found: {path}")

    with open(path, "r") as f:
        return ContractRules.model_validate(yaml.safe_load(f))


@lru_cache(maxsize=None)
def load_contract_rules(path: Optional[Path] = None) -> ContractRules:
    """Load contract rules, defaulting to the packaged contract.yaml.

    Results are cached: rules are immutable configuration, read once.
    """
    return load_contract_file(path or get_data_dir() / "contract.yaml")
