"""Pilot Pay SDK - Core functionality for contract pay and deduction estimates."""

from .config import (
    # Config architecture
    get_config_dir,
    load_settings,
    get_setting,
    set_setting,
    get_profile_path,
    load_profile,
    save_profile,
    get_profile_value,
    set_profile_value,
    ProfileNotFoundError,
    # Profile validation
    PilotProfile,
    validate_profile,
    profile_defaults,
)

from .contract import load_contract_rules

from .pay_tables import (
    PayTableLookupError,
    PayTableRegistry,
    build_tables,
    clamp_step,
    get_registry,
    round_cents,
)

from .segments import step_on_jan1, year_segments

from .accrual import accrue_year, daily_gross, daily_hours

from .dues import union_dues_by_month

from .compensation import compute_annual, esop_contribution

from .overtime import compute_overtime, credit_to_hours

from .schemas import (
    SEAT_NAMES,
    AnnualInputs,
    AnnualResult,
    ContractRules,
    DateSegment,
    OvertimeInputs,
    OvertimeResult,
)

__all__ = [
    # Config architecture
    "get_config_dir",
    "load_settings",
    "get_setting",
    "set_setting",
    "get_profile_path",
    "load_profile",
    "save_profile",
    "get_profile_value",
    "set_profile_value",
    "ProfileNotFoundError",
    # Profile validation
    "PilotProfile",
    "validate_profile",
    "profile_defaults",
    # Contract and pay tables
    "load_contract_rules",
    "PayTableLookupError",
    "PayTableRegistry",
    "build_tables",
    "clamp_step",
    "get_registry",
    "round_cents",
    # Segmentation and accrual
    "step_on_jan1",
    "year_segments",
    "accrue_year",
    "daily_gross",
    "daily_hours",
    "union_dues_by_month",
    # Calculations
    "compute_annual",
    "esop_contribution",
    "compute_overtime",
    "credit_to_hours",
    # Schemas
    "SEAT_NAMES",
    "AnnualInputs",
    "AnnualResult",
    "ContractRules",
    "DateSegment",
    "OvertimeInputs",
    "OvertimeResult",
]
