"""Pydantic schemas for pilot-pay data validation.

Contract rules are validated from the packaged contract.yaml. Request and
result models describe what the calculators accept and return.

All schemas use extra='forbid' to reject unknown fields, ensuring
typos in YAML or request payloads cause clear errors rather than silent ignoring.
"""

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


Seat = Literal["CA", "FO", "RP"]

Province = Literal[
    "AB", "BC", "MB", "NB", "NL", "NS", "NT", "NU", "ON", "PE", "QC", "SK", "YT",
]

SEAT_NAMES = {
    "CA": "Captain",
    "FO": "First Officer",
    "RP": "Relief Pilot",
}

STEPS_PER_LADDER = 12


def aircraft_code(v: Any) -> Any:
    """Accept unquoted YAML/JSON aircraft codes (320 -> "320")."""
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return v


# =============================================================================
# Contract rules (contract.yaml)
# =============================================================================


class MonthDay(BaseModel):
    """A calendar date that recurs every year (e.g. Sep 30)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    month: int = Field(..., ge=1, le=12)
    day: int = Field(..., ge=1, le=31)

    def in_year(self, year: int) -> date:
        return date(year, self.month, self.day)


class EsopRules(BaseModel):
    """Employee share purchase plan contribution limits."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    annual_cap: float = Field(..., ge=0, description="Maximum annual employee contribution")
    match_rate: float = Field(..., ge=0, le=1, description="Employer match as share of contribution")


class XlrPremium(BaseModel):
    """Per-hour premium for the long-range narrow-body variant."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    aircraft: str
    hourly: float = Field(..., ge=0)
    exempt_fo_steps: List[int] = Field(default_factory=list)


class PensionAccrualTier(BaseModel):
    """Employer pension accrual rate for a tenure band (None = open-ended)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    under_years: Optional[float] = Field(default=None, gt=0)
    rate: float = Field(..., ge=0, le=1)


class ProjectionRules(BaseModel):
    """Compounding raise schedule applied past the last contractual year."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    first_raise: float = Field(..., gt=0)
    annual_raise: float = Field(..., gt=0)
    through_year: int


class AnchorCurves(BaseModel):
    """Step percentages used to anchor projected FO/RP rates to CA step 12."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    fo_narrow_body: Dict[int, float]
    fo_wide_body: Dict[int, float]
    relief_pilot: Dict[int, float]
    relief_pilot_low_step_discounts: Dict[int, float]


class ContractRules(BaseModel):
    """Everything the calculators need from the collective agreement."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    base_year: int = Field(..., description="Year in which a tied step equals 1")
    hire_date: date = Field(..., description="Reference date for pension tenure")
    rate_switch: MonthDay = Field(..., description="Date the new year's pay table takes effect")
    step_progression: MonthDay = Field(..., description="Date the annual step increment applies")

    aircraft_order: List[str]
    narrow_body: List[str]
    wide_body: List[str]
    relief_pilot_aircraft: List[str]

    health_monthly: float = Field(..., ge=0)
    union_dues_rate: float = Field(..., ge=0, le=1)
    esop: EsopRules
    xlr_premium: XlrPremium
    pension_accrual: List[PensionAccrualTier] = Field(..., min_length=1)
    projection: ProjectionRules
    anchors: AnchorCurves

    pay_tables: Dict[int, Dict[Seat, Dict[str, List[float]]]]

    @model_validator(mode="after")
    def check_tables(self) -> "ContractRules":
        """Validate ladder lengths, RP fleet and transition-date order."""
        errors = []

        for year, seats in self.pay_tables.items():
            for seat, fleets in seats.items():
                for aircraft, ladder in fleets.items():
                    if len(ladder) != STEPS_PER_LADDER:
                        errors.append(
                            f"{year} {seat} {aircraft}: expected {STEPS_PER_LADDER} steps, got {len(ladder)}"
                        )
                    if aircraft not in self.aircraft_order:
                        errors.append(f"{year} {seat}: unknown aircraft '{aircraft}'")
                    if seat == "RP" and aircraft not in self.relief_pilot_aircraft:
                        errors.append(f"{year} RP: '{aircraft}' is not a relief pilot aircraft")

        switch = (self.rate_switch.month, self.rate_switch.day)
        progression = (self.step_progression.month, self.step_progression.day)
        if not (1, 1) < switch < progression:
            errors.append("rate_switch must fall after Jan 1 and before step_progression")

        if self.pension_accrual[-1].under_years is not None:
            errors.append("last pension_accrual tier must be open-ended (under_years: null)")

        if errors:
            raise ValueError("; ".join(errors))

        return self


# =============================================================================
# Calculation requests
# =============================================================================


class AnnualInputs(BaseModel):
    """Inputs for the annual compensation calculation."""

    model_config = ConfigDict(extra="forbid")

    seat: Seat
    aircraft: str
    year: int
    step: int = Field(default=1, description="Step held on Jan 1 (ignored when tied to year)")
    tie_step_to_year: bool = False
    xlr: bool = Field(default=False, description="Apply the XLR per-hour premium")
    avg_monthly_hours: float = Field(default=75, ge=0)
    province: Province = "ON"
    esop_pct: float = Field(default=0, ge=0, le=100)

    aircraft_as_string = field_validator("aircraft", mode="before")(aircraft_code)


class OvertimeInputs(BaseModel):
    """Inputs for a VO (overtime) estimate."""

    model_config = ConfigDict(extra="forbid")

    seat: Seat
    aircraft: str
    year: int
    step: int = 1
    tie_step_to_year: bool = False
    xlr: bool = False
    province: Province = "ON"
    credit_hours: float = 0
    credit_minutes: float = 0

    aircraft_as_string = field_validator("aircraft", mode="before")(aircraft_code)


# =============================================================================
# Calculation results
# =============================================================================


class DateSegment(BaseModel):
    """A date range over which one pay table and step apply (end inclusive)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    start: date
    end: date
    pay_table_year: int
    step: int = Field(..., ge=1, le=STEPS_PER_LADDER)

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


class AuditRow(BaseModel):
    """Per-segment audit line for the annual calculation."""

    model_config = ConfigDict(extra="forbid")

    start: date
    end: date
    pay_table_year: int
    step: int
    hourly: float
    days: int
    hours: float
    segment_gross: float


class ContributionTotals(BaseModel):
    """Annual totals produced by the daily accrual walk."""

    model_config = ConfigDict(extra="forbid")

    cpp: float = Field(..., ge=0, description="CPP/QPP tier-1 plus tier-2 contribution")
    ei: float = Field(..., ge=0, description="EI premium")
    pension_accrual: float = Field(..., ge=0, description="Employer pension accrual (unrounded)")


class UnionDues(BaseModel):
    """Union dues computed per calendar month."""

    model_config = ConfigDict(extra="forbid")

    dues_by_month: List[float] = Field(..., min_length=12, max_length=12)
    annual: float
    avg_monthly: float


class MonthlyBreakdown(BaseModel):
    """Annual figures spread evenly over twelve months."""

    model_config = ConfigDict(extra="forbid")

    gross: float
    net: float = Field(..., description="Take-home, excluding ESOP contribution and match")
    income_tax: float
    cpp: float
    ei: float
    health: float
    pension: float
    esop: float
    esop_match_after_tax: float
    union_dues: float


class AnnualResult(BaseModel):
    """Full annual compensation result with audit trail."""

    model_config = ConfigDict(extra="forbid")

    inputs: AnnualInputs
    step_jan1: int
    audit: List[AuditRow]
    gross: float
    taxable: float
    net: float
    tax: float
    federal_tax: float
    provincial_tax: float
    cpp: float
    ei: float
    health: float
    pension: float
    esop: float
    esop_match_after_tax: float
    union_dues: float
    union_dues_by_month: List[float]
    monthly: MonthlyBreakdown


class OvertimeResult(BaseModel):
    """VO estimate using marginal rates only."""

    model_config = ConfigDict(extra="forbid")

    inputs: OvertimeInputs
    rate: float
    hours: float
    gross: float
    net: float
    fed_marginal: float
    prov_marginal: float
    step_used: int
