"""Day-by-day accrual of gross pay, CPP/QPP, EI and pension.

Contributions depend on where in the year an annual ceiling is crossed, and
the hourly rate itself changes mid-year, so they are accrued on a daily
cumulative basis rather than from a lump annual gross. Each day only the
newly eligible slice of cumulative gross is charged.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterator, Optional, Tuple

from .pay_tables import PayTableRegistry, get_registry, round_cents
from .schemas import ContractRules, ContributionTotals
from .segments import iter_year_days, segment_for_day, year_segments
from .taxes import TaxRules, load_tax_rules

AVG_GREGORIAN_YEAR_DAYS = 365.2425


@dataclass
class AccrualState:
    """Running totals for one year's walk. Owned by a single calculation."""

    cum_gross: float = 0.0
    cum_ei_base: float = 0.0
    cum_tier1_base: float = 0.0
    cum_tier2_base: float = 0.0
    cpp: float = 0.0
    ei: float = 0.0
    pension: float = 0.0


def daily_hours(avg_monthly_hours: float) -> float:
    """Constant duty hours per calendar day."""
    return avg_monthly_hours * 12 / AVG_GREGORIAN_YEAR_DAYS


def tenure_years(day: date, hire_date: date) -> float:
    return (day - hire_date).days / AVG_GREGORIAN_YEAR_DAYS


def pension_rate_on(day: date, rules: ContractRules) -> float:
    """Employer pension accrual rate for tenure on a given date."""
    years = tenure_years(day, rules.hire_date)
    for tier in rules.pension_accrual:
        if tier.under_years is None or years < tier.under_years:
            return tier.rate
    return rules.pension_accrual[-1].rate


def daily_gross(
    year: int,
    seat: str,
    aircraft: str,
    step_jan1: int,
    xlr: bool,
    avg_monthly_hours: float,
    registry: Optional[PayTableRegistry] = None,
) -> Iterator[Tuple[date, float]]:
    """Yield (day, gross) for every day of the year.

    Raises:
        PayTableLookupError: If a segment's table or seat/aircraft is missing
    """
    registry = registry or get_registry()
    segments = year_segments(year, step_jan1, registry.rules)
    hours = daily_hours(avg_monthly_hours)

    for day in iter_year_days(year):
        segment = segment_for_day(segments, day)
        rate = registry.rate_for(seat, aircraft, segment.pay_table_year, segment.step, xlr)
        yield day, hours * rate


def accrue_day(state: AccrualState, gross: float, province: str, tax_rules: TaxRules) -> None:
    """Add one day's gross and charge contributions on the new eligible slice."""
    state.cum_gross += gross

    # EI: insurable up to MIE, premium capped
    ei_rate, ei_max = tax_rules.employment_insurance.for_province(province)
    ei_eligible = min(state.cum_gross, tax_rules.employment_insurance.mie)
    add_ei = max(0.0, ei_eligible - state.cum_ei_base)
    state.ei += add_ei * ei_rate
    state.cum_ei_base += add_ei
    if state.ei > ei_max:
        state.ei = ei_max

    plan = tax_rules.pension_plan(province)

    # Tier 1: YBE..YMPE
    tier1_eligible = max(0.0, min(state.cum_gross, plan.ympe) - plan.ybe)
    add_tier1 = max(0.0, tier1_eligible - state.cum_tier1_base)
    state.cpp += add_tier1 * plan.base_rate
    state.cum_tier1_base += add_tier1

    # Tier 2: YMPE..YAMPE
    tier2_eligible = max(0.0, min(state.cum_gross, plan.yampe) - plan.ympe)
    add_tier2 = max(0.0, tier2_eligible - state.cum_tier2_base)
    state.cpp += add_tier2 * plan.tier2_rate
    state.cum_tier2_base += add_tier2


def accrue_year(
    year: int,
    seat: str,
    aircraft: str,
    step_jan1: int,
    xlr: bool,
    avg_monthly_hours: float,
    province: str,
    registry: Optional[PayTableRegistry] = None,
    tax_rules: Optional[TaxRules] = None,
    contract: Optional[ContractRules] = None,
) -> ContributionTotals:
    """Walk the year and total CPP/QPP, EI and pension accrual.

    Returns:
        ContributionTotals with CPP/QPP and EI rounded to cents and the
        pension accrual unrounded
    """
    registry = registry or get_registry()
    tax_rules = tax_rules or load_tax_rules(year)
    contract = contract or registry.rules

    state = AccrualState()
    for day, gross in daily_gross(year, seat, aircraft, step_jan1, xlr, avg_monthly_hours, registry):
        accrue_day(state, gross, province, tax_rules)
        state.pension += gross * pension_rate_on(day, contract)

    return ContributionTotals(
        cpp=round_cents(state.cpp),
        ei=round_cents(state.ei),
        pension_accrual=state.pension,
    )
