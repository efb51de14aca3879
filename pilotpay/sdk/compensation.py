"""Annual compensation calculation.

Composes segmentation, rate resolution, the daily accrual walk, union dues
and income tax into one AnnualResult with a per-segment audit trail.

Net pay:
    gross - income tax - CPP/QPP - EI - health - union dues + ESOP match (after tax)

The monthly view divides annual figures by 12; monthly take-home excludes the
ESOP contribution and its match.
"""

import logging
import os
from typing import Optional

from .accrual import accrue_year, daily_hours
from .dues import union_dues_by_month
from .pay_tables import PayTableRegistry, get_registry, round_cents
from .schemas import AnnualInputs, AnnualResult, AuditRow, MonthlyBreakdown
from .segments import step_on_jan1, year_segments
from .taxes import TaxRules, calculate_income_tax, combined_marginal_rate, load_tax_rules

# Configure logging based on LOG_LEVEL environment variable
_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger(__name__)


def esop_contribution(gross: float, esop_pct: float, annual_cap: float) -> float:
    """Employee ESOP contribution: percentage of gross, capped."""
    return min((esop_pct / 100) * gross, annual_cap)


def compute_annual(
    inputs: AnnualInputs,
    registry: Optional[PayTableRegistry] = None,
    tax_rules: Optional[TaxRules] = None,
) -> AnnualResult:
    """Compute annual and monthly compensation for a pilot.

    Args:
        inputs: Validated calculation inputs
        registry: Pay tables (process-wide registry by default)
        tax_rules: Tax rules (rules applicable to inputs.year by default)

    Returns:
        AnnualResult

    Raises:
        PayTableLookupError: If any segment needs a missing table, or RP is
            requested on an aircraft without RP rates
    """
    registry = registry or get_registry()
    tax_rules = tax_rules or load_tax_rules(inputs.year)
    contract = registry.rules

    year = inputs.year
    step_jan1 = step_on_jan1(inputs.step, inputs.tie_step_to_year, year, contract.base_year)
    segments = year_segments(year, step_jan1, contract)
    hours_per_day = daily_hours(inputs.avg_monthly_hours)

    # Audit trail and gross by segment
    audit = []
    gross = 0.0
    for segment in segments:
        hourly = registry.rate_for(inputs.seat, inputs.aircraft, segment.pay_table_year, segment.step, inputs.xlr)
        hours = hours_per_day * segment.days
        segment_gross = hours * hourly
        gross += segment_gross
        audit.append(AuditRow(
            start=segment.start,
            end=segment.end,
            pay_table_year=segment.pay_table_year,
            step=segment.step,
            hourly=hourly,
            days=segment.days,
            hours=hours,
            segment_gross=segment_gross,
        ))

    contributions = accrue_year(
        year, inputs.seat, inputs.aircraft, step_jan1, inputs.xlr,
        inputs.avg_monthly_hours, inputs.province,
        registry=registry, tax_rules=tax_rules, contract=contract,
    )
    pension = contributions.pension_accrual
    cpp = contributions.cpp
    ei = contributions.ei

    taxable = max(0.0, gross - pension)
    tax = calculate_income_tax(taxable, cpp + ei, inputs.province, tax_rules)
    income_tax = tax["total"]

    esop = esop_contribution(gross, inputs.esop_pct, contract.esop.annual_cap)
    top_rate = combined_marginal_rate(taxable, inputs.province, tax_rules)
    esop_match_net = round_cents(contract.esop.match_rate * esop * (1 - top_rate))

    union = union_dues_by_month(
        year, inputs.seat, inputs.aircraft, step_jan1, inputs.xlr,
        inputs.avg_monthly_hours, registry=registry,
    )

    annual_health = contract.health_monthly * 12
    net = gross - income_tax - cpp - ei - annual_health - union.annual + esop_match_net

    logger.debug(
        f"annual {inputs.seat}/{inputs.aircraft} {year} step {step_jan1}: "
        f"gross={gross:.2f} taxable={taxable:.2f} tax={income_tax:.2f} net={net:.2f}"
    )

    monthly = MonthlyBreakdown(
        gross=round_cents(gross / 12),
        net=round_cents((net - esop - esop_match_net) / 12),
        income_tax=round_cents(income_tax / 12),
        cpp=round_cents(cpp / 12),
        ei=round_cents(ei / 12),
        health=round_cents(annual_health / 12),
        pension=round_cents(pension / 12),
        esop=round_cents(esop / 12),
        esop_match_after_tax=round_cents(esop_match_net / 12),
        union_dues=round_cents(union.annual / 12),
    )

    return AnnualResult(
        inputs=inputs,
        step_jan1=step_jan1,
        audit=audit,
        gross=round_cents(gross),
        taxable=round_cents(taxable),
        net=round_cents(net),
        tax=round_cents(income_tax),
        federal_tax=round_cents(tax["federal"]),
        provincial_tax=round_cents(tax["provincial"]),
        cpp=round_cents(cpp),
        ei=round_cents(ei),
        health=round_cents(annual_health),
        pension=round_cents(pension),
        esop=round_cents(esop),
        esop_match_after_tax=esop_match_net,
        union_dues=union.annual,
        union_dues_by_month=union.dues_by_month,
        monthly=monthly,
    )
