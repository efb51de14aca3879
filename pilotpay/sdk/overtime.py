"""VO (overtime) valuation.

A quick estimate for extra duty credit: one hourly rate from the year's own
table, duty hours at twice the credit, and net pay from the federal and
provincial marginal rates at the gross amount (no bracket walk, no credits).
"""

from typing import Optional

from .pay_tables import PayTableRegistry, clamp_step, get_registry
from .schemas import OvertimeInputs, OvertimeResult
from .segments import step_on_jan1
from .taxes import TaxRules, load_tax_rules, marginal_rate

CREDIT_TO_DUTY_MULTIPLIER = 2


def credit_to_hours(credit_hours: float, credit_minutes: float) -> float:
    """Convert an H:MM credit to duty hours. Minutes clamp to 0-59."""
    minutes = max(0.0, min(59.0, float(credit_minutes)))
    credits = max(0.0, float(credit_hours) + minutes / 60)
    return credits * CREDIT_TO_DUTY_MULTIPLIER


def compute_overtime(
    inputs: OvertimeInputs,
    registry: Optional[PayTableRegistry] = None,
    tax_rules: Optional[TaxRules] = None,
) -> OvertimeResult:
    """Estimate gross and net for a VO credit.

    Raises:
        PayTableLookupError: If the year's table or the seat/aircraft is missing
    """
    registry = registry or get_registry()
    tax_rules = tax_rules or load_tax_rules(inputs.year)

    if inputs.tie_step_to_year:
        step = step_on_jan1(inputs.step, True, inputs.year, registry.rules.base_year)
    else:
        step = clamp_step(inputs.step)

    rate = registry.rate_for(inputs.seat, inputs.aircraft, inputs.year, step, inputs.xlr)
    hours = credit_to_hours(inputs.credit_hours, inputs.credit_minutes)
    gross = hours * rate

    fed_m = marginal_rate(gross, tax_rules.federal.brackets)
    prov_m = marginal_rate(gross, tax_rules.province(inputs.province).brackets)
    net = gross * (1 - (fed_m + prov_m))

    return OvertimeResult(
        inputs=inputs,
        rate=rate,
        hours=hours,
        gross=gross,
        net=net,
        fed_marginal=fed_m,
        prov_marginal=prov_m,
        step_used=step,
    )
