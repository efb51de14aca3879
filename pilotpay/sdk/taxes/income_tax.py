"""Federal and provincial income tax.

Marginal-bracket walk with non-refundable credits for the basic personal
amount and CPP/QPP + EI contributions. The federal contribution credit uses
its own configured rate while the BPA credit uses the lowest federal bracket
rate; provinces credit both at their lowest bracket rate.
"""

from typing import Dict, List

from .schemas import FederalRules, TaxBracket, TaxRules


def tax_from_brackets(taxable_income: float, brackets: List[TaxBracket]) -> float:
    """Calculate tax on income using progressive brackets (ascending order)."""
    tax = 0.0
    previous_ceiling = 0.0

    for bracket in brackets:
        ceiling = bracket.ceiling
        income_in_bracket = min(taxable_income, ceiling) - previous_ceiling
        if income_in_bracket > 0:
            tax += income_in_bracket * bracket.rate
            previous_ceiling = ceiling
        if taxable_income <= ceiling:
            break

    return max(0.0, tax)


def marginal_rate(amount: float, brackets: List[TaxBracket]) -> float:
    """Rate of the bracket that contains amount."""
    for bracket in brackets:
        if amount <= bracket.ceiling:
            return bracket.rate
    return brackets[-1].rate


def federal_basic_personal_amount(income: float, federal: FederalRules) -> float:
    """Federal BPA with the additional amount phased out linearly.

    Full additional amount at or below the start threshold, none at or above
    the end threshold.
    """
    additional = 0.0
    if income <= federal.bpa_additional_start:
        additional = federal.bpa_additional
    elif income < federal.bpa_additional_end:
        span = federal.bpa_additional_end - federal.bpa_additional_start
        fraction = (federal.bpa_additional_end - income) / span
        additional = federal.bpa_additional * max(0.0, min(1.0, fraction))
    return federal.bpa_base + additional


def federal_tax(taxable_income: float, contributions: float, rules: TaxRules) -> float:
    """Federal tax after BPA and contribution credits, floored at zero."""
    federal = rules.federal
    lowest = federal.brackets[0].rate
    credits = (
        lowest * federal_basic_personal_amount(taxable_income, federal)
        + federal.contribution_credit_rate * contributions
    )
    return max(0.0, tax_from_brackets(taxable_income, federal.brackets) - credits)


def provincial_tax(taxable_income: float, contributions: float, province: str, rules: TaxRules) -> float:
    """Provincial tax after BPA and contribution credits, floored at zero."""
    prov = rules.province(province)
    credits = prov.lowest_rate * prov.bpa + prov.lowest_rate * contributions
    return max(0.0, tax_from_brackets(taxable_income, prov.brackets) - credits)


def calculate_income_tax(
    taxable_income: float,
    contributions: float,
    province: str,
    rules: TaxRules,
) -> Dict[str, float]:
    """Combined income tax.

    Args:
        taxable_income: Annual taxable income
        contributions: CPP/QPP plus EI paid in the year (credited)
        province: Province code
        rules: Tax rules for the year

    Returns:
        Dict with federal, provincial and total tax
    """
    fed = federal_tax(taxable_income, contributions, rules)
    prov = provincial_tax(taxable_income, contributions, province, rules)
    return {
        "federal": fed,
        "provincial": prov,
        "total": fed + prov,
    }


def combined_marginal_rate(amount: float, province: str, rules: TaxRules) -> float:
    """Federal plus provincial marginal rate at an income level."""
    return (
        marginal_rate(amount, rules.federal.brackets)
        + marginal_rate(amount, rules.province(province).brackets)
    )
