"""taxes - Income tax and statutory contribution rules.

Scope:
- Federal and provincial bracket tables, BPA credits (2025 rules)
- CPP/QPP and EI parameters consumed by the daily accrual walk

Constraints:
- Pure calculation - no profile or contract access
- Year-specific rules loaded from data/tax_rules/{year}.yaml, falling back
  to the latest year on file

Usage:
    from pilotpay.sdk.taxes import load_tax_rules, calculate_income_tax

    rules = load_tax_rules(2027)
    tax = calculate_income_tax(taxable_income=180000, contributions=5500,
                               province="ON", rules=rules)
"""

from .schemas import (
    TaxBracket,
    FederalRules,
    ProvincialRules,
    PensionPlanRules,
    InsuranceRules,
    TaxRules,
)

from .rules import load_tax_rules, resolve_rules_year

from .income_tax import (
    tax_from_brackets,
    marginal_rate,
    combined_marginal_rate,
    federal_basic_personal_amount,
    federal_tax,
    provincial_tax,
    calculate_income_tax,
)

__all__ = [
    # Schemas
    "TaxBracket",
    "FederalRules",
    "ProvincialRules",
    "PensionPlanRules",
    "InsuranceRules",
    "TaxRules",
    # Loading
    "load_tax_rules",
    "resolve_rules_year",
    # Calculations
    "tax_from_brackets",
    "marginal_rate",
    "combined_marginal_rate",
    "federal_basic_personal_amount",
    "federal_tax",
    "provincial_tax",
    "calculate_income_tax",
]
