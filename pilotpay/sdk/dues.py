"""Union dues, computed per calendar month from the daily gross walk."""

from typing import Optional

from .accrual import daily_gross
from .pay_tables import PayTableRegistry, get_registry, round_cents
from .schemas import UnionDues


def union_dues_by_month(
    year: int,
    seat: str,
    aircraft: str,
    step_jan1: int,
    xlr: bool,
    avg_monthly_hours: float,
    registry: Optional[PayTableRegistry] = None,
    dues_rate: Optional[float] = None,
) -> UnionDues:
    """Bucket gross by month and apply the dues rate to each month.

    Each month's dues are rounded to cents; the annual figure is the sum of
    the rounded months.
    """
    registry = registry or get_registry()
    if dues_rate is None:
        dues_rate = registry.rules.union_dues_rate

    months_gross = [0.0] * 12
    for day, gross in daily_gross(year, seat, aircraft, step_jan1, xlr, avg_monthly_hours, registry):
        months_gross[day.month - 1] += gross

    dues_by_month = [round_cents(gross * dues_rate) for gross in months_gross]
    annual = round_cents(sum(dues_by_month))

    return UnionDues(
        dues_by_month=dues_by_month,
        annual=annual,
        avg_monthly=round_cents(annual / 12),
    )
