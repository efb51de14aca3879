"""Intra-year date segmentation.

A pay year splits around two contractual dates:

- the rate switch (new pay table takes effect)
- the step progression (annual step increment)

Before the switch the previous calendar year's table applies. The step held
on Jan 1 applies until the progression date, then advances by one.
"""

from datetime import date, timedelta
from typing import Iterator, List, Optional

from .contract import load_contract_rules
from .pay_tables import clamp_step
from .schemas import ContractRules, DateSegment

ONE_DAY = timedelta(days=1)


def step_on_jan1(selected_step, tie_to_year: bool, year: int, base_year: Optional[int] = None) -> int:
    """Resolve the step held on Jan 1.

    When tied to the year, the step is (year - base_year) + 1, clamped.
    Otherwise the selected step is clamped and used as-is.
    """
    if tie_to_year:
        if base_year is None:
            base_year = load_contract_rules().base_year
        return clamp_step((year - base_year) + 1)
    return clamp_step(selected_step)


def year_segments(year: int, step_jan1: int, rules: Optional[ContractRules] = None) -> List[DateSegment]:
    """Split a year into its three pay-rate-consistent date ranges.

    Returns:
        [Jan 1 .. switch-1 on year-1's table,
         switch .. progression-1 on year's table,
         progression .. Dec 31 on year's table with step + 1]
    """
    rules = rules or load_contract_rules()
    switch = rules.rate_switch.in_year(year)
    progression = rules.step_progression.in_year(year)

    return [
        DateSegment(start=date(year, 1, 1), end=switch - ONE_DAY,
                    pay_table_year=year - 1, step=step_jan1),
        DateSegment(start=switch, end=progression - ONE_DAY,
                    pay_table_year=year, step=step_jan1),
        DateSegment(start=progression, end=date(year, 12, 31),
                    pay_table_year=year, step=clamp_step(step_jan1 + 1)),
    ]


def segment_for_day(segments: List[DateSegment], day: date) -> DateSegment:
    """Find the segment covering a day."""
    for segment in segments:
        if segment.contains(day):
            return segment
    raise ValueError(f"{day.isoformat()} is outside the segmented year")


def iter_year_days(year: int) -> Iterator[date]:
    """Yield every calendar day of a year in order."""
    day = date(year, 1, 1)
    while day.year == year:
        yield day
        day += ONE_DAY
