"""Pay table registry and hourly rate resolution.

Contractual tables are loaded verbatim, then extended into the forecast
horizon in three stages. Each stage consumes the previous snapshot and
returns a new one; no stage mutates its input:

1. project_tables - compound the last contractual year forward
2. anchor_first_officer_and_relief - tie FO/RP steps 3-12 to CA step 12
3. compress_low_relief_steps - RP steps 1-4 as a discount off RP step 5

Stages 2 and 3 only ever raise a rate, so a later pass never undoes an
earlier, more specific adjustment.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .contract import load_contract_rules
from .schemas import ContractRules, STEPS_PER_LADDER

logger = logging.getLogger(__name__)

MIN_STEP = 1
MAX_STEP = STEPS_PER_LADDER

# seat -> aircraft -> rates for steps 1..12
Ladder = Tuple[float, ...]
YearTable = Dict[str, Dict[str, Ladder]]
Snapshot = Dict[int, YearTable]


class PayTableLookupError(LookupError):
    """Raised when no rate exists for a year/seat/aircraft combination."""
    pass


def clamp_step(step) -> int:
    """Clamp a step into the 1-12 range."""
    step = int(step)
    if step < MIN_STEP:
        return MIN_STEP
    if step > MAX_STEP:
        return MAX_STEP
    return step


def round_cents(amount: float) -> float:
    """Round a currency amount to cents, ties away from zero.

    Works on the exact binary value of the float, so 2.675 (stored just
    below the tie) still rounds down.
    """
    return float(Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _copy_year(table: Mapping[str, Mapping[str, Ladder]]) -> YearTable:
    # Ladders are tuples, so copying the two dict levels is a full copy
    return {seat: dict(fleets) for seat, fleets in table.items()}


def _copy_snapshot(snapshot: Mapping[int, YearTable]) -> Snapshot:
    return {year: _copy_year(table) for year, table in snapshot.items()}


def _monotone(ladder: List[float]) -> Ladder:
    """Force a ladder to be non-decreasing from step 2 upward."""
    for i in range(1, len(ladder)):
        if ladder[i] < ladder[i - 1]:
            ladder[i] = ladder[i - 1]
    return tuple(ladder)


def contractual_tables(rules: ContractRules) -> Snapshot:
    """Contract tables exactly as published."""
    return {
        year: {
            seat: {aircraft: tuple(ladder) for aircraft, ladder in fleets.items()}
            for seat, fleets in seats.items()
        }
        for year, seats in rules.pay_tables.items()
    }


def forecast_years(rules: ContractRules) -> List[int]:
    """Years past the contract that are derived by projection."""
    last_year = max(rules.pay_tables)
    return list(range(last_year + 1, rules.projection.through_year + 1))


def project_tables(snapshot: Mapping[int, YearTable], rules: ContractRules) -> Snapshot:
    """Stage 1: compound the last contractual year into each forecast year.

    The first forecast year gets first_raise; every following year compounds
    a further annual_raise. Every cell is rounded to cents.
    """
    result = _copy_snapshot(snapshot)
    base = snapshot[max(rules.pay_tables)]

    factor = rules.projection.first_raise
    for year in forecast_years(rules):
        result[year] = {
            seat: {
                aircraft: tuple(round_cents(rate * factor) for rate in ladder)
                for aircraft, ladder in fleets.items()
            }
            for seat, fleets in base.items()
        }
        logger.debug(f"projected {year} at factor {factor:.6f}")
        factor *= rules.projection.annual_raise

    return result


def anchor_first_officer_and_relief(
    snapshot: Mapping[int, YearTable],
    rules: ContractRules,
    years: Iterable[int],
) -> Snapshot:
    """Stage 2: anchor FO and RP steps 3-12 to the same year's CA step 12.

    FO uses the narrow-body or wide-body curve; RP uses one curve for all
    fleets. FO steps 1-2 are held flat across fleets at the first aircraft's
    values. A target only replaces a rate when it is higher, then the ladder
    is forced non-decreasing.
    """
    result = _copy_snapshot(snapshot)
    anchors = rules.anchors

    for year in years:
        table = result.get(year)
        if not table or "CA" not in table:
            continue

        fo = table.get("FO", {})
        rp = table.get("RP", {})
        flat = next(iter(fo.values()), None)

        new_fo: Dict[str, Ladder] = {}
        new_rp: Dict[str, Ladder] = {}

        for aircraft, ca_ladder in table["CA"].items():
            ca12 = ca_ladder[MAX_STEP - 1]

            if aircraft in fo:
                ladder = list(fo[aircraft])
                if flat is not None:
                    ladder[0], ladder[1] = flat[0], flat[1]
                curve = anchors.fo_narrow_body if aircraft in rules.narrow_body else anchors.fo_wide_body
                for step, pct in curve.items():
                    ladder[step - 1] = max(ladder[step - 1], round_cents(ca12 * pct))
                new_fo[aircraft] = _monotone(ladder)

            if aircraft in rp:
                ladder = list(rp[aircraft])
                for step, pct in anchors.relief_pilot.items():
                    ladder[step - 1] = max(ladder[step - 1], round_cents(ca12 * pct))
                new_rp[aircraft] = _monotone(ladder)

        if fo:
            table["FO"] = {**fo, **new_fo}
        if rp:
            table["RP"] = {**rp, **new_rp}

    return result


def compress_low_relief_steps(
    snapshot: Mapping[int, YearTable],
    rules: ContractRules,
    years: Iterable[int],
) -> Snapshot:
    """Stage 3: raise RP steps 1-4 to a fixed discount off RP step 5."""
    result = _copy_snapshot(snapshot)
    discounts = rules.anchors.relief_pilot_low_step_discounts

    for year in years:
        rp = result.get(year, {}).get("RP")
        if not rp:
            continue

        compressed = {}
        for aircraft, ladder in rp.items():
            step5 = ladder[4]
            if not step5:
                continue
            new_ladder = list(ladder)
            for step, discount in discounts.items():
                new_ladder[step - 1] = max(new_ladder[step - 1], round_cents(step5 * (1 - discount)))
            compressed[aircraft] = tuple(new_ladder)

        result[year]["RP"] = {**rp, **compressed}

    return result


def build_tables(rules: ContractRules) -> Snapshot:
    """Run the full pipeline: contract -> projected -> anchored -> compressed."""
    years = forecast_years(rules)
    raw = contractual_tables(rules)
    projected = project_tables(raw, rules)
    anchored = anchor_first_officer_and_relief(projected, rules, years)
    return compress_low_relief_steps(anchored, rules, years)


class PayTableRegistry:
    """Read-only pay tables for contractual and forecast years."""

    def __init__(self, tables: Mapping[int, YearTable], rules: ContractRules):
        self.rules = rules
        self._tables = MappingProxyType({
            year: MappingProxyType({
                seat: MappingProxyType(dict(fleets)) for seat, fleets in table.items()
            })
            for year, table in tables.items()
        })

    @classmethod
    def build(cls, rules: Optional[ContractRules] = None) -> "PayTableRegistry":
        """Build a registry from contract rules (packaged rules by default)."""
        rules = rules or load_contract_rules()
        tables = build_tables(rules)
        logger.debug(f"pay table registry built for years {min(tables)}-{max(tables)}")
        return cls(tables, rules)

    def years(self) -> List[int]:
        return sorted(self._tables)

    def ladder(self, year: int, seat: str, aircraft: str) -> Ladder:
        """Get the full step ladder for a seat/aircraft in a year."""
        table = self._tables.get(year, {}).get(seat)
        if not table:
            raise PayTableLookupError(f"Missing pay table for {year} {seat}")
        if seat == "RP" and aircraft not in self.rules.relief_pilot_aircraft:
            allowed = "/".join(self.rules.relief_pilot_aircraft)
            raise PayTableLookupError(f"RP seat only on {allowed}")
        if aircraft not in table:
            raise PayTableLookupError(f"No {seat} rates for aircraft {aircraft} in {year}")
        return table[aircraft]

    def rate_for(self, seat: str, aircraft: str, year: int, step, special: bool = False) -> float:
        """Resolve the hourly rate for a seat/aircraft/year/step.

        When special is set on the XLR aircraft, the per-hour premium is
        added, except for the exempt FO steps.
        """
        step = clamp_step(step)
        rate = self.ladder(year, seat, aircraft)[step - 1]

        premium = self.rules.xlr_premium
        if special and aircraft == premium.aircraft:
            if not (seat == "FO" and step in premium.exempt_fo_steps):
                rate += premium.hourly

        return rate

    def allowed_aircraft(self, seat: str) -> List[str]:
        """Aircraft a seat can be rated on, in display order."""
        if seat == "RP":
            return list(self.rules.relief_pilot_aircraft)
        return list(self.rules.aircraft_order)

    def year_for_step(self, step) -> int:
        """Inverse of tying the step to the year, clamped to available tables."""
        year = self.rules.base_year - 1 + clamp_step(step)
        years = self.years()
        return max(years[0], min(years[-1], year))


@lru_cache(maxsize=None)
def get_registry() -> PayTableRegistry:
    """Process-wide registry built from the packaged contract rules."""
    return PayTableRegistry.build()
