"""Tests for the pay table pipeline and rate resolution.

Covers the three forecast stages (project, anchor, compress), their purity,
and PayTableRegistry lookups including the XLR premium and RP fleet limits.
"""

import copy

import pytest

from pilotpay.sdk.contract import load_contract_rules
from pilotpay.sdk.pay_tables import (
    PayTableLookupError,
    PayTableRegistry,
    anchor_first_officer_and_relief,
    build_tables,
    clamp_step,
    compress_low_relief_steps,
    contractual_tables,
    forecast_years,
    get_registry,
    project_tables,
    round_cents,
)


@pytest.fixture
def rules():
    return load_contract_rules()


@pytest.fixture
def registry():
    return get_registry()


class TestClampStep:
    """Steps outside 1-12 are clamped."""

    def test_below_range(self):
        assert clamp_step(0) == 1
        assert clamp_step(-4) == 1

    def test_above_range(self):
        assert clamp_step(13) == 12

    def test_in_range(self):
        assert clamp_step(7) == 7


class TestPipelineStages:
    """Each stage returns a new snapshot and never lowers a rate."""

    def test_forecast_years(self, rules):
        assert forecast_years(rules) == [2027, 2028, 2029, 2030, 2031]

    def test_project_does_not_mutate_input(self, rules):
        raw = contractual_tables(rules)
        before = copy.deepcopy(raw)

        projected = project_tables(raw, rules)

        assert raw == before
        assert 2027 in projected
        assert 2027 not in raw

    def test_anchor_does_not_mutate_input(self, rules):
        projected = project_tables(contractual_tables(rules), rules)
        before = copy.deepcopy(projected)

        anchor_first_officer_and_relief(projected, rules, forecast_years(rules))

        assert projected == before

    def test_compress_does_not_mutate_input(self, rules):
        years = forecast_years(rules)
        anchored = anchor_first_officer_and_relief(project_tables(contractual_tables(rules), rules), rules, years)
        before = copy.deepcopy(anchored)

        compress_low_relief_steps(anchored, rules, years)

        assert anchored == before

    def test_projection_compounds(self, rules):
        projected = project_tables(contractual_tables(rules), rules)

        # 2026 CA 777 step 1 is 411.26
        assert projected[2027]["CA"]["777"][0] == pytest.approx(460.61)
        assert projected[2028]["CA"]["777"][0] == pytest.approx(479.04)

    def test_anchor_and_compress_only_raise(self, rules):
        years = forecast_years(rules)
        projected = project_tables(contractual_tables(rules), rules)
        anchored = anchor_first_officer_and_relief(projected, rules, years)
        compressed = compress_low_relief_steps(anchored, rules, years)

        for year in years:
            for seat in ("FO", "RP"):
                for aircraft, ladder in projected[year][seat].items():
                    for i, rate in enumerate(ladder):
                        assert anchored[year][seat][aircraft][i] >= rate
                        assert compressed[year][seat][aircraft][i] >= anchored[year][seat][aircraft][i]

    def test_contract_years_untouched(self, rules):
        tables = build_tables(rules)
        for year, seats in rules.pay_tables.items():
            for seat, fleets in seats.items():
                for aircraft, ladder in fleets.items():
                    assert list(tables[year][seat][aircraft]) == ladder


class TestForecastValues:
    """Spot checks of anchored and compressed forecast rates."""

    def test_ca_not_anchored(self, registry):
        # CA is only projected
        assert registry.ladder(2027, "CA", "777")[11] == pytest.approx(514.36)

    def test_fo_wide_body_step12_anchored(self, registry):
        # 514.36 * 0.67 beats the projected 334.33
        assert registry.ladder(2027, "FO", "777")[11] == pytest.approx(344.62)

    def test_fo_steps_1_2_flat_across_fleets(self, registry):
        for year in forecast_years(registry.rules):
            firsts = {registry.ladder(year, "FO", a)[:2] for a in registry.allowed_aircraft("FO")}
            assert len(firsts) == 1

    def test_rp_low_step_compressed(self, registry):
        ladder = registry.ladder(2027, "RP", "777")
        # step 5 anchored to 514.36 * 0.41
        assert ladder[4] == pytest.approx(210.89)
        # step 1 = step 5 less 42%
        assert ladder[0] == pytest.approx(122.32)

    def test_every_ladder_non_decreasing(self, registry):
        for year in registry.years():
            for seat in ("CA", "FO", "RP"):
                for aircraft in registry.allowed_aircraft(seat):
                    ladder = registry.ladder(year, seat, aircraft)
                    assert len(ladder) == 12
                    assert all(a <= b for a, b in zip(ladder, ladder[1:])), (year, seat, aircraft)


class TestRegistryLookup:
    """Rate resolution, XLR premium and lookup failures."""

    def test_years_cover_contract_and_forecast(self, registry):
        assert registry.years() == list(range(2023, 2032))

    def test_contract_rate(self, registry):
        assert registry.rate_for("CA", "777", 2025, 1) == pytest.approx(395.43)

    def test_step_clamped(self, registry):
        assert registry.rate_for("CA", "777", 2025, 0) == registry.rate_for("CA", "777", 2025, 1)
        assert registry.rate_for("CA", "777", 2025, 20) == pytest.approx(441.57)

    def test_xlr_premium_applied(self, registry):
        assert registry.rate_for("CA", "320", 2025, 1, special=True) == pytest.approx(290.46 + 2.46)
        assert registry.rate_for("FO", "320", 2025, 3, special=True) == pytest.approx(124.46 + 2.46)

    def test_xlr_exempt_fo_steps(self, registry):
        assert registry.rate_for("FO", "320", 2025, 1, special=True) == pytest.approx(90.98)
        assert registry.rate_for("FO", "320", 2025, 2, special=True) == pytest.approx(98.60)

    def test_xlr_only_on_320(self, registry):
        assert registry.rate_for("CA", "777", 2025, 1, special=True) == pytest.approx(395.43)

    @pytest.mark.parametrize("aircraft", ["320", "737", "220", "767"])
    def test_rp_outside_fleet_raises(self, registry, aircraft):
        with pytest.raises(PayTableLookupError, match="RP seat only"):
            registry.rate_for("RP", aircraft, 2025, 5)

    @pytest.mark.parametrize("year", [2022, 2032])
    def test_missing_year_raises(self, registry, year):
        with pytest.raises(PayTableLookupError, match=f"Missing pay table for {year}"):
            registry.rate_for("CA", "777", year, 1)

    def test_unknown_aircraft_raises(self, registry):
        with pytest.raises(PayTableLookupError):
            registry.rate_for("CA", "380", 2025, 1)

    def test_lookup_error_is_lookup_error(self):
        assert issubclass(PayTableLookupError, LookupError)

    def test_registry_is_read_only(self, registry):
        with pytest.raises(TypeError):
            registry._tables[2025] = {}


class TestHelpers:
    """Aircraft lists and step-to-year mapping."""

    def test_allowed_aircraft(self, registry):
        assert registry.allowed_aircraft("RP") == ["777", "787", "330"]
        assert registry.allowed_aircraft("CA") == ["777", "787", "330", "767", "320", "737", "220"]

    def test_year_for_step(self, registry):
        assert registry.year_for_step(1) == 2025
        assert registry.year_for_step(3) == 2027
        assert registry.year_for_step(12) == 2031
        assert registry.year_for_step(0) == 2025

    def test_build_from_rules(self, rules):
        registry = PayTableRegistry.build(rules)
        assert registry.rules is rules
        assert registry.rate_for("CA", "777", 2025, 1) == pytest.approx(395.43)


class TestRoundCents:
    """Cent rounding sends exact ties up, not to the even neighbour."""

    def test_monthly_split_tie(self):
        # 4765.50 / 12 is exactly 397.125
        assert round_cents(4765.50 / 12) == 397.13

    def test_exact_ties(self):
        assert round_cents(0.125) == 0.13
        assert round_cents(0.375) == 0.38
        assert round_cents(-0.125) == -0.13

    def test_float_below_tie_rounds_down(self):
        # 2.675 is stored as 2.67499999...
        assert round_cents(2.675) == 2.67

    def test_whole_numbers(self):
        assert round_cents(400) == 400.0
        assert isinstance(round_cents(400), float)
