"""Tests for the pilot-pay CLI commands.

Each test runs against an isolated config directory so profile defaults
come only from what the test writes.
"""

import json

import pytest
import yaml
from click.testing import CliRunner

from pilotpay.cli.__main__ import cli


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Set up an isolated config directory with no profile."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("PILOT_PAY_CONFIG_PATH", str(config_dir))
    return config_dir


@pytest.fixture
def fo_profile(config_dir):
    """Profile for an FO on the 787 at step 5."""
    profile = {"pilot": {"seat": "FO", "aircraft": "787", "step": 5, "province": "ON"}}
    (config_dir / "profile.yaml").write_text(yaml.dump(profile))
    return config_dir


@pytest.fixture
def runner():
    return CliRunner()


class TestAnnual:

    def test_json_output(self, runner, config_dir):
        result = runner.invoke(cli, [
            "annual", "--seat", "CA", "--aircraft", "777", "--year", "2025", "--step", "5",
            "--format", "json",
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["inputs"]["seat"] == "CA"
        assert data["step_jan1"] == 5
        assert [row["pay_table_year"] for row in data["audit"]] == [2024, 2025, 2025]

    def test_profile_defaults(self, runner, fo_profile):
        result = runner.invoke(cli, ["annual", "--year", "2026", "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["inputs"]["seat"] == "FO"
        assert data["inputs"]["aircraft"] == "787"
        assert data["step_jan1"] == 5

    def test_option_overrides_profile(self, runner, fo_profile):
        result = runner.invoke(cli, ["annual", "--year", "2026", "--step", "2", "--format", "json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["step_jan1"] == 2

    def test_tied_step_picks_year(self, runner, config_dir):
        result = runner.invoke(cli, [
            "annual", "--seat", "CA", "--aircraft", "777", "--step", "2", "--tie-step", "--format", "json",
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["inputs"]["year"] == 2026
        assert data["step_jan1"] == 2

    def test_table_output(self, runner, fo_profile):
        result = runner.invoke(cli, ["annual", "--year", "2026"])

        assert result.exit_code == 0, result.output
        assert "NET PAY" in result.output
        assert "Pay Segments" in result.output

    def test_missing_seat(self, runner, config_dir):
        result = runner.invoke(cli, ["annual", "--aircraft", "777", "--year", "2025"])

        assert result.exit_code != 0
        assert "Missing --seat" in result.output

    def test_rp_on_narrow_body(self, runner, config_dir):
        result = runner.invoke(cli, ["annual", "--seat", "RP", "--aircraft", "320", "--year", "2025"])

        assert result.exit_code == 1
        assert "RP seat only" in result.output

    def test_invalid_esop(self, runner, config_dir):
        result = runner.invoke(cli, [
            "annual", "--seat", "CA", "--aircraft", "777", "--year", "2025", "--esop", "150",
        ])

        assert result.exit_code == 1
        assert "Invalid inputs" in result.output


class TestVo:

    def test_credit_parsed(self, runner, fo_profile):
        result = runner.invoke(cli, ["vo", "2:30", "--year", "2026", "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["hours"] == pytest.approx(5.0)
        assert data["rate"] == pytest.approx(214.42)

    def test_plain_hours(self, runner, fo_profile):
        result = runner.invoke(cli, ["vo", "3", "--year", "2026", "--format", "json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["hours"] == pytest.approx(6.0)

    def test_bad_credit(self, runner, fo_profile):
        result = runner.invoke(cli, ["vo", "two", "--year", "2026"])

        assert result.exit_code == 2
        assert "Invalid credit" in result.output

    def test_table_output(self, runner, fo_profile):
        result = runner.invoke(cli, ["vo", "1:00", "--year", "2026"])

        assert result.exit_code == 0, result.output
        assert "VO Estimate" in result.output


class TestRate:

    def test_xlr_rate(self, runner, config_dir):
        result = runner.invoke(cli, [
            "rate", "--seat", "CA", "--aircraft", "320", "--year", "2025", "--step", "1", "--xlr",
        ])

        assert result.exit_code == 0, result.output
        assert result.output.strip() == "292.92"

    def test_tied_step_picks_year(self, runner, config_dir):
        # Step 3 tied to the year lands in 2027, the first forecast year
        result = runner.invoke(cli, ["rate", "--seat", "CA", "--aircraft", "777", "--step", "3", "--tie-step"])

        assert result.exit_code == 0, result.output
        assert result.output.strip() == "469.92"

    def test_explicit_year_wins_over_tied_step(self, runner, config_dir):
        result = runner.invoke(cli, [
            "rate", "--seat", "CA", "--aircraft", "777", "--year", "2025", "--step", "3", "--tie-step",
        ])

        assert result.exit_code == 0, result.output
        assert result.output.strip() == "395.43"

    def test_rp_on_narrow_body(self, runner, config_dir):
        result = runner.invoke(cli, ["rate", "--seat", "RP", "--aircraft", "320", "--year", "2025"])

        assert result.exit_code == 1
        assert "RP seat only" in result.output


class TestTables:

    def test_show_json(self, runner, config_dir):
        result = runner.invoke(cli, ["tables", "show", "2027", "--seat", "FO", "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert list(data["tables"]) == ["FO"]
        assert data["tables"]["FO"]["777"][11] == pytest.approx(344.62)

    def test_show_missing_year(self, runner, config_dir):
        result = runner.invoke(cli, ["tables", "show", "2040"])

        assert result.exit_code == 1
        assert "No pay tables for 2040" in result.output

    def test_years(self, runner, config_dir):
        result = runner.invoke(cli, ["tables", "years"])

        assert result.exit_code == 0
        assert "2026  contract" in result.output
        assert "2027  forecast" in result.output

    def test_aircraft_rp(self, runner, config_dir):
        result = runner.invoke(cli, ["tables", "aircraft", "--seat", "RP"])

        assert result.output.split() == ["777", "787", "330"]


class TestProfileCommands:

    def test_init_then_show(self, runner, config_dir):
        result = runner.invoke(cli, ["profile", "init", "--seat", "fo", "--aircraft", "320", "--step", "2"])
        assert result.exit_code == 0, result.output

        saved = yaml.safe_load((config_dir / "profile.yaml").read_text())
        assert saved["pilot"]["seat"] == "FO"
        assert saved["pilot"]["aircraft"] == "320"

        result = runner.invoke(cli, ["profile", "show"])
        assert result.exit_code == 0
        assert "central (default)" in result.output

    def test_init_refuses_overwrite(self, runner, fo_profile):
        result = runner.invoke(cli, ["profile", "init", "--seat", "CA", "--aircraft", "777"])

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_set_and_get(self, runner, config_dir):
        result = runner.invoke(cli, ["profile", "set", "pilot.aircraft", "320"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, ["profile", "get", "pilot.aircraft"])
        assert result.output.strip() == "320"

    def test_set_bool(self, runner, config_dir):
        runner.invoke(cli, ["profile", "set", "pilot.tie_step_to_year", "true"])

        saved = yaml.safe_load((config_dir / "profile.yaml").read_text())
        assert saved["pilot"]["tie_step_to_year"] is True

    def test_set_unknown_key(self, runner, config_dir):
        result = runner.invoke(cli, ["profile", "set", "pilot.base", "YYZ"])

        assert result.exit_code == 1
        assert "Unknown profile key" in result.output

    def test_set_invalid_value(self, runner, config_dir):
        result = runner.invoke(cli, ["profile", "set", "pilot.step", "13"])

        assert result.exit_code == 1
        assert not (config_dir / "profile.yaml").exists()

    def test_use_external_profile(self, runner, config_dir, tmp_path):
        external = tmp_path / "repo" / "profile.yaml"
        external.parent.mkdir()
        external.write_text(yaml.dump({"pilot": {"seat": "CA", "aircraft": "330"}}))

        result = runner.invoke(cli, ["profile", "use", str(external)])
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, ["profile", "get", "pilot.aircraft"])
        assert result.output.strip() == "330"

    def test_use_rejects_invalid_profile(self, runner, config_dir, tmp_path):
        external = tmp_path / "bad.yaml"
        external.write_text(yaml.dump({"pilot": {"seat": "XX"}}))

        result = runner.invoke(cli, ["profile", "use", str(external)])

        assert result.exit_code == 1
        assert "validation failed" in result.output
