"""Tests for settings/profile configuration.

Uses isolated directories via tmp_path and PILOT_PAY_CONFIG_PATH
to avoid touching the real ~/.config/pilot-pay.
"""

import json

import pytest
import yaml

from pilotpay.sdk.config import (
    ProfileNotFoundError,
    get_config_dir,
    get_profile_path,
    get_profile_value,
    load_profile,
    load_settings,
    profile_defaults,
    save_profile,
    set_profile_value,
    set_setting,
    validate_profile,
)


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Point the SDK at an empty config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("PILOT_PAY_CONFIG_PATH", str(config_dir))
    return config_dir


class TestConfigDir:

    def test_env_override(self, config_dir):
        assert get_config_dir() == config_dir

    def test_xdg_fallback(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PILOT_PAY_CONFIG_PATH", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_dir() == tmp_path / "pilot-pay"


class TestSettings:

    def test_missing_settings_empty(self, config_dir):
        assert load_settings() == {}

    def test_set_setting(self, config_dir):
        set_setting("output_format", "json")
        saved = json.loads((config_dir / "settings.json").read_text())
        assert saved == {"output_format": "json"}

    def test_set_setting_keeps_other_keys(self, config_dir):
        set_setting("output_format", "json")
        set_setting("profile", "/tmp/profile.yaml")

        assert load_settings() == {"output_format": "json", "profile": "/tmp/profile.yaml"}


class TestProfile:

    def test_missing_profile_required(self, config_dir):
        with pytest.raises(ProfileNotFoundError):
            load_profile(require_exists=True)

    def test_missing_profile_optional(self, config_dir):
        assert load_profile(require_exists=False) == {}

    def test_set_and_get_value(self, config_dir):
        set_profile_value("pilot.step", 4)
        set_profile_value("pilot.aircraft", "787")

        assert get_profile_value("pilot.step") == 4
        assert get_profile_value("pilot.aircraft") == "787"
        assert get_profile_value("pilot.missing", "x") == "x"

    def test_value_under_scalar_is_default(self, config_dir):
        set_profile_value("pilot.seat", "FO")
        assert get_profile_value("pilot.seat.code") is None

    def test_missing_profile_hint(self, config_dir):
        with pytest.raises(ProfileNotFoundError, match="profile init"):
            get_profile_path(require_exists=True)

    def test_custom_profile_path(self, config_dir, tmp_path):
        custom = tmp_path / "elsewhere" / "profile.yaml"
        save_profile({"pilot": {"seat": "CA"}}, custom)
        set_setting("profile", str(custom))

        assert get_profile_path() == custom
        assert get_profile_value("pilot.seat") == "CA"

    def test_custom_profile_missing(self, config_dir, tmp_path):
        set_setting("profile", str(tmp_path / "gone.yaml"))
        with pytest.raises(ProfileNotFoundError, match="configured path"):
            get_profile_path(require_exists=True)


class TestProfileValidation:

    def test_unquoted_aircraft_accepted(self, config_dir):
        (config_dir / "profile.yaml").write_text("pilot:\n  seat: FO\n  aircraft: 320\n")
        assert validate_profile().aircraft == "320"

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError):
            validate_profile({"pilot": {"seat": "FO", "base": "YYZ"}})

    def test_defaults_only_set_fields(self, config_dir):
        save_profile({"pilot": {"seat": "FO", "aircraft": "320", "step": 2}})
        assert profile_defaults() == {"seat": "FO", "aircraft": "320", "step": 2}

    def test_defaults_empty_without_profile(self, config_dir):
        assert profile_defaults() == {}

    def test_invalid_profile_raises_value_error(self, config_dir):
        (config_dir / "profile.yaml").write_text(yaml.dump({"pilot": {"step": 20}}))
        with pytest.raises(ValueError, match="Invalid pilot profile"):
            profile_defaults()
