"""
Tests for run settings loading and validation.
"""

import pytest
import yaml

from core.settings import DEFAULT_LOCATION, EXAMPLE_SETTINGS_YAML, BotSettings, CandidateProfile


class TestNormalisation:

    def test_comma_separated_lists(self):
        settings = BotSettings.from_dict({
            "job_titles": "project manager, , program manager ",
            "blocked_companies": ["Acme", "", None, "  Globex "],
        })
        assert settings.job_titles == ["project manager", "program manager"]
        assert settings.blocked_companies == ["Acme", "Globex"]
        assert settings.blocked_titles == []

    @pytest.mark.parametrize("raw,expected", [(150, 100), (-5, 0), ("75", 75), ("fast", 50)])
    def test_speed_clamped(self, raw, expected):
        assert BotSettings(scan_speed=raw).scan_speed == expected

    @pytest.mark.parametrize("raw,expected", [
        ("false", False), ("False", False), ("0", False), ("", False),
        ("true", True), (" TRUE ", True), ("1", True), (True, True), (0, False),
    ])
    def test_stealth_mode_parsed(self, raw, expected):
        assert BotSettings.from_dict({"stealth_mode": raw}).stealth_mode is expected

    def test_negative_cooldown(self):
        assert BotSettings(cooldown_delay=-1).cooldown_delay == 0.0

    def test_profile_from_flat_record(self):
        settings = BotSettings.from_dict({
            "full_name": "Jane Citizen",
            "background_bio": "Bio",
            "job_titles": ["pm"],
        })
        assert settings.profile == CandidateProfile("Jane Citizen", DEFAULT_LOCATION, "Bio")
        assert settings.location == DEFAULT_LOCATION

    def test_profile_from_nested_mapping(self):
        settings = BotSettings.from_dict({"profile": {"full_name": "Jane", "location": "Perth, Australia"}})
        assert settings.profile.full_name == "Jane"
        assert settings.location == "Perth, Australia"

    def test_unknown_keys_ignored(self):
        settings = BotSettings.from_dict({"job_titles": ["pm"], "theme": "dark"})
        assert settings.job_titles == ["pm"]

    def test_to_dict_hides_key(self):
        settings = BotSettings(openai_api_key="sk-secret")
        assert settings.to_dict()["openai_api_key"] is True
        assert settings.to_dict(include_secrets=True)["openai_api_key"] == "sk-secret"


class TestValidation:

    def test_valid(self, settings):
        assert settings.validate() == []

    def test_missing_key_and_titles(self):
        missing = BotSettings(openai_api_key="   ").validate()
        assert len(missing) == 2
        assert missing[0] == "openai_api_key"
        assert missing[1].startswith("job_titles")


class TestLoad:

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump({
            "full_name": "Jane",
            "job_titles": ["project manager"],
            "scan_speed": 90,
            "openai_api_key": "sk-test",
        }))
        settings = BotSettings.load(path)
        assert settings.scan_speed == 90
        assert settings.validate() == []

    def test_load_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert BotSettings.load(path).job_titles == []

    def test_load_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            BotSettings.load(path)

    def test_example_is_valid(self, tmp_path):
        path = tmp_path / "example.yaml"
        path.write_text(EXAMPLE_SETTINGS_YAML)
        settings = BotSettings.load(path)
        assert settings.validate() == []
        assert settings.expected_salary == 120000
        assert settings.blocked_titles == ["sales", "customer service"]
