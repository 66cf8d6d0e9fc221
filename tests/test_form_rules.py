"""
Tests for radio group and dropdown heuristics.
"""

import pytest

from core.form_rules import (
    RADIO_RULES,
    is_salary_question,
    parse_salary,
    resolve_dropdown,
    resolve_radio_group,
)


class TestRadioGroups:

    def test_yes_no_question_picks_yes(self):
        assert resolve_radio_group("Do you hold a driver's licence?", ["No", "Yes"]) == 1

    def test_experience_question_picks_last(self):
        labels = ["None", "Less than 1 year", "1-3 years", "More than 5 years"]
        assert resolve_radio_group("How many years' experience in PRINCE2?", labels) == 3

    def test_eligibility_picks_citizen(self):
        labels = ["I require sponsorship", "Temporary visa", "Australian citizen"]
        assert resolve_radio_group("Which describes your right to work in Australia?", labels) == 2

    def test_pr_must_be_whole_word(self):
        # "prefer" contains "pr" but is not a permanent-resident option
        labels = ["I prefer not to say", "PR holder"]
        assert resolve_radio_group("Visa status", labels) == 1

    def test_default_picks_first_non_negative(self):
        labels = ["No", "None of these", "Sometimes", "Always"]
        assert resolve_radio_group("How often do travel?", labels) == 2

    def test_yes_no_without_yes_falls_through(self):
        # no "yes" option: the default rule decides
        labels = ["No", "Maybe later"]
        assert resolve_radio_group("Have you worked here before?", labels) == 1

    def test_all_negative_options(self):
        assert resolve_radio_group("Sponsorship needed?", ["No", "Visa sponsor required"]) is None

    def test_empty_group(self):
        assert resolve_radio_group("Do you drive?", []) is None

    def test_rule_order(self):
        assert [rule.name for rule in RADIO_RULES] == ["yes-no", "experience", "eligibility", "default"]


class TestDropdowns:

    def test_salary_closest_option(self):
        options = ["Select", "80k-90k", "100k-110k", "120k+"]
        assert resolve_dropdown("What are your salary expectations?", options, 105000) == 2

    def test_salary_tie_keeps_first(self):
        options = ["90k", "110k"]
        assert resolve_dropdown("Expected pay", options, 100000) == 0

    def test_salary_without_numbers_falls_back_to_last(self):
        options = ["Select", "Negotiable", "Prefer not to say"]
        assert resolve_dropdown("Salary expectation", options, 100000) == 2

    def test_non_salary_picks_last(self):
        assert resolve_dropdown("Notice period", ["Immediately", "2 weeks", "4 weeks"], 100000) == 2

    @pytest.mark.parametrize("options", [[], ["Only option"]])
    def test_too_few_options(self, options):
        assert resolve_dropdown("Salary", options, 100000) is None

    @pytest.mark.parametrize("label,expected", [
        ("Annual salary", True),
        ("Remuneration expectations", True),
        ("Preferred start date", False),
    ])
    def test_is_salary_question(self, label, expected):
        assert is_salary_question(label) is expected


class TestParseSalary:

    @pytest.mark.parametrize("text,expected", [
        ("100k-110k", 100000),
        ("$95,000+", 95000),
        ("120", 120000),
        ("$87.5K", 87500),
        ("150000 - 160000", 150000),
        ("Select one", None),
        ("", None),
    ])
    def test_parse(self, text, expected):
        assert parse_salary(text) == expected
