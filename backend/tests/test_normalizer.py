"""Normalizer tests — budget / location resolution, text handling, skill categories."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from pydantic import ValidationError

from ideagen.constants import BUDGET_RANGES, LOCATION_CONTEXTS
from ideagen.services.normalizer import (
    DEFAULT_GOALS,
    extract_skill_categories,
    normalize,
    normalize_budget,
    normalize_language,
    normalize_location,
    normalize_text,
)

from factories import SCENARIO_A, make_request


class TestBudget:
    @pytest.mark.parametrize(
        "raw",
        list(BUDGET_RANGES) + ["very low", "a small amount", "moderate savings", "HIGH", "", None, "¯\\_(ツ)_/¯", "42"],
    )
    def test_any_input_gives_ordered_range_and_tier(self, raw):
        budget = normalize_budget(raw)
        assert budget.min <= budget.max
        assert budget.tier

    def test_exact_key(self):
        budget = normalize_budget("5k-20k")
        assert budget.key == "5k-20k"
        assert budget.tier == "moderate"
        assert not budget.assumed and not budget.interpreted

    def test_fuzzy_keyword_is_interpreted(self):
        budget = normalize_budget("Very low, just my savings")
        assert budget.key == "under-1k"
        assert budget.interpreted is True
        assert budget.assumed is False

    def test_first_keyword_in_table_order_wins(self):
        # "very low" is listed before "low"
        assert normalize_budget("very low").key == "under-1k"
        assert normalize_budget("low").key == "1k-5k"

    def test_nonsense_is_assumed_micro(self):
        budget = normalize_budget("purple elephant")
        assert budget.assumed is True
        assert budget.tier == "micro"


class TestLocation:
    @pytest.mark.parametrize("key", list(LOCATION_CONTEXTS))
    def test_exact_keys(self, key):
        location = normalize_location(key)
        assert location.type == key
        assert location.market_access == LOCATION_CONTEXTS[key]["marketAccess"]

    def test_downtown_is_urban_not_town(self):
        assert normalize_location("Downtown apartment").type == "urban"

    def test_small_town(self):
        location = normalize_location("a small town near the highway")
        assert location.type == "semi-urban"
        assert location.interpreted is True

    def test_village_is_rural(self):
        assert normalize_location("my village").type == "rural"

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Rural area", "rural"),
            ("urban area", "urban"),
            ("semi urban neighbourhood", "semi-urban"),
            ("a semi-urban area", "semi-urban"),
            ("suburban cul-de-sac", "suburban"),
        ],
    )
    def test_category_words_in_free_text(self, text, expected):
        location = normalize_location(text)
        assert location.type == expected
        assert location.interpreted is True
        assert location.assumed is False

    def test_unknown_defaults_to_semi_urban(self):
        location = normalize_location("somewhere")
        assert location.type == "semi-urban"
        assert location.assumed is True


class TestText:
    def test_whitespace_collapsed_and_trimmed(self):
        assert normalize_text("  teaching \n\t cooking  ") == "teaching cooking"

    def test_length_cap(self):
        assert len(normalize_text("x" * 1000, 50)) == 50

    def test_none_is_empty(self):
        assert normalize_text(None) == ""

    @pytest.mark.parametrize("raw,expected", [("English", "en"), ("hindi", "hi"), ("हिंदी", "hi"), ("Klingon", "en"), (None, "en")])
    def test_language(self, raw, expected):
        assert normalize_language(raw) == expected


class TestSkillCategories:
    def test_multi_label(self):
        categories = extract_skill_categories("teaching, cooking and web design")
        assert categories == ["technical", "creative", "service", "trade"]

    def test_general_when_nothing_matches(self):
        assert extract_skill_categories("juggling") == ["general"]


class TestNormalize:
    def test_scenario_a_profile(self):
        profile = normalize(SCENARIO_A)
        assert profile.budget.tier == "micro"
        assert profile.location.type == "rural"
        assert profile.skill_categories == ["service", "trade"]
        assert profile.goals == DEFAULT_GOALS
        assert profile.meta.has_assumed_values is False
        assert profile.meta.assumptions == []

    def test_accepts_request_model(self):
        profile = normalize(make_request(region="Jaipur", language="Hindi"))
        assert profile.region == "Jaipur"
        assert profile.language == "hi"

    def test_region_falls_back_to_location_text(self):
        assert normalize(SCENARIO_A).region == "rural"

    def test_assumptions_recorded(self):
        profile = normalize({**SCENARIO_A, "budget": "???", "locationType": "???"})
        assert profile.meta.has_assumed_values is True
        assert profile.meta.assumptions == ["budget", "location"]

    def test_profile_is_immutable(self):
        profile = normalize(SCENARIO_A)
        with pytest.raises(ValidationError):
            profile.skills = "changed"

    def test_wire_form_uses_meta_key(self):
        wire = normalize(SCENARIO_A).to_wire()
        assert "_meta" in wire
        assert wire["skillCategories"] == ["service", "trade"]
