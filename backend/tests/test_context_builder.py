"""Context builder and prompt tests."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import json

from ideagen.schemas.context_schema import Context
from ideagen.services.context_builder import (
    build_audience_insights,
    build_resource_constraints,
    context_cache_key,
    get_local_economy,
)
from ideagen.services.normalizer import normalize_budget, normalize_location
from ideagen.services.prompts import (
    build_primary_system_prompt,
    build_secondary_system_prompt,
    build_secondary_user_prompt,
    build_user_prompt,
)

from factories import SCENARIO_A, make_context, make_request, sample_ai_output


class TestLocalEconomy:
    def test_named_region_by_substring(self):
        economy = get_local_economy("Old city, Jaipur, Rajasthan", "urban")
        assert economy.source == "jaipur"
        assert "textiles" in economy.dominant_sectors

    def test_generic_by_location_type(self):
        assert get_local_economy("nowhere in particular", "remote").source == "rural"
        assert get_local_economy("", "suburban").source == "urban"


class TestAudienceInsights:
    def test_scenario_a_personas_and_sensitivity(self):
        insights = build_audience_insights("local families", normalize_location("rural"))
        assert insights.personas == ["families", "local-community"]
        assert insights.price_sensitivity == "moderate-high"
        assert "community gatherings" in insights.reach_channels

    def test_limited_infrastructure_drops_digital_only_channels(self):
        insights = build_audience_insights("college students", normalize_location("rural"))
        assert "Instagram" not in insights.reach_channels
        assert "YouTube" not in insights.reach_channels
        assert "WhatsApp" in insights.reach_channels
        assert "local word-of-mouth" in insights.reach_channels

    def test_strong_infrastructure_keeps_channels(self):
        insights = build_audience_insights("college students", normalize_location("urban"))
        assert "Instagram" in insights.reach_channels
        assert "local word-of-mouth" not in insights.reach_channels

    def test_no_persona_match(self):
        insights = build_audience_insights("anyone", normalize_location("urban"))
        assert insights.personas == []
        assert insights.price_sensitivity == "moderate"


class TestResourceConstraints:
    def test_micro_rural(self):
        constraints = build_resource_constraints(normalize_budget("under-1k"), normalize_location("rural"))
        assert "paid advertising" in constraints.should_avoid
        assert "physical retail space" not in constraints.should_avoid

    def test_high_rent_extends_lists(self):
        constraints = build_resource_constraints(normalize_budget("1k-5k"), normalize_location("urban"))
        assert "physical retail space" in constraints.should_avoid
        assert "online-first approach" in constraints.can_afford


class TestBuildContext:
    def test_scenario_a(self):
        context = make_context()
        assert context.economic_context.budget.tier == "micro"
        assert context.economic_context.budget.range.max == 1000
        assert context.economic_context.location.type == "rural"
        assert context.economic_context.local_economy.source == "rural"
        assert context.output_preferences.language_name == "English"
        assert context.metadata.flagged_topics == []

    def test_flagged_topics_carried(self):
        context = make_context(flagged_topics=["alcohol"])
        assert context.metadata.flagged_topics == ["alcohol"]

    def test_wire_round_trip(self):
        context = make_context(region="Goa")
        restored = Context.model_validate(context.to_wire())
        assert restored == context


class TestCacheKey:
    def test_session_id_excluded(self):
        assert context_cache_key(make_request(sessionId="a")) == context_cache_key(make_request(sessionId="b"))

    def test_content_changes_key(self):
        assert context_cache_key(make_request()) != context_cache_key(make_request(budget="1k-5k"))

    def test_dict_and_model_agree_on_same_fields(self):
        request = make_request()
        assert context_cache_key(request) == context_cache_key(request.model_dump(by_alias=True))


class TestPrompts:
    def test_primary_prompt_carries_context(self):
        prompt = build_primary_system_prompt(make_context())
        assert "Budget Tier: micro" in prompt
        assert "Location Type: rural" in prompt
        assert "EXTRA SCRUTINY" not in prompt

    def test_primary_prompt_scrutiny_for_flagged_topics(self):
        prompt = build_primary_system_prompt(make_context(flagged_topics=["tobacco"]))
        assert "EXTRA SCRUTINY" in prompt
        assert "tobacco" in prompt

    def test_user_prompt(self):
        prompt = build_user_prompt(make_context(localData="weekly market on Sundays"))
        assert "Skills: teaching, cooking" in prompt
        assert "Budget Range: $0 - $1000" in prompt
        assert "Additional Local Info: weekly market on Sundays" in prompt
        assert '"iconKey": "market"' in prompt

    def test_prompts_ask_for_requirements(self):
        assert "decisionSupport.requirements" in build_user_prompt(make_context())
        assert '"requirements": [string]' in build_secondary_user_prompt(sample_ai_output())

    def test_secondary_prompts(self):
        assert "NEVER" in build_secondary_system_prompt()
        output = sample_ai_output()
        prompt = build_secondary_user_prompt(output)
        body = prompt.split("INPUT JSON:\n", 1)[1].split("\n\nReturn your response", 1)[0]
        assert json.loads(body) == output
