"""Ethical safeguard filter tests — input check, output verdicts, filters, section."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import copy

from ideagen.services.normalizer import normalize
from ideagen.services.safeguards import (
    apply_safety_filters,
    check_input_safety,
    check_output_safety,
    contains_unsafe_content,
    generate_ethical_safeguards,
)

from factories import SCENARIO_A, make_context, sample_ai_output


class TestMatching:
    def test_word_boundaries(self):
        assert contains_unsafe_content("I want to kill time") is True
        assert contains_unsafe_content("My skills are cooking") is False

    def test_case_insensitive(self):
        assert contains_unsafe_content("a SCAM website") is True


class TestInputSafety:
    def test_clean_input(self):
        result = check_input_safety(normalize(SCENARIO_A))
        assert result.safe is True
        assert result.action == "proceed"

    def test_blocked_term_rejected(self):
        result = check_input_safety(normalize({**SCENARIO_A, "goals": "run a phone scam"}))
        assert result.safe is False
        assert result.action == "reject"

    def test_flagged_business_type_proceeds_with_caution(self):
        result = check_input_safety(normalize({**SCENARIO_A, "interests": "craft beer and alcohol"}))
        assert result.safe is True
        assert result.action == "proceed_with_caution"
        assert result.flagged == ["alcohol"]


class TestOutputSafety:
    def test_clean_output_proceeds(self):
        verdict = check_output_safety(sample_ai_output())
        assert verdict.safe is True
        assert verdict.action == "proceed"
        assert verdict.issues == [] and verdict.warnings == []

    def test_scenario_b_guaranteed_returns_is_a_warning(self):
        output = sample_ai_output()
        output["decisionSupport"]["explainability"] = "This plan offers guaranteed returns within a year."
        verdict = check_output_safety(output)

        assert verdict.safe is True
        assert verdict.action == "proceed_with_warnings"
        assert [w.type for w in verdict.warnings] == ["financial_misinformation"]
        assert "guaranteed returns" in verdict.warnings[0].message

        filtered = apply_safety_filters(output, verdict)
        assert filtered is not None
        assert filtered["decisionSupport"]["additionalWarnings"] == [verdict.warnings[0].message]
        assert "additionalWarnings" not in output["decisionSupport"]

    def test_scenario_c_bias_anywhere_blocks(self):
        output = sample_ai_output()
        output["ideas"][2]["localAdaptation"] = "Note that women cannot run this kind of class."
        verdict = check_output_safety(output)

        assert verdict.safe is False
        assert verdict.action == "block"
        bias = [i for i in verdict.issues if i.type == "bias"]
        assert bias and bias[0].severity == "critical" and bias[0].category == "gender"
        assert apply_safety_filters(output, verdict) is None

    def test_harmful_content_blocks(self):
        output = sample_ai_output()
        output["results"]["pitchSummary"] = "Sell replica weapons at the market."
        verdict = check_output_safety(output)
        assert verdict.safe is False
        assert verdict.issues[0].type == "harmful_content"

    def test_exploitative_labor_blocks(self):
        output = sample_ai_output()
        output["decisionSupport"]["mitigations"].append("Use an unpaid intern to keep costs down")
        verdict = check_output_safety(output)
        assert verdict.safe is False
        assert any(i.type == "exploitative_labor" for i in verdict.issues)

    def test_unrealistic_revenue_and_margin(self):
        output = sample_ai_output()
        output["decisionSupport"]["revenueSimulation"].update(
            {"year1RevenueMin": 100, "year1RevenueMax": 5000, "year1ProfitMax": 4000}
        )
        messages = [w.message for w in check_output_safety(output).warnings]
        assert "Revenue range is unrealistically wide" in messages
        assert "Profit margin projections may be unrealistic" in messages

    def test_flagged_topic_mentioned_in_output_warns(self):
        output = sample_ai_output()
        output["ideas"][1]["description"] = "A tiffin service that avoids alcohol entirely."
        verdict = check_output_safety(output, ["alcohol"])
        assert verdict.safe is True
        assert any(w.type == "sensitive_business_type" for w in verdict.warnings)

    def test_safeguards_section_is_not_phrase_scanned(self):
        output = sample_ai_output()
        output["ethicalSafeguards"]["harmAvoidance"] = ["Excluded scam-prone and risk-free promises"]
        assert check_output_safety(output).safe is True

    def test_idempotent_verdict(self):
        output = sample_ai_output()
        output["decisionSupport"]["explainability"] = "Zero risk and guaranteed income for everyone."
        first = check_output_safety(copy.deepcopy(output))
        second = check_output_safety(copy.deepcopy(output))
        assert first == second

    def test_attached_warnings_do_not_change_the_verdict(self):
        output = sample_ai_output()
        output["decisionSupport"]["explainability"] = "Get rich quick with this idea."
        verdict = check_output_safety(output)
        filtered = apply_safety_filters(output, verdict)
        assert check_output_safety(filtered) == verdict


class TestSafeguardSection:
    def test_score_and_rural_notes(self):
        context = make_context()
        output = sample_ai_output()
        output["decisionSupport"]["explainability"] = "Risk-free and guaranteed profit for all."
        verdict = check_output_safety(output)

        section = generate_ethical_safeguards(context, verdict)
        assert section["safetyScore"] == 100 - 5 * len(verdict.warnings)
        assert any("offline channels" in note for note in section["inclusivityNotes"])
        assert section["biasChecks"] and section["harmAvoidance"]

    def test_perfect_score_without_verdict(self):
        assert generate_ethical_safeguards(make_context(locationType="urban"))["safetyScore"] == 100
