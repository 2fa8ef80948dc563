"""
Tests for the oracle checks that steer candidate search.
"""
import asyncio

import pytest

from tag_autocompletion.context import GenerationContext
from tag_autocompletion.resolution import SearchQualityEvaluator, split_compound
from tag_autocompletion.resolution.search_evaluator import components_covered, parse_yes_no
from fakes import EVALUATION, FALLBACK, SUFFICIENCY, keyword_responder


class TestCompoundTags:
    """Tests for compound tag helpers."""

    @pytest.mark.parametrize("tag,halves", [
        ("padded_room", ("padded", "room")),
        ("hugging_own_knees", ("hugging", "knees")),
        ("blonde hair", ("blonde", "hair")),
        ("smile", None),
        ("  smile_ ", None),
    ])
    def test_split_compound(self, tag, halves):
        assert split_compound(tag) == halves

    def test_missing_half_is_not_covered(self):
        assert not components_covered("padded_room", ["padded jacket", "padded walls"])

    def test_both_halves_covered(self):
        assert components_covered("padded_room", ["padded walls", "room"])

    def test_compact_form_counts(self):
        assert components_covered("bed_room", ["bedroom"])


class TestParseYesNo:
    """Tests for parse_yes_no."""

    @pytest.mark.parametrize("answer,expected", [
        ("YES", True),
        ("yes.", True),
        ("  Yes, they match", True),
        ("NO", False),
        ("<think>YES maybe</think>NO", False),
        ("<think>no idea</think>YES", True),
        ("", False),
        ("I think YES", False),
    ])
    def test_first_word_decides(self, answer, expected):
        assert parse_yes_no(answer) is expected


class TestEvaluateResults:
    """Tests for SearchQualityEvaluator.evaluate_results."""

    def test_empty_results_are_inadequate_without_oracle(self, make_session):
        session, llm = make_session(lambda prompt: "YES")
        evaluator = SearchQualityEvaluator(session)

        assert asyncio.run(evaluator.evaluate_results("smile", [])) is False
        assert llm.prompts == []

    def test_compound_with_missing_half_is_inadequate_without_oracle(self, make_session):
        session, llm = make_session(lambda prompt: "YES")
        evaluator = SearchQualityEvaluator(session)

        result = asyncio.run(
            evaluator.evaluate_results("padded_room", ["padded jacket", "padded walls"])
        )

        assert result is False
        assert llm.prompts == []

    def test_oracle_decides_covered_compound(self, make_session):
        session, llm = make_session(keyword_responder({EVALUATION: "YES"}))
        evaluator = SearchQualityEvaluator(
            session, context=GenerationContext(prompt="blonde_hair, padded_room")
        )

        assert asyncio.run(evaluator.evaluate_results("padded_room", ["padded walls", "room"]))
        prompt = llm.prompts[0]
        assert 'compound tag "padded_room"' in prompt
        assert "CONTEXT: blonde_hair" in prompt

    def test_oracle_failure_is_inadequate(self, make_session):
        session, _ = make_session(fail_with="down")
        evaluator = SearchQualityEvaluator(session)

        assert asyncio.run(evaluator.evaluate_results("smile", ["smiling"])) is False


class TestGenerateFallbackTerms:
    """Tests for SearchQualityEvaluator.generate_fallback_terms."""

    def test_terms_are_cleaned_and_exclude_tag(self, make_session):
        answer = "<think>lighting category</think>- lighting\n- \"light\", bright_lighting, (illumination)"
        session, _ = make_session(keyword_responder({FALLBACK: answer}))
        evaluator = SearchQualityEvaluator(session)

        terms = asyncio.run(evaluator.generate_fallback_terms("bright_lighting"))

        assert terms == ["lighting", "light", "illumination"]

    def test_terms_are_capped(self, make_session):
        session, _ = make_session(keyword_responder({FALLBACK: "a1, b2, c3, d4, e5, f6, g7"}))
        evaluator = SearchQualityEvaluator(session, max_fallback_terms=5)

        assert asyncio.run(evaluator.generate_fallback_terms("tag")) == ["a1", "b2", "c3", "d4", "e5"]

    def test_oracle_failure_yields_no_terms(self, make_session):
        session, _ = make_session(fail_with="down")
        evaluator = SearchQualityEvaluator(session)

        assert asyncio.run(evaluator.generate_fallback_terms("smile")) == []


class TestEvaluateSufficiency:
    """Tests for SearchQualityEvaluator.evaluate_sufficiency."""

    def test_missing_half_is_insufficient_without_oracle(self, make_session):
        session, llm = make_session(lambda prompt: "YES")
        evaluator = SearchQualityEvaluator(session)

        result = asyncio.run(
            evaluator.evaluate_sufficiency("padded_room", ["padded jacket", "padded walls"])
        )

        assert result is False
        assert llm.prompts == []

    def test_both_halves_with_unreachable_oracle_are_sufficient(self, make_session):
        session, _ = make_session(fail_with="down")
        evaluator = SearchQualityEvaluator(session, min_candidates_for_sufficiency=2)

        assert asyncio.run(evaluator.evaluate_sufficiency("padded_room", ["padded walls", "room"]))

    def test_too_few_candidates_with_unreachable_oracle_are_insufficient(self, make_session):
        session, _ = make_session(fail_with="down")
        evaluator = SearchQualityEvaluator(session, min_candidates_for_sufficiency=2)

        assert not asyncio.run(evaluator.evaluate_sufficiency("smile", ["smiling"]))

    def test_oracle_answer_is_used(self, make_session):
        session, llm = make_session(keyword_responder({SUFFICIENCY: "NO"}))
        evaluator = SearchQualityEvaluator(session)

        assert not asyncio.run(evaluator.evaluate_sufficiency("padded_room", ["padded walls", "room"]))
        assert '"padded" or contextually similar (REQUIRED)' in llm.prompts[0]
