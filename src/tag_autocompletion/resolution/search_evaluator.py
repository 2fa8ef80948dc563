"""
Oracle checks that steer the candidate search.

- evaluate_results: are the first search results an adequate match?
- generate_fallback_terms: simpler search terms in the same semantic category
- evaluate_sufficiency: do accumulated fallback candidates cover the tag?

Compound tags ("padded_room") get a deterministic component check before
the oracle is consulted: a missing half is never adequate.
"""
import logging
import re
from typing import List, Optional, Tuple

from ..context.generation_context import GenerationContext
from ..oracle import OracleSession
from ..text_cleaning import compact_tag, strip_think_tags, text_after_last_think_close, unique_in_order
from .prompts import (
    COMPOUND_QUALITY_CHECKS,
    FALLBACK_TERMS_PROMPT,
    SEARCH_QUALITY_PROMPT,
    SIMPLE_QUALITY_CHECKS,
    SUFFICIENCY_PROMPT,
)

logger = logging.getLogger(__name__)

_COMPOUND_SEPARATOR = re.compile(r"[_\s]+")
_TERM_SPLIT = re.compile(r"[,\n]")
_TERM_JUNK = re.compile(r"['\"()\[\]*]")
_TERM_BULLET = re.compile(r"^(?:[-+•]|\d+[.)])\s*")


def split_compound(tag: str) -> Optional[Tuple[str, str]]:
    """First and last component of a compound tag, or None for simple tags."""
    parts = [part for part in _COMPOUND_SEPARATOR.split(tag.strip()) if part]
    if len(parts) < 2:
        return None
    return parts[0], parts[-1]


def represents_component(candidate: str, component: str) -> bool:
    component = component.lower()
    return component in candidate.lower() or component in compact_tag(candidate)


def components_covered(tag: str, candidates: List[str]) -> bool:
    """Whether every half of a compound tag appears among the candidates."""
    halves = split_compound(tag)
    if halves is None:
        return True
    return all(
        any(represents_component(candidate, half) for candidate in candidates)
        for half in halves
    )


def parse_yes_no(answer: str) -> bool:
    """True only when the answer's first word is YES."""
    cleaned = strip_think_tags(text_after_last_think_close(answer or ""))
    words = re.findall(r"[A-Za-z]+", cleaned.upper())
    return bool(words) and words[0] == "YES"


class SearchQualityEvaluator:
    """Oracle-backed judgements used by the candidate resolver."""

    def __init__(
        self,
        session: OracleSession,
        context: Optional[GenerationContext] = None,
        min_candidates_for_sufficiency: int = 2,
        max_fallback_terms: int = 5,
    ):
        self._session = session
        self._context = context or GenerationContext()
        self.min_candidates_for_sufficiency = min_candidates_for_sufficiency
        self.max_fallback_terms = max_fallback_terms

    async def evaluate_results(self, original_tag: str, candidates: List[str]) -> bool:
        """
        Ask whether search results adequately represent the tag.

        Oracle failure counts as inadequate so the fallback search runs.
        """
        if not candidates:
            return False

        halves = split_compound(original_tag)
        if halves is not None and not components_covered(original_tag, candidates):
            logger.info(f'Compound tag "{original_tag}" has a component missing from results')
            return False

        if halves is not None:
            tag_checks = COMPOUND_QUALITY_CHECKS.format(
                original_tag=original_tag, first=halves[0], second=halves[1]
            )
        else:
            tag_checks = SIMPLE_QUALITY_CHECKS.format(original_tag=original_tag)

        prompt = SEARCH_QUALITY_PROMPT.format(
            original_tag=original_tag,
            candidates=", ".join(candidates),
            context_tags=self._context.other_tags(original_tag),
            tag_checks=tag_checks,
        )

        try:
            answer = await self._session.ask(f"evaluation_{original_tag}", prompt)
        except Exception as exc:
            logger.warning(f"Failed to evaluate search results for '{original_tag}': {exc}")
            return False

        adequate = parse_yes_no(answer)
        logger.info(
            f'Oracle evaluation for "{original_tag}" with [{", ".join(candidates)}]: '
            f'{"YES" if adequate else "NO"}'
        )
        return adequate

    async def generate_fallback_terms(self, original_tag: str) -> List[str]:
        """
        Ask for simpler search terms in the tag's semantic category.

        :return: At most ``max_fallback_terms`` terms, never the tag itself; empty on failure
        """
        prompt = FALLBACK_TERMS_PROMPT.format(
            original_tag=original_tag,
            # Only a few neighbouring tags, so the terms stay in the tag's category
            context_tags=self._context.other_tags(original_tag, limit=3),
        )

        try:
            answer = await self._session.ask(f"fallback_{original_tag}", prompt)
        except Exception as exc:
            logger.warning(f"Failed to generate fallback terms for '{original_tag}': {exc}")
            return []

        cleaned = strip_think_tags(text_after_last_think_close(answer))
        terms = []
        for raw_term in _TERM_SPLIT.split(cleaned):
            term = _TERM_JUNK.sub("", _TERM_BULLET.sub("", raw_term.strip())).strip()
            if term and term.lower() != original_tag.lower():
                terms.append(term)

        terms = unique_in_order(terms)[: self.max_fallback_terms]
        logger.info(f'Generated fallback terms for "{original_tag}": {terms}')
        return terms

    async def evaluate_sufficiency(self, original_tag: str, candidates: List[str]) -> bool:
        """
        Ask whether accumulated fallback candidates cover every component.

        A compound tag with a missing half is insufficient without asking.
        If the oracle is unreachable, enough candidates count as sufficient
        so the fallback loop still terminates early.
        """
        halves = split_compound(original_tag)
        if halves is not None and not components_covered(original_tag, candidates):
            return False

        if halves is not None:
            required_components = (
                f'- Component 1: "{halves[0]}" or contextually similar (REQUIRED)\n'
                f'- Component 2: "{halves[1]}" or contextually similar (REQUIRED)'
            )
        else:
            required_components = "- Any candidates that closely match the original meaning"

        prompt = SUFFICIENCY_PROMPT.format(
            original_tag=original_tag,
            candidates=", ".join(candidates),
            context_tags=self._context.other_tags(original_tag),
            required_components=required_components,
        )

        try:
            answer = await self._session.ask(f"sufficiency_{original_tag}", prompt)
        except Exception as exc:
            logger.warning(f"Failed to evaluate sufficiency for '{original_tag}': {exc}")
            return len(candidates) >= self.min_candidates_for_sufficiency

        sufficient = parse_yes_no(answer)
        logger.info(
            f'Oracle sufficiency evaluation for "{original_tag}": {"YES" if sufficient else "NO"}'
        )
        return sufficient
