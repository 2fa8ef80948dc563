"""
Candidate search with oracle-guided fallback expansion.
"""
import asyncio
import logging
import math
from itertools import zip_longest
from typing import List

from ..models import CandidateSet
from ..search.tag_search_client import TagSearchClient
from ..text_cleaning import compact_tag, unique_in_order
from .search_evaluator import SearchQualityEvaluator, represents_component, split_compound

logger = logging.getLogger(__name__)


class CandidateResolver:
    """
    Finds vocabulary candidates for one tag.

    Usage:
        resolver = CandidateResolver(search_client, evaluator)
        candidate_set = await resolver.resolve("padded_room", limit=15)

    Search escalation:
    1. Direct search; an exact (normalized) hit is returned alone
    2. Oracle judges the results; adequate results are returned as-is
    3. Oracle proposes fallback terms, each searched once, until the
       accumulated candidates are judged sufficient
    4. Compound tags keep candidates for both halves

    Never raises: failures produce an empty set or the direct-search result.
    """

    def __init__(self, search_client: TagSearchClient, evaluator: SearchQualityEvaluator):
        self._search = search_client
        self._evaluator = evaluator

    async def resolve(self, tag: str, limit: int) -> CandidateSet:
        try:
            return await self._resolve(tag, limit)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(f"Candidate resolution failed for '{tag}': {exc}")
            return CandidateSet(query=tag, candidates=[])

    async def _resolve(self, tag: str, limit: int) -> CandidateSet:
        initial = CandidateSet(query=tag, candidates=await self._search.search(tag, limit))

        exact_match = self._find_exact_match(tag, initial.candidates)
        if exact_match is not None:
            logger.info(f'Found exact match for "{tag}" - returning only "{exact_match}"')
            return CandidateSet(query=tag, candidates=[exact_match])

        if await self._evaluator.evaluate_results(tag, initial.candidates):
            logger.info(f'Results are GOOD for "{tag}" - using original results')
            return initial

        logger.info(f'Results are POOR for "{tag}" - generating fallback terms')
        fallback_terms = await self._evaluator.generate_fallback_terms(tag)

        accumulated: List[str] = []
        for term in fallback_terms:
            logger.debug(f'Trying fallback term "{term}"')
            found = await self._search.search(term, limit)
            if not found:
                continue

            logger.debug(f'Found {len(found)} candidates with fallback term "{term}": {found}')
            accumulated.extend(found)

            if len(accumulated) >= self._evaluator.min_candidates_for_sufficiency:
                if await self._evaluator.evaluate_sufficiency(tag, unique_in_order(accumulated)):
                    logger.info(f'Fallback candidates are sufficient for "{tag}" - stopping search')
                    break

        if not accumulated:
            return initial

        candidates = self._arrange(tag, unique_in_order(accumulated), limit)
        logger.info(f'Using {len(candidates)} fallback candidates for "{tag}": {candidates}')
        return CandidateSet(query=tag, candidates=candidates, fallback_terms=fallback_terms)

    @staticmethod
    def _find_exact_match(tag: str, candidates: List[str]):
        normalized_tag = compact_tag(tag)
        for candidate in candidates:
            if compact_tag(candidate) == normalized_tag:
                return candidate
        return None

    @staticmethod
    def _arrange(tag: str, candidates: List[str], limit: int) -> List[str]:
        """
        Order fallback candidates so both halves of a compound tag survive truncation.
        """
        halves = split_compound(tag)
        if halves is None:
            return candidates[:limit]

        share = math.ceil(limit / 2)
        first_matches = [c for c in candidates if represents_component(c, halves[0])]
        second_matches = [c for c in candidates if represents_component(c, halves[1])]

        interleaved = []
        for pair in zip_longest(first_matches[:share], second_matches[:share]):
            interleaved.extend(c for c in pair if c is not None)

        prioritized = unique_in_order(interleaved)
        remaining = [c for c in candidates if c not in prioritized]
        return (prioritized + remaining)[:limit]
