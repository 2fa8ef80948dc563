"""
Fuzzy matching strategy using rapidfuzz.

Handles near-misses in oracle suggestions ("padded wall" -> "padded walls").
"""
import logging
from typing import List

from rapidfuzz import fuzz, process

from .semantic_resolver import CandidateMatcher, MatchResult

logger = logging.getLogger(__name__)


class FuzzyCandidateMatcher(CandidateMatcher):
    """
    Fuzzy match strategy using rapidfuzz's process.extractOne.

    The default threshold is high: a suggestion snapped to the wrong
    candidate is worse than no suggestion.
    """

    def __init__(
        self,
        threshold: float = 0.9,
        scorer: str = "token_sort_ratio",
    ):
        """
        :param threshold: Minimum score to accept a match (0.0-1.0)
        :param scorer: rapidfuzz scorer ("ratio", "partial_ratio", "token_sort_ratio", "token_set_ratio")
        """
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"Threshold must be between 0.0 and 1.0, got {threshold}")

        self.threshold = threshold
        self.scorer = scorer

        self._scorer_map = {
            "ratio": fuzz.ratio,
            "partial_ratio": fuzz.partial_ratio,
            "token_sort_ratio": fuzz.token_sort_ratio,
            "token_set_ratio": fuzz.token_set_ratio,
        }

        if scorer not in self._scorer_map:
            raise ValueError(
                f"Unknown scorer '{scorer}'. "
                f"Must be one of: {list(self._scorer_map.keys())}"
            )

    def match(
        self,
        query: str,
        candidates: List[str],
    ) -> MatchResult:
        if not candidates or not query.strip():
            return MatchResult(
                matched_value=None,
                confidence=0.0,
                strategy_used="fuzzy",
                original_query=query,
            )

        # Underscores and spaces are interchangeable in tag vocabularies
        choices = {candidate: candidate.replace("_", " ").lower() for candidate in candidates}
        result = process.extractOne(
            query.replace("_", " ").lower(),
            choices,
            scorer=self._scorer_map[self.scorer],
        )

        if result:
            _, score, matched_value = result
            confidence = score / 100.0
            logger.debug(f"Fuzzy match for '{query}': '{matched_value}' ({confidence:.2f})")

            if confidence >= self.threshold:
                return MatchResult(
                    matched_value=matched_value,
                    confidence=confidence,
                    strategy_used="fuzzy",
                    original_query=query,
                )

        return MatchResult(
            matched_value=None,
            confidence=0.0,
            strategy_used="fuzzy",
            original_query=query,
        )
