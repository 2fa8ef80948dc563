"""
Exact matching strategy, insensitive to case, underscores and punctuation.
"""
from typing import List

from ..text_cleaning import normalize_tag
from .semantic_resolver import CandidateMatcher, MatchResult


class ExactCandidateMatcher(CandidateMatcher):
    """
    Exact match after normalization ("padded_walls" == "Padded Walls").

    Fast, deterministic. Used as first strategy in escalation.
    """

    def match(
        self,
        query: str,
        candidates: List[str],
    ) -> MatchResult:
        query_normalized = normalize_tag(query)

        if query_normalized:
            for candidate in candidates:
                if normalize_tag(candidate) == query_normalized:
                    return MatchResult(
                        matched_value=candidate,
                        confidence=1.0,
                        strategy_used="exact",
                        original_query=query,
                    )

        return MatchResult(
            matched_value=None,
            confidence=0.0,
            strategy_used="exact",
            original_query=query,
        )
