"""
Resolution policy for matcher escalation: exact -> fuzzy.
"""
from typing import List, Optional

from .semantic_resolver import CandidateMatcher, MatchResult


class ResolutionPolicy:
    """
    Tries matchers in order until one returns a confident result.

    Used to map validator suggestions back onto the candidate list, so a
    suggestion is only ever used when it names an actual candidate.
    """

    def __init__(
        self,
        matchers: List[CandidateMatcher],
        confidence_threshold: float = 0.9,
    ):
        """
        :param matchers: Matchers to try in order (e.g. [ExactCandidateMatcher, FuzzyCandidateMatcher])
        :param confidence_threshold: Minimum confidence to accept a match
        """
        if not matchers:
            raise ValueError("At least one matcher must be provided")

        self._matchers = matchers
        self.confidence_threshold = confidence_threshold

    def resolve(
        self,
        query: str,
        candidates: List[str],
    ) -> MatchResult:
        """
        Match query by trying matchers in order.

        :return: First confident MatchResult, else the best one seen (possibly empty)
        """
        best_result: Optional[MatchResult] = None

        for matcher in self._matchers:
            result = matcher.match(query, candidates)

            if result.is_confident(self.confidence_threshold):
                return result

            if best_result is None or result.confidence > best_result.confidence:
                best_result = result

        if best_result:
            return best_result

        return MatchResult(
            matched_value=None,
            confidence=0.0,
            strategy_used="none",
            original_query=query,
        )

    def snap(self, query: Optional[str], candidates: List[str]) -> Optional[str]:
        """Candidate the query confidently names, or None."""
        if not query:
            return None
        result = self.resolve(query, candidates)
        if result.is_confident(self.confidence_threshold):
            return result.matched_value
        return None
