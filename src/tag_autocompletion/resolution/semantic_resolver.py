"""
Core abstractions for snapping free text onto a candidate list.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class MatchResult:
    """
    Immutable result of matching free text against candidates.

    Attributes:
        matched_value: The candidate the text was matched to (None if no match)
        confidence: Confidence score between 0.0 and 1.0
        strategy_used: Name of the matching strategy used ("exact", "fuzzy")
        original_query: The text that was matched
    """
    matched_value: Optional[str]
    confidence: float
    strategy_used: str
    original_query: str

    def is_confident(self, threshold: float = 0.9) -> bool:
        """Check if match confidence meets threshold."""
        return self.matched_value is not None and self.confidence >= threshold

    def __post_init__(self):
        """Validate confidence score."""
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be between 0.0 and 1.0, got {self.confidence}")


class CandidateMatcher(ABC):
    """Strategy mapping a free-text tag onto one of the given candidates."""

    @abstractmethod
    def match(
        self,
        query: str,
        candidates: List[str],
    ) -> MatchResult:
        """
        Match a query against candidate tags.

        :param query: Free text, e.g. an oracle suggestion
        :param candidates: Candidate vocabulary tags
        :return: MatchResult with the matched candidate and confidence
        """
        pass
