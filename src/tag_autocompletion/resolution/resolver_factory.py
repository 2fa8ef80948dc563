"""
Factory for the per-run resolution components.
"""
from typing import Optional

from ..config import TagAutocompletionConfig
from ..context.generation_context import GenerationContext
from ..oracle import OracleSession
from ..search.tag_search_client import TagSearchClient
from .candidate_resolver import CandidateResolver
from .exact_matcher import ExactCandidateMatcher
from .fuzzy_matcher import FuzzyCandidateMatcher
from .resolution_policy import ResolutionPolicy
from .search_evaluator import SearchQualityEvaluator
from .selector import TagSelector
from .validator import TagValidator


def create_suggestion_policy(threshold: float = 0.9) -> ResolutionPolicy:
    """
    Exact-then-fuzzy policy that snaps validator suggestions onto candidates.

    :param threshold: Minimum fuzzy score for a suggestion to be accepted
    """
    return ResolutionPolicy(
        matchers=[
            ExactCandidateMatcher(),
            FuzzyCandidateMatcher(threshold=threshold),
        ],
        confidence_threshold=threshold,
    )


def create_resolver(
    config: TagAutocompletionConfig,
    session: OracleSession,
    search_client: TagSearchClient,
    context: Optional[GenerationContext] = None,
) -> CandidateResolver:
    evaluator = SearchQualityEvaluator(
        session,
        context=context,
        min_candidates_for_sufficiency=config.sufficiency_min_candidates,
        max_fallback_terms=config.max_fallback_terms,
    )
    return CandidateResolver(search_client, evaluator)


def create_selector(
    config: TagAutocompletionConfig,
    session: OracleSession,
    context: Optional[GenerationContext] = None,
) -> TagSelector:
    return TagSelector(
        session,
        context or GenerationContext(),
        TagValidator(session),
        create_suggestion_policy(config.suggestion_match_threshold),
    )
