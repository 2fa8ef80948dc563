"""
Tag resolution layer: candidate search, selection and validation.

Key components:
- CandidateResolver: search with oracle-guided fallback expansion
- SearchQualityEvaluator: adequacy, fallback term and sufficiency checks
- TagSelector: context-aware choice of one candidate
- ResponseParser: maps oracle answers onto the candidate list
- TagValidator: heuristic and oracle checks for category drift
- Matchers: Exact and Fuzzy strategies behind a ResolutionPolicy
"""
from .semantic_resolver import CandidateMatcher, MatchResult
from .exact_matcher import ExactCandidateMatcher
from .fuzzy_matcher import FuzzyCandidateMatcher
from .resolution_policy import ResolutionPolicy
from .search_evaluator import SearchQualityEvaluator, split_compound
from .candidate_resolver import CandidateResolver
from .response_parser import ResponseParser
from .validator import TagValidator
from .selector import TagSelector
from .resolver_factory import create_resolver, create_selector, create_suggestion_policy

__all__ = [
    "CandidateMatcher",
    "MatchResult",
    "ExactCandidateMatcher",
    "FuzzyCandidateMatcher",
    "ResolutionPolicy",
    "SearchQualityEvaluator",
    "split_compound",
    "CandidateResolver",
    "ResponseParser",
    "TagValidator",
    "TagSelector",
    "create_resolver",
    "create_selector",
    "create_suggestion_policy",
]
