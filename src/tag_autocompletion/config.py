from dataclasses import dataclass
from typing import Any, Optional

from .exceptions import ConfigurationError


@dataclass
class TagAutocompletionConfig:
    # Feature switch
    enabled: bool = False

    # Candidate search service
    api_endpoint: str = "http://localhost:8000"
    timeout: float = 30.0
    candidate_limit: int = 20

    # LLM / Oracle
    llm_provider: str = "groq"
    llm_model: str = "llama-3.1-8b-instant"
    llm: Optional[Any] = None
    profile_name: str = "tag_autocompletion"

    # Batch scheduling
    batch_size: int = 8
    search_phase_timeout: float = 120.0
    selection_pause: float = 0.075
    batch_pause: float = 0.1

    # Lease / operation bookkeeping
    lease_wait_timeout: float = 5.0
    lease_poll_interval: float = 0.1
    profile_settle_delay: float = 0.2
    drain_timeout: float = 10.0

    # Fallback search
    sufficiency_min_candidates: int = 2
    max_fallback_terms: int = 5

    # Validator suggestions must snap onto a candidate at least this closely
    suggestion_match_threshold: float = 0.9

    debug: bool = False

    def __post_init__(self):
        """Validate numeric settings."""
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        if self.candidate_limit < 1:
            raise ConfigurationError(
                f"candidate_limit must be at least 1, got {self.candidate_limit}"
            )
        if self.batch_size < 1:
            raise ConfigurationError(f"batch_size must be at least 1, got {self.batch_size}")
        if self.sufficiency_min_candidates < 1:
            raise ConfigurationError(
                "sufficiency_min_candidates must be at least 1, "
                f"got {self.sufficiency_min_candidates}"
            )
        if self.max_fallback_terms < 0:
            raise ConfigurationError(
                f"max_fallback_terms cannot be negative, got {self.max_fallback_terms}"
            )

        if not 0.0 <= self.suggestion_match_threshold <= 1.0:
            raise ConfigurationError(
                "suggestion_match_threshold must be between 0.0 and 1.0, "
                f"got {self.suggestion_match_threshold}"
            )

        for name in (
            "search_phase_timeout",
            "selection_pause",
            "batch_pause",
            "lease_wait_timeout",
            "lease_poll_interval",
            "profile_settle_delay",
            "drain_timeout",
        ):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} cannot be negative, got {getattr(self, name)}")

        if not self.profile_name or not self.profile_name.strip():
            raise ConfigurationError("profile_name is required.")
