"""
Configuration loader with validation.

Builds TagAutocompletionConfig from TAG_AUTOCOMPLETE_* environment variables.
"""
from dotenv import load_dotenv

from .config import TagAutocompletionConfig
from .config_validator import get_bool_env, get_number_env, get_optional_env, validate_url


def load_config_from_env(load_env_file: bool = True) -> TagAutocompletionConfig:
    """
    Load configuration from environment variables with validation.

    Usage:
        config = load_config_from_env()
        app = TagAutocompletionApp(config, profile_switch)
        app.initialize()

    :param load_env_file: Whether to read a local .env file first
    :return: Validated TagAutocompletionConfig instance
    :raises: ConfigurationError if values are missing or invalid
    """
    if load_env_file:
        # Load .env file if it exists (for local development)
        load_dotenv()

    api_endpoint = validate_url(
        get_optional_env("TAG_AUTOCOMPLETE_API_ENDPOINT", default="http://localhost:8000"),
        "TAG_AUTOCOMPLETE_API_ENDPOINT",
    )

    # Timeout is configured in milliseconds, like the host settings panel
    timeout_ms = get_number_env("TAG_AUTOCOMPLETE_TIMEOUT_MS", 30000, cast=int)

    return TagAutocompletionConfig(
        enabled=get_bool_env("TAG_AUTOCOMPLETE_ENABLED", default=False),
        api_endpoint=api_endpoint,
        timeout=timeout_ms / 1000.0,
        candidate_limit=get_number_env("TAG_AUTOCOMPLETE_CANDIDATE_LIMIT", 20, cast=int),
        llm_provider=get_optional_env("TAG_AUTOCOMPLETE_LLM_PROVIDER", default="groq"),
        llm_model=get_optional_env("TAG_AUTOCOMPLETE_LLM_MODEL", default="llama-3.1-8b-instant"),
        profile_name=get_optional_env("TAG_AUTOCOMPLETE_PROFILE", default="tag_autocompletion"),
        batch_size=get_number_env("TAG_AUTOCOMPLETE_BATCH_SIZE", 8, cast=int),
        search_phase_timeout=get_number_env("TAG_AUTOCOMPLETE_SEARCH_PHASE_TIMEOUT", 120.0),
        lease_wait_timeout=get_number_env("TAG_AUTOCOMPLETE_LEASE_WAIT_TIMEOUT", 5.0),
        drain_timeout=get_number_env("TAG_AUTOCOMPLETE_DRAIN_TIMEOUT", 10.0),
        sufficiency_min_candidates=get_number_env(
            "TAG_AUTOCOMPLETE_SUFFICIENCY_MIN_CANDIDATES", 2, cast=int
        ),
        debug=get_bool_env("TAG_AUTOCOMPLETE_DEBUG", default=False),
    )
