"""
Configuration validation utilities.

Environment lookups with placeholder detection and readable error messages.
"""
import os
import warnings
from typing import Optional
from urllib.parse import urlparse

from .exceptions import ConfigurationError


def get_required_env(key: str, description: str = None) -> str:
    """
    Get required environment variable with validation.

    :param key: Environment variable name
    :param description: Human-readable description for error messages
    :return: Environment variable value
    :raises: ConfigurationError if not set or invalid
    """
    value = os.getenv(key)

    if not value:
        desc = description or key
        raise ConfigurationError(
            f"{key} is required but not set.\n"
            f"Please set it using one of these methods:\n"
            f"  1. Environment variable: export {key}='your-value'\n"
            f"  2. .env file: Create .env in project root with {key}=your-value\n\n"
            f"Description: {desc}"
        )

    if _is_placeholder(value):
        raise ConfigurationError(
            f"{key} appears to be a placeholder value.\n"
            f"Please set a real value. Current value: {_mask_secret(value)}"
        )

    return value


def get_optional_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """
    Get optional environment variable.

    :param key: Environment variable name
    :param default: Default value if not set
    :return: Environment variable value or default
    """
    value = os.getenv(key, default)

    if value and _is_placeholder(value):
        # Warn but don't fail for optional configs
        warnings.warn(
            f"{key} appears to be a placeholder. Using default or None.",
            UserWarning
        )
        return default

    return value


def get_bool_env(key: str, default: bool = False) -> bool:
    """Read a true/false environment flag."""
    value = get_optional_env(key, "true" if default else "false")
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def get_number_env(key: str, default: float, cast=float):
    """
    Read a numeric environment variable.

    :raises: ConfigurationError if the value cannot be parsed
    """
    raw = get_optional_env(key)
    if raw is None or raw == "":
        return cast(default)
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got '{raw}'")


def validate_url(url: str, url_name: str) -> str:
    """
    Validate an HTTP(S) endpoint URL.

    :param url: URL to validate
    :param url_name: Name of the setting (for error messages)
    :return: URL without a trailing slash
    :raises: ConfigurationError if invalid
    """
    if not url:
        raise ConfigurationError(f"{url_name} is required.")

    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(
            f"{url_name} must be an http(s) URL, got '{url}'.\n"
            f"Example: http://localhost:8000"
        )

    return url.strip().rstrip("/")


def _is_placeholder(value: str) -> bool:
    """Check if value is a placeholder."""
    if not value:
        return False

    placeholder_patterns = [
        "your_",
        "placeholder",
        "xxx",
        "sk-0000",
        "gsk_0000",
        "replace",
        "TODO",
    ]

    value_lower = value.lower()
    return any(pattern.lower() in value_lower for pattern in placeholder_patterns)


def _mask_secret(secret: str, show_chars: int = 4) -> str:
    """
    Mask secret for safe display in error messages.

    :param secret: Secret to mask
    :param show_chars: Number of characters to show at start/end
    :return: Masked secret
    """
    if not secret or len(secret) <= show_chars * 2:
        return "***"

    return f"{secret[:show_chars]}...{secret[-show_chars:]}"
