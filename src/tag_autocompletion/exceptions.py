class TagAutocompletionError(Exception):
    """Base exception for the tag autocompletion service."""


class ConfigurationError(TagAutocompletionError):
    """Raised when configuration is missing or invalid."""


class ProfileNotFoundError(ConfigurationError):
    """Raised when the dedicated connection profile does not exist."""


class ProfileSwitchError(TagAutocompletionError):
    """Raised when switching to the dedicated profile could not be verified."""


class OracleError(TagAutocompletionError):
    """Raised when the generative oracle fails to produce an answer."""


class OracleCancelledError(OracleError):
    """Raised when an oracle call was cancelled through its token."""


class AppNotInitializedError(TagAutocompletionError):
    """Raised when the app is used before initialization."""
