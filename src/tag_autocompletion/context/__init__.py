"""
Host context made available to the oracle prompts.
"""
from .generation_context import CharacterCard, ChatMessage, GenerationContext
from .context_builders import (
    CONTEXT_BUILDERS,
    SelectionContext,
    get_context_builder,
)

__all__ = [
    "CharacterCard",
    "ChatMessage",
    "GenerationContext",
    "CONTEXT_BUILDERS",
    "SelectionContext",
    "get_context_builder",
]
