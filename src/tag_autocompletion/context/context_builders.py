"""
Mode-specific context for the tag selection prompt.

Each GenerationMode maps to one builder. A builder returns the context block
injected into the shared selection template, or None when the context the
mode depends on is missing (the selector then keeps the top-ranked candidate).
"""
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..models import GenerationMode
from .generation_context import GenerationContext


@dataclass(frozen=True)
class SelectionContext:
    label: str
    context_block: str = ""
    visual_focus: bool = True


ContextBuilder = Callable[[GenerationContext, str], Optional[SelectionContext]]


def character_context(context: GenerationContext, original_tag: str) -> Optional[SelectionContext]:
    character = context.character
    if character is None:
        return None

    lines = [f"CHARACTER: {character.name}"]
    if character.description:
        lines.append(f"DESCRIPTION: {character.description}")
    if character.personality:
        lines.append(f"PERSONALITY: {character.personality}")
    return SelectionContext("character", "\n".join(lines))


def user_context(context: GenerationContext, original_tag: str) -> Optional[SelectionContext]:
    return SelectionContext("user", f"SUBJECT: the user persona {context.user_name or 'User'}")


def last_message_context(context: GenerationContext, original_tag: str) -> Optional[SelectionContext]:
    last_message = context.last_message
    if last_message is None or not last_message.text:
        return None

    lines = [f"LAST MESSAGE: {last_message.name}: {last_message.text}"]
    other_tags = context.other_tags(original_tag)
    if other_tags:
        lines.append(f"CONTEXT: {other_tags}")
    return SelectionContext("lastmsg", "\n".join(lines))


def scenario_context(context: GenerationContext, original_tag: str) -> Optional[SelectionContext]:
    recent = context.recent_messages(5)
    if not recent:
        return None

    conversation = "\n".join(f"{message.name}: {message.text}" for message in recent)
    return SelectionContext("scenario", f"RECENT CONVERSATION:\n{conversation}")


def background_context(context: GenerationContext, original_tag: str) -> Optional[SelectionContext]:
    character = context.character
    if character is not None and character.scenario:
        return SelectionContext("background", f"ENVIRONMENT: {character.scenario}")
    return SelectionContext("background")


def generic_context(context: GenerationContext, original_tag: str) -> Optional[SelectionContext]:
    return SelectionContext("generic", visual_focus=False)


CONTEXT_BUILDERS: Dict[GenerationMode, ContextBuilder] = {
    GenerationMode.CHARACTER: character_context,
    GenerationMode.FACE: character_context,
    GenerationMode.CHARACTER_MULTIMODAL: character_context,
    GenerationMode.FACE_MULTIMODAL: character_context,
    GenerationMode.USER: user_context,
    GenerationMode.USER_MULTIMODAL: user_context,
    GenerationMode.NOW: last_message_context,
    GenerationMode.RAW_LAST: last_message_context,
    GenerationMode.SCENARIO: scenario_context,
    GenerationMode.BACKGROUND: background_context,
    GenerationMode.FREE: generic_context,
    GenerationMode.FREE_EXTENDED: generic_context,
}


def get_context_builder(mode: Optional[GenerationMode]) -> ContextBuilder:
    return CONTEXT_BUILDERS.get(mode, generic_context)
