"""
Read model of the host chat used to give the oracle context.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from ..text_cleaning import split_tags


@dataclass(frozen=True)
class CharacterCard:
    name: str
    description: str = ""
    personality: str = ""
    scenario: str = ""


@dataclass(frozen=True)
class ChatMessage:
    name: str
    text: str


@dataclass
class GenerationContext:
    """
    Everything the host knows about the generation request.

    Attributes:
        prompt: Full raw prompt; its other tags give the oracle context
        character: Active character card, if any
        user_name: Persona name of the human user
        chat: Chat history, oldest first
    """
    prompt: str = ""
    character: Optional[CharacterCard] = None
    user_name: str = "User"
    chat: List[ChatMessage] = field(default_factory=list)

    @property
    def last_message(self) -> Optional[ChatMessage]:
        if not self.chat:
            return None
        return self.chat[-1]

    def recent_messages(self, count: int = 5) -> List[ChatMessage]:
        return self.chat[-count:]

    def other_tags(self, tag: str, limit: Optional[int] = None) -> str:
        """Prompt tags other than ``tag`` (case-insensitive), comma-joined."""
        others = [t for t in split_tags(self.prompt) if t.lower() != tag.lower()]
        if limit is not None:
            others = others[:limit]
        return ", ".join(others)
