from dataclasses import dataclass
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from .models import GenerationMode


@dataclass
class PromptProcessingEvent:
    """Image prompt handed over by the host before generation starts."""
    prompt: Optional[str]
    generation_type: Union[GenerationMode, int, None] = None


@dataclass
class ConnectionCheckResult:
    ok: bool
    message: str
    candidate_count: int = 0


class SearchTagRequest(BaseModel):
    query: str = Field(description="Tag text to look up in the vocabulary")
    limit: int = Field(default=5, ge=1, description="Maximum number of candidates")


class SearchTagResponse(BaseModel):
    candidates: List[str] = Field(default_factory=list)
