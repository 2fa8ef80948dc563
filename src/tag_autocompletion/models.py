import logging
import re
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional, Union


class GenerationMode(IntEnum):
    """Narrative viewpoint of an image generation request (host numbering)."""
    CHARACTER = 0
    USER = 1
    SCENARIO = 2
    RAW_LAST = 3
    NOW = 4
    FACE = 5
    FREE = 6
    BACKGROUND = 7
    CHARACTER_MULTIMODAL = 8
    USER_MULTIMODAL = 9
    FACE_MULTIMODAL = 10
    FREE_EXTENDED = 11

    @classmethod
    def coerce(cls, value: Union["GenerationMode", int, None]) -> Optional["GenerationMode"]:
        """Map a host value onto a mode; unknown values become None."""
        if value is None:
            return None
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return None


class TagClassification(str, Enum):
    METADATA = "metadata"
    PARAMETER = "parameter"
    MIXED = "mixed"
    REGULAR = "regular"


_MIXED_TAG_PATTERN = re.compile(r"(\[.*?\])\s*(.+)")


@dataclass(frozen=True)
class Tag:
    """
    One comma-separated label from the input prompt.

    Attributes:
        raw: The label as it appeared in the prompt (trimmed)
        classification: How the pipeline treats the label
        metadata_prefix: Bracketed annotation of a mixed tag (e.g. "[ASPECT:square]")
        embedded_tag: Regular tag carried by a mixed tag (e.g. "padded_room")
    """
    raw: str
    classification: TagClassification
    metadata_prefix: Optional[str] = None
    embedded_tag: Optional[str] = None

    @classmethod
    def parse(cls, raw: str) -> "Tag":
        """Classify a raw label."""
        text = raw.strip()

        if text.startswith("[") and text.endswith("]"):
            return cls(text, TagClassification.METADATA)

        if "[" in text and "]" in text:
            match = _MIXED_TAG_PATTERN.search(text)
            if match:
                return cls(
                    text,
                    TagClassification.MIXED,
                    metadata_prefix=match.group(1),
                    embedded_tag=match.group(2).strip(),
                )

        if ":" in text and "(" in text:
            return cls(text, TagClassification.PARAMETER)

        return cls(text, TagClassification.REGULAR)

    @property
    def passes_through(self) -> bool:
        return self.classification in (TagClassification.METADATA, TagClassification.PARAMETER)

    @property
    def search_text(self) -> str:
        """The part of the label that gets resolved against the vocabulary."""
        if self.classification == TagClassification.MIXED:
            return self.embedded_tag
        return self.raw

    def recombine(self, selection: str) -> str:
        """Re-attach the metadata prefix of a mixed tag to its resolved value."""
        if self.classification == TagClassification.MIXED:
            return f"{self.metadata_prefix} {selection}"
        return selection


@dataclass
class CandidateSet:
    """Ordered vocabulary candidates found for one query."""
    query: str
    candidates: List[str] = field(default_factory=list)
    fallback_terms: Optional[List[str]] = None

    @property
    def has_candidates(self) -> bool:
        return len(self.candidates) > 0


@dataclass(frozen=True)
class ProcessingStrategy:
    candidate_limit: int
    strategy: str


_STRATEGIES = {
    GenerationMode.NOW: ProcessingStrategy(10, "fast"),
    GenerationMode.RAW_LAST: ProcessingStrategy(10, "fast"),
    GenerationMode.CHARACTER: ProcessingStrategy(20, "comprehensive"),
    GenerationMode.FACE: ProcessingStrategy(20, "comprehensive"),
    GenerationMode.USER: ProcessingStrategy(20, "comprehensive"),
    GenerationMode.CHARACTER_MULTIMODAL: ProcessingStrategy(20, "comprehensive"),
    GenerationMode.USER_MULTIMODAL: ProcessingStrategy(20, "comprehensive"),
    GenerationMode.FACE_MULTIMODAL: ProcessingStrategy(20, "comprehensive"),
    GenerationMode.SCENARIO: ProcessingStrategy(15, "balanced"),
    GenerationMode.BACKGROUND: ProcessingStrategy(12, "environmental"),
    GenerationMode.FREE: ProcessingStrategy(20, "free"),
    GenerationMode.FREE_EXTENDED: ProcessingStrategy(20, "free"),
}

_DEFAULT_STRATEGY = ProcessingStrategy(15, "default")


def get_processing_strategy(
    mode: Optional[GenerationMode],
    candidate_ceiling: Optional[int] = None,
) -> ProcessingStrategy:
    """
    Pick the candidate limit for a generation mode.

    Modes with rich character context search wider than last-message modes.

    :param mode: Generation mode (None for unknown host values)
    :param candidate_ceiling: Optional configured per-request maximum
    """
    strategy = _STRATEGIES.get(mode, _DEFAULT_STRATEGY)
    if candidate_ceiling is not None and strategy.candidate_limit > candidate_ceiling:
        return ProcessingStrategy(candidate_ceiling, strategy.strategy)
    return strategy


@dataclass
class ValidationResult:
    is_valid: bool
    reason: str
    suggestion: Optional[str] = None


@dataclass
class BatchStats:
    """Counters for one resolution run. Observability only."""
    total: int = 0
    processed: int = 0
    successful_corrections: int = 0
    search_failures: int = 0
    selection_failures: int = 0
    skipped: int = 0

    def _rate(self, count: int) -> int:
        if self.total == 0:
            return 0
        return round(count / self.total * 100)

    @property
    def progress_percent(self) -> int:
        return self._rate(self.processed)

    def log_summary(self, logger: logging.Logger) -> None:
        logger.info("===== PROCESSING SUMMARY =====")
        logger.info(f"Total tags: {self.total}")
        logger.info(f"Processed: {self.processed}")
        logger.info(
            f"Successful corrections: {self.successful_corrections} "
            f"({self._rate(self.successful_corrections)}%)"
        )
        logger.info(f"Search failures: {self.search_failures} ({self._rate(self.search_failures)}%)")
        logger.info(
            f"Selection failures: {self.selection_failures} "
            f"({self._rate(self.selection_failures)}%)"
        )
        logger.info(f"Skipped tags: {self.skipped}")
