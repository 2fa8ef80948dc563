"""
Semantic validation of a selected tag.

Catches category drift such as "bright_lighting" -> "lighting cigarette"
before it reaches the final prompt.
"""
import logging
import re
from typing import List, Optional

from ..models import ValidationResult
from ..oracle import OracleSession
from ..text_cleaning import strip_think_tags, text_after_last_think_close
from .prompts import VALIDATION_PROMPT

logger = logging.getLogger(__name__)

# (original tag words, forbidden words in the selection, reason)
HEURISTIC_RULES = [
    (("lighting", "light"), ("cigarette", "smoke"), "Lighting concept changed to smoking"),
    (("nipple", "breast"), ("hair", "shirt", "dress"), "Body part changed to hair or clothing"),
]

_INVALID_ANSWER = re.compile(r"INVALID:\s*(.+)", re.IGNORECASE)
_SUGGESTION_JUNK = re.compile(r"[\[\]\"'`]")


class TagValidator:
    """Heuristic rules first, then an oracle yes/no check."""

    def __init__(self, session: OracleSession):
        self._session = session

    async def validate(
        self,
        original_tag: str,
        selected_tag: str,
        candidates: List[str],
    ) -> ValidationResult:
        """
        Check a selection for semantic drift.

        An unclear or failed oracle answer accepts the selection.

        :return: ValidationResult; invalid results may carry a suggestion
        """
        if original_tag == selected_tag:
            return ValidationResult(True, "Exact match")
        if len(selected_tag) <= 3:
            return ValidationResult(True, "Short tag")
        if len(candidates) <= 1:
            return ValidationResult(True, "Single candidate")

        heuristic = self.check_heuristics(original_tag, selected_tag)
        if heuristic is not None:
            logger.info(f'Heuristic rejected "{selected_tag}" for "{original_tag}": {heuristic.reason}')
            return heuristic

        prompt = VALIDATION_PROMPT.format(
            original_tag=original_tag,
            selected_tag=selected_tag,
            candidates=", ".join(candidates),
        )

        try:
            answer = await self._session.ask(f"validate_{original_tag}", prompt)
        except Exception as exc:
            logger.warning(f"Validation failed for '{original_tag}': {exc}")
            return ValidationResult(True, "Validation unavailable")

        return self.parse_answer(answer)

    @staticmethod
    def check_heuristics(original_tag: str, selected_tag: str) -> Optional[ValidationResult]:
        original_lower = original_tag.lower()
        selected_lower = selected_tag.lower()

        for original_words, forbidden_words, reason in HEURISTIC_RULES:
            if any(word in original_lower for word in original_words) and any(
                word in selected_lower for word in forbidden_words
            ):
                return ValidationResult(False, reason)
        return None

    @staticmethod
    def parse_answer(answer: str) -> ValidationResult:
        cleaned = strip_think_tags(text_after_last_think_close(answer or "")).strip()
        upper = cleaned.upper()

        if upper.startswith("INVALID"):
            match = _INVALID_ANSWER.search(cleaned)
            suggestion = None
            if match:
                suggestion = _SUGGESTION_JUNK.sub("", match.group(1).splitlines()[0]).strip() or None
            return ValidationResult(False, "Oracle rejected selection", suggestion)

        if upper.startswith("VALID"):
            return ValidationResult(True, "Oracle accepted selection")

        logger.debug(f"Unclear validation answer {cleaned[:100]!r}, accepting selection")
        return ValidationResult(True, "Unclear validation answer")
