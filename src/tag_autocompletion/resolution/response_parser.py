"""
Maps a free-form oracle answer onto the candidate list.
"""
import logging
import re
from typing import List, Optional

from ..text_cleaning import normalize_tag, strip_think_tags, text_after_last_think_close

logger = logging.getLogger(__name__)

_CODE_BLOCK = re.compile(r"```[\s\S]*?```")
_BULLET = re.compile(r"^\s*[-*+]\s+", re.MULTILINE)
_HEADER = re.compile(r"^#{1,6}\s*", re.MULTILINE)
_WORD_SPLIT = re.compile(r"[_\s-]+")


def _words(text: str) -> List[str]:
    return [word for word in _WORD_SPLIT.split(text.lower()) if word]


def _share_word_prefix(left: str, right: str) -> bool:
    """Whether some word of one string is a prefix of some word of the other."""
    left_words = _words(left)
    right_words = _words(right)
    return any(
        a.startswith(b) or b.startswith(a)
        for a in left_words
        for b in right_words
    )


class ResponseParser:
    """
    Usage:
        parser = ResponseParser()
        tag = parser.parse("I would pick padded walls", ["padded walls", "room"])

    The result is always a member of ``candidates``, or in the comma case a
    comma-joined subset of them. Ambiguity resolves to the top-ranked candidate.
    """

    def parse(self, oracle_text: Optional[str], candidates: List[str]) -> str:
        """
        :param oracle_text: Raw oracle answer
        :param candidates: Ranked candidate tags
        :return: Selected candidate(s)
        :raises ValueError: If candidates is empty
        """
        if not candidates:
            raise ValueError("Cannot parse a selection without candidates")

        text = self._clean(oracle_text or "")
        if not text:
            logger.debug("Empty oracle answer, using first candidate")
            return candidates[0]

        for step in (
            self._match_comma_list,
            self._match_whole_word,
            self._match_normalized,
            self._match_containment,
            self._match_last_line,
            self._match_any_word,
        ):
            selection = step(text, candidates)
            if selection is not None:
                logger.debug(f"Parsed {text!r} as {selection!r} ({step.__name__})")
                return selection

        logger.debug(f"No candidate found in {text!r}, using first candidate")
        return candidates[0]

    @staticmethod
    def _clean(text: str) -> str:
        text = strip_think_tags(text_after_last_think_close(text))
        text = _CODE_BLOCK.sub("", text)
        text = _BULLET.sub("", text)
        text = _HEADER.sub("", text)
        return text.strip()

    @staticmethod
    def _match_comma_list(text: str, candidates: List[str]) -> Optional[str]:
        if "," not in text:
            return None

        by_lower = {candidate.lower(): candidate for candidate in reversed(candidates)}
        matched = []
        for piece in text.split(","):
            candidate = by_lower.get(piece.strip().lower())
            if candidate is not None and candidate not in matched:
                matched.append(candidate)

        if not matched:
            return None
        return ", ".join(matched)

    @staticmethod
    def _match_whole_word(text: str, candidates: List[str]) -> Optional[str]:
        for candidate in candidates:
            if re.search(rf"\b{re.escape(candidate)}\b", text, re.IGNORECASE):
                return candidate
        return None

    @staticmethod
    def _match_normalized(text: str, candidates: List[str]) -> Optional[str]:
        normalized_text = normalize_tag(text)
        if not normalized_text:
            return None
        for candidate in candidates:
            if normalize_tag(candidate) == normalized_text:
                return candidate
        return None

    @staticmethod
    def _match_containment(text: str, candidates: List[str]) -> Optional[str]:
        lower_text = text.lower()
        for candidate in candidates:
            lower_candidate = candidate.lower()
            if lower_candidate in lower_text:
                return candidate
            if (
                len(lower_text) >= 3
                and lower_text in lower_candidate
                and _share_word_prefix(lower_text, lower_candidate)
            ):
                return candidate
        return None

    @staticmethod
    def _match_last_line(text: str, candidates: List[str]) -> Optional[str]:
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        if not lines:
            return None

        last_line = lines[-1]
        line_words = last_line.split()
        probes = [normalize_tag(line_words[-1])] if line_words else []
        probes.append(normalize_tag(last_line))

        for probe in probes:
            if not probe:
                continue
            for candidate in candidates:
                if normalize_tag(candidate) == probe:
                    return candidate
        return None

    @staticmethod
    def _match_any_word(text: str, candidates: List[str]) -> Optional[str]:
        text_words = {normalize_tag(word) for word in text.split()}
        text_words.discard("")
        for candidate in candidates:
            for word in _words(candidate):
                if len(word) >= 3 and normalize_tag(word) in text_words:
                    return candidate
        return None
