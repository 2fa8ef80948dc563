"""
Text cleanup shared by prompt segmentation and oracle answer parsing.

Reasoning models wrap their chain of thought in <think>...</think> blocks,
sometimes with odd spacing or casing (< think>, </THINK >).
"""
import re
from typing import List

_THINK_BLOCK = re.compile(r"<\s*think[\s>][\s\S]*?<\/\s*think\s*>", re.IGNORECASE)
_THINK_CLOSE = re.compile(r"<\/\s*think\s*>", re.IGNORECASE)
_THINK_ANY_MARKER = re.compile(r"<\s*\/?\s*think\s*>", re.IGNORECASE)
_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_TAG_LIKE_SENTENCE = re.compile(r"^[a-zA-Z0-9_\s,]+$")
_LEADING_JUNK = re.compile(r"^[^a-zA-Z0-9_\[\(]*")
_TRAILING_JUNK = re.compile(r"[^a-zA-Z0-9_\s,\[\]:\)]*$")


def strip_think_tags(text: str) -> str:
    """Remove complete think blocks."""
    if not text:
        return ""
    return _THINK_BLOCK.sub("", text).strip()


def text_after_last_think_close(text: str) -> str:
    """Return the text after the last closing think marker, or the text itself."""
    last_end = -1
    for match in _THINK_CLOSE.finditer(text):
        last_end = match.end()
    if last_end == -1:
        return text
    return text[last_end:].strip()


def normalize_tag(tag: str) -> str:
    """Lowercase and drop underscores, spaces and punctuation."""
    return re.sub(r"[^\w]", "", re.sub(r"[_\s]", "", tag.lower()))


def compact_tag(tag: str) -> str:
    """Lowercase and drop underscores and spaces only."""
    return re.sub(r"[_\s]", "", tag.lower())


def clean_prompt(prompt: str) -> str:
    """
    Extract the tag list from a raw model answer.

    The model may echo its reasoning before the actual tags. Content after the
    last think marker wins; without a usable comma-separated remainder, the
    last tag-like sentence of the prompt is used instead.

    :param prompt: Raw prompt as produced by the model
    :return: Comma-separated tag list
    """
    cleaned = strip_think_tags(prompt)

    last_end = -1
    for match in _THINK_ANY_MARKER.finditer(cleaned):
        last_end = match.end()
    if last_end != -1:
        cleaned = cleaned[last_end:].strip()

    if "," not in cleaned:
        for sentence in reversed(_SENTENCE_SPLIT.split(prompt)):
            sentence = sentence.strip()
            if "," in sentence and _TAG_LIKE_SENTENCE.match(sentence):
                cleaned = sentence
                break

    # Keep [ASPECT:tall] style metadata and (tag:1.1) weights intact
    cleaned = _LEADING_JUNK.sub("", cleaned)
    cleaned = _TRAILING_JUNK.sub("", cleaned)
    return cleaned


def split_tags(text: str) -> List[str]:
    """Split on commas, trim, drop empties."""
    return [part.strip() for part in text.split(",") if part.strip()]


def unique_in_order(items: List[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
