"""
Tests for prompt cleaning and tag normalization.
"""
from tag_autocompletion.text_cleaning import (
    clean_prompt,
    compact_tag,
    normalize_tag,
    split_tags,
    strip_think_tags,
    text_after_last_think_close,
    unique_in_order,
)


class TestThinkTags:
    """Tests for reasoning block removal."""

    def test_strips_complete_blocks(self):
        assert strip_think_tags("<think>hmm</think>blonde hair") == "blonde hair"

    def test_strips_blocks_with_odd_spacing_and_case(self):
        assert strip_think_tags("< think>hmm</THINK >blonde hair") == "blonde hair"

    def test_text_after_last_close(self):
        assert text_after_last_think_close("a</think>b</think> c") == "c"

    def test_text_without_marker_is_unchanged(self):
        assert text_after_last_think_close("blonde hair") == "blonde hair"


class TestCleanPrompt:
    """Tests for clean_prompt."""

    def test_plain_prompt_is_unchanged(self):
        assert clean_prompt("blonde_hair, padded_room") == "blonde_hair, padded_room"

    def test_reasoning_block_is_removed(self):
        prompt = "<think>The user wants a room.</think>blonde_hair, padded_room"
        assert clean_prompt(prompt) == "blonde_hair, padded_room"

    def test_unclosed_marker_keeps_text_after_it(self):
        assert clean_prompt("some reasoning </think> blonde_hair, smile") == "blonde_hair, smile"

    def test_falls_back_to_last_tag_sentence(self):
        """Test that prose around a tag list is dropped when no comma survives."""
        prompt = "Thinking about it. blonde hair, smile, indoors. </think> Done"
        assert clean_prompt(prompt) == "blonde hair, smile, indoors"

    def test_metadata_and_weights_survive(self):
        prompt = "[ASPECT:tall], blonde_hair, (from_side:1.1)"
        assert clean_prompt(prompt) == prompt

    def test_leading_and_trailing_junk_removed(self):
        assert clean_prompt("** blonde_hair, smile!!") == "blonde_hair, smile"


class TestNormalization:
    """Tests for tag normalization helpers."""

    def test_normalize_drops_punctuation(self):
        assert normalize_tag("Wide-Eyed") == normalize_tag("wide_eyed") == "wideeyed"

    def test_compact_keeps_punctuation(self):
        assert compact_tag("Padded Room") == "paddedroom"
        assert compact_tag("wide-eyed") == "wide-eyed"

    def test_split_tags_trims_and_drops_empty(self):
        assert split_tags(" a, ,b ,, c") == ["a", "b", "c"]

    def test_unique_in_order(self):
        assert unique_in_order(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]
