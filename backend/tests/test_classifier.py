"""
Tests for composite intent classification.
"""

import pytest

from routers.chat_orchestration.classifier import (
    COMPOSITE_PHRASES,
    has_phrase,
    has_token,
    has_visual_keyword,
    is_composite,
)


class TestTables:
    def test_every_phrase_names_a_visual_artifact(self):
        for phrase in COMPOSITE_PHRASES:
            assert has_visual_keyword(phrase), phrase

    def test_phrases_are_lowercase(self):
        for phrase in COMPOSITE_PHRASES:
            assert phrase == phrase.lower()


class TestIsComposite:
    @pytest.mark.parametrize(
        "prompt",
        [
            "explain photosynthesis and create an image of a leaf",
            "describe the water cycle then draw a diagram",
            "summarize the article and make a chart",
            "turn this into a diagram",
            "show me a diagram of a cpu pipeline",
        ],
    )
    def test_composite_prompts(self, prompt):
        assert is_composite(prompt) is True

    @pytest.mark.parametrize(
        "prompt",
        [
            "explain photosynthesis",
            "write a poem about cats and dogs",
            "what is an image?",
            "",
        ],
    )
    def test_single_prompts(self, prompt):
        assert is_composite(prompt) is False

    def test_token_alone_is_not_enough(self):
        assert has_token("bread and butter")
        assert not is_composite("bread and butter")

    def test_keyword_alone_is_not_enough(self):
        assert has_visual_keyword("describe this image")
        assert not is_composite("describe this image")

    def test_phrase_is_enough_without_token(self):
        assert not has_token("turn this into an image")
        assert has_phrase("turn this into an image")
        assert is_composite("turn this into an image")

    def test_substring_match_inside_words(self):
        # "imagery" contains "image"
        assert is_composite("describe the poem and its imagery")

    def test_token_needs_surrounding_spaces(self):
        assert not has_token("android image")

    def test_deterministic(self):
        prompt = "explain tcp and draw a diagram"
        assert is_composite(prompt) == is_composite(prompt)
