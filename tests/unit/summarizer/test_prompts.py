"""
Unit tests for provider request construction.
"""

from __future__ import annotations

import pytest

from pagebrief.config.config import ProviderConfig
from pagebrief.summarizer import PromptBuilder, SummaryOptions
from pagebrief.summarizer.prompts import (
    ACTION_ITEMS,
    CONCEPTS,
    DETAILED,
    DIFFICULTY,
    ELI15,
    HIGHLIGHTS,
    KEY_POINTS,
    QUICK,
)


@pytest.fixture
def builder() -> PromptBuilder:
    return PromptBuilder(ProviderConfig(temperature=0.4))


@pytest.mark.unit
class TestPromptBuilder:
    def test_all_formats_in_order(self, builder):
        assert builder.requested_formats(SummaryOptions()) == [
            QUICK,
            DETAILED,
            KEY_POINTS,
            ACTION_ITEMS,
            ELI15,
            CONCEPTS,
            DIFFICULTY,
        ]

    def test_simplified_explanation_and_difficulty_always_requested(self, builder):
        options = SummaryOptions(
            include_key_points=False,
            include_quick_summary=False,
            include_detailed_summary=False,
            include_action_items=False,
            include_concepts=False,
        )
        assert builder.requested_formats(options) == [ELI15, DIFFICULTY]

    def test_request_carries_content_and_metadata(self, builder, analysis_result):
        request = builder.build(analysis_result, KEY_POINTS, "medium")

        assert request.format == KEY_POINTS
        assert analysis_result.processed_content in request.prompt
        assert "Type: news" in request.prompt
        assert "JSON array of strings" in request.prompt
        assert request.temperature == 0.4

    def test_difficulty_is_deterministic(self, builder, analysis_result):
        request = builder.build(analysis_result, DIFFICULTY, "long")
        assert request.temperature == 0.0
        assert request.max_tokens == 32

    def test_token_bound_scales_with_length(self, builder):
        assert builder.max_tokens(QUICK, "short") == 256
        assert builder.max_tokens(KEY_POINTS, "medium") == 1024
        assert builder.max_tokens(DETAILED, "long") == 4096
        assert builder.max_tokens(DETAILED, "short") < builder.max_tokens(DETAILED, "long")

    def test_length_changes_instructions(self, builder, analysis_result):
        short = builder.build(analysis_result, KEY_POINTS, "short").prompt
        long = builder.build(analysis_result, KEY_POINTS, "long").prompt
        assert "the 3 most important" in short
        assert "the 7 most important" in long

    def test_build_all(self, builder, analysis_result):
        options = SummaryOptions(include_concepts=False, include_action_items=False)
        requests = builder.build_all(analysis_result, options, "short")
        assert list(requests) == [QUICK, DETAILED, KEY_POINTS, ELI15, DIFFICULTY]

    def test_highlight_request(self, builder):
        request = builder.build_highlights("Some source text.")
        assert request.format == HIGHLIGHTS
        assert request.prompt.endswith("Some source text.\n")
        assert request.temperature == 0.0

    def test_unknown_format(self, builder, analysis_result):
        with pytest.raises(ValueError):
            builder.build(analysis_result, "poem", "short")
