"""
Unit tests for strict parsing of provider output.
"""

from __future__ import annotations

import json

import pytest

from pagebrief.errors import ParseFailureError
from pagebrief.summarizer.parsing import (
    parse_concepts,
    parse_difficulty,
    parse_format,
    parse_highlights,
    parse_string_list,
    strip_code_fences,
)
from pagebrief.summarizer.prompts import DETAILED, KEY_POINTS, QUICK

SOURCE = (
    "Kelp forests absorb large amounts of carbon. Warm currents slow their growth. "
    "Researchers plan more monitoring stations."
)


@pytest.mark.unit
class TestCodeFences:
    def test_strips_language_fence(self):
        assert strip_code_fences('```json\n["a"]\n```') == '["a"]'

    def test_strips_bare_fence(self):
        assert strip_code_fences("```\n{}\n```") == "{}"

    def test_leaves_plain_text(self):
        assert strip_code_fences("  plain  ") == "plain"


@pytest.mark.unit
class TestStructuredFormats:
    def test_string_list(self):
        assert parse_string_list(KEY_POINTS, '```json\n["One", " Two "]\n```') == ["One", "Two"]

    def test_empty_list_is_valid(self):
        assert parse_string_list(KEY_POINTS, "[]") == []

    @pytest.mark.parametrize(
        "raw",
        [
            "Here are the points: one, two",
            '{"points": ["a"]}',
            '["a", 2]',
            '["a", ""]',
            '"just a string"',
        ],
    )
    def test_string_list_rejects_other_shapes(self, raw):
        with pytest.raises(ParseFailureError) as exc_info:
            parse_string_list(KEY_POINTS, raw)
        assert exc_info.value.format_name == KEY_POINTS

    def test_invalid_json_reason(self):
        with pytest.raises(ParseFailureError) as exc_info:
            parse_string_list(KEY_POINTS, "[unclosed")
        assert "invalid JSON" in exc_info.value.reason

    def test_concepts(self):
        raw = json.dumps([{"term": "Upwelling", "definition": "Deep water rising"}])
        concepts = parse_concepts(raw)

        assert len(concepts) == 1
        assert concepts[0].term == "Upwelling"
        assert concepts[0].analogy == ""

    def test_concepts_require_term_and_definition(self):
        with pytest.raises(ParseFailureError):
            parse_concepts(json.dumps([{"term": "Upwelling"}]))
        with pytest.raises(ParseFailureError):
            parse_concepts(json.dumps({"term": "x", "definition": "y"}))

    @pytest.mark.parametrize("level", ["Beginner", "Intermediate", "Advanced"])
    def test_difficulty(self, level):
        assert parse_difficulty(json.dumps({"difficulty_level": level})) == level

    @pytest.mark.parametrize(
        "raw",
        [
            '{"difficulty_level": "Expert"}',
            '{"difficulty_level": "Beginner", "reason": "short words"}',
            '"Beginner"',
            "Beginner",
        ],
    )
    def test_difficulty_rejects(self, raw):
        with pytest.raises(ParseFailureError):
            parse_difficulty(raw)


@pytest.mark.unit
class TestTextFormats:
    def test_text_is_stripped(self):
        assert parse_format(QUICK, "  A summary.\n") == "A summary."

    def test_markdown_kept(self):
        assert parse_format(DETAILED, "## Heading\n\n- item") == "## Heading\n\n- item"

    def test_empty_text_fails(self):
        with pytest.raises(ParseFailureError):
            parse_format(QUICK, "   ")

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            parse_format("poem", "text")


@pytest.mark.unit
class TestHighlights:
    def test_keeps_verbatim_spans(self):
        raw = json.dumps(
            {
                "high": ["Kelp forests absorb large amounts of carbon."],
                "medium": ["Warm currents slow their growth."],
                "low": ["monitoring stations"],
            }
        )
        result = parse_highlights(raw, SOURCE)

        assert result.high == ["Kelp forests absorb large amounts of carbon."]
        assert result.medium == ["Warm currents slow their growth."]
        assert result.low == ["monitoring stations"]
        assert result.total == 3

    def test_drops_invalid_spans(self):
        raw = json.dumps(
            {
                "high": ["Kelp forests absorb large amounts of carbon.", "Invented sentence.", 42],
                "medium": ["Kelp forests absorb large amounts of carbon.", "of"],
                "low": [None, "Researchers plan more monitoring stations."],
            }
        )
        result = parse_highlights(raw, SOURCE)

        assert result.high == ["Kelp forests absorb large amounts of carbon."]
        assert result.medium == []
        assert result.low == ["Researchers plan more monitoring stations."]

    @pytest.mark.parametrize(
        "raw",
        [
            '["Kelp forests"]',
            '{"high": [], "medium": []}',
            '{"high": "Kelp", "medium": [], "low": []}',
            '{"high": [], "medium": [], "low": [], "extra": []}',
        ],
    )
    def test_wrong_shape_fails(self, raw):
        with pytest.raises(ParseFailureError):
            parse_highlights(raw, SOURCE)
