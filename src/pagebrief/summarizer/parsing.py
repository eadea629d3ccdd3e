"""
Validation of provider output.

Structured formats must parse as JSON of the exact expected shape.
Anything else raises ``ParseFailureError``; output is never coerced into
a best-guess structure.
"""

from __future__ import annotations

import json
import re
from typing import Annotated, Any, Dict, List

from pydantic import BaseModel, ConfigDict, StringConstraints, TypeAdapter, ValidationError

from ..errors import ParseFailureError
from .models import Concept, DifficultyLevel, HighlightResult
from .prompts import ACTION_ITEMS, CONCEPTS, DETAILED, DIFFICULTY, ELI15, HIGHLIGHTS, KEY_POINTS, QUICK

_FENCE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?```$", re.DOTALL)

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

_STRING_LIST = TypeAdapter(List[NonEmptyStr])
_CONCEPT_LIST = TypeAdapter(List[Concept])

# Spans this short carry no meaning on their own.
MIN_SPAN_LENGTH = 3


class _Difficulty(BaseModel):
    model_config = ConfigDict(extra="forbid")

    difficulty_level: DifficultyLevel


class _Highlights(BaseModel):
    model_config = ConfigDict(extra="forbid")

    high: List[Any]
    medium: List[Any]
    low: List[Any]


def strip_code_fences(text: str) -> str:
    """Remove a single surrounding markdown code fence, if present."""
    stripped = text.strip()
    match = _FENCE.match(stripped)
    return match.group(1).strip() if match else stripped


def _load_json(format_name: str, raw: str) -> Any:
    try:
        return json.loads(strip_code_fences(raw))
    except json.JSONDecodeError as e:
        raise ParseFailureError(format_name, f"invalid JSON ({e.msg} at position {e.pos})") from e


def parse_text(format_name: str, raw: str) -> str:
    text = raw.strip()
    if not text:
        raise ParseFailureError(format_name, "empty response")
    return text


def parse_string_list(format_name: str, raw: str) -> List[str]:
    try:
        return _STRING_LIST.validate_python(_load_json(format_name, raw), strict=True)
    except ValidationError as e:
        raise ParseFailureError(format_name, f"expected a JSON array of strings ({e.error_count()} errors)") from e


def parse_concepts(raw: str) -> List[Concept]:
    try:
        return _CONCEPT_LIST.validate_python(_load_json(CONCEPTS, raw))
    except ValidationError as e:
        raise ParseFailureError(CONCEPTS, f"expected a JSON array of concepts ({e.error_count()} errors)") from e


def parse_difficulty(raw: str) -> DifficultyLevel:
    try:
        return _Difficulty.model_validate(_load_json(DIFFICULTY, raw)).difficulty_level
    except ValidationError as e:
        raise ParseFailureError(DIFFICULTY, "expected {\"difficulty_level\": <Beginner|Intermediate|Advanced>}") from e


def parse_highlights(raw: str, source: str) -> HighlightResult:
    """
    Parse a highlight categorization.

    Spans that are not strings, are too short, or do not occur verbatim in
    ``source`` are dropped. A span kept in a higher tier is not repeated in
    a lower one.
    """
    try:
        payload = _Highlights.model_validate(_load_json(HIGHLIGHTS, raw), strict=True)
    except ValidationError as e:
        raise ParseFailureError(HIGHLIGHTS, 'expected an object with exactly "high", "medium" and "low" arrays') from e

    seen: set[str] = set()
    tiers: Dict[str, List[str]] = {}
    for tier in ("high", "medium", "low"):
        kept: List[str] = []
        for span in getattr(payload, tier):
            if not isinstance(span, str):
                continue
            span = span.strip()
            if len(span) < MIN_SPAN_LENGTH or span in seen or span not in source:
                continue
            seen.add(span)
            kept.append(span)
        tiers[tier] = kept
    return HighlightResult(**tiers)


def parse_format(format_name: str, raw: str) -> Any:
    """Dispatch ``raw`` to the parser of ``format_name``."""
    if format_name in (QUICK, DETAILED, ELI15):
        return parse_text(format_name, raw)
    if format_name in (KEY_POINTS, ACTION_ITEMS):
        return parse_string_list(format_name, raw)
    if format_name == CONCEPTS:
        return parse_concepts(raw)
    if format_name == DIFFICULTY:
        return parse_difficulty(raw)
    raise ValueError(f"Unknown summary format: {format_name}")

