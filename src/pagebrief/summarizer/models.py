"""
Request and result models for summary generation.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SummaryLength = Literal["short", "medium", "long"]
DifficultyLevel = Literal["Beginner", "Intermediate", "Advanced"]


class SummaryOptions(BaseModel):
    """Which summary formats to produce, and how long they may be."""

    model_config = ConfigDict(frozen=True)

    include_key_points: bool = True
    include_quick_summary: bool = True
    include_detailed_summary: bool = True
    include_action_items: bool = True
    include_concepts: bool = True
    max_length: Optional[SummaryLength] = None
    force_regenerate: bool = False

    def signature(self, preferred_length: SummaryLength = "medium") -> Dict[str, Any]:
        """Cache-relevant view of the options; ``force_regenerate`` is excluded."""
        data = self.model_dump(exclude={"force_regenerate"})
        data["max_length"] = self.max_length or preferred_length
        return data

    def resolved_length(self, preferred_length: SummaryLength = "medium") -> SummaryLength:
        return self.max_length or preferred_length


class Concept(BaseModel):
    """A term from the content explained for a newcomer."""

    term: str = Field(min_length=1)
    definition: str = Field(min_length=1)
    analogy: str = ""


class SummaryData(BaseModel):
    """Every summary format generated for one piece of content."""

    quick_summary: str = ""
    detailed_summary: str = ""
    key_points: List[str] = Field(default_factory=list)
    action_items: List[str] = Field(default_factory=list)
    eli_summary: str = ""
    concepts: List[Concept] = Field(default_factory=list)
    difficulty_level: DifficultyLevel = "Intermediate"
    content_type: str = "article"
    original_word_count: int = 0
    timestamp: float = Field(default_factory=time.time)


class HighlightResult(BaseModel):
    """Verbatim spans of the source grouped by importance."""

    high: List[str] = Field(default_factory=list)
    medium: List[str] = Field(default_factory=list)
    low: List[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.high) + len(self.medium) + len(self.low)
