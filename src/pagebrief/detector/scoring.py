"""
Content-likelihood scoring for heuristic main-content detection.

``score_candidate`` is a pure function of ``CandidateFeatures``; all
document access happens in ``extract_features``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from bs4 import Tag

from .models import Document, count_words, element_text

CONTENT_HINTS = re.compile(r"article|content|post|story|main|entry", re.IGNORECASE)
BODY_HINTS = re.compile(r"body|text|paragraph", re.IGNORECASE)
PLATFORM_HINTS = re.compile(r"medium|substack|wordpress", re.IGNORECASE)

PARAGRAPH_SELECTOR = "p, div[data-selectable-paragraph]"
HEADING_SELECTOR = "h1, h2, h3, h4, h5, h6"
LIST_SELECTOR = "ul, ol, li"
NAV_SELECTOR = "nav, .nav, .navigation, .sidebar, .menu"
FORM_SELECTOR = "form, input, button, .form"
AD_SELECTOR = ".ad, .ads, .advertisement, .sponsored"
SOCIAL_SELECTOR = ".social, .share, .follow"

MIN_TEXT_LENGTH = 50


@dataclass(frozen=True)
class CandidateFeatures:
    """Structural measurements of one candidate element."""

    text_length: int
    markup_length: int
    word_count: int
    paragraph_count: int = 0
    heading_count: int = 0
    list_count: int = 0
    class_and_id: str = ""
    paragraph_marker: bool = False
    story_test_id: bool = False
    nav_count: int = 0
    form_count: int = 0
    ad_count: int = 0
    social_count: int = 0
    link_count: int = 0
    text_offset: Optional[int] = None


def _class_and_id(tag: Tag) -> str:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    element_id = tag.get("id") or ""
    return f"{' '.join(classes)} {element_id}".lower()


def extract_features(tag: Tag, document: Optional[Document] = None) -> CandidateFeatures:
    text = element_text(tag)
    test_id = tag.get("data-testid")
    return CandidateFeatures(
        text_length=len(text),
        markup_length=len(tag.decode_contents()),
        word_count=count_words(text),
        paragraph_count=len(tag.select(PARAGRAPH_SELECTOR)),
        heading_count=len(tag.select(HEADING_SELECTOR)),
        list_count=len(tag.select(LIST_SELECTOR)),
        class_and_id=_class_and_id(tag),
        paragraph_marker=tag.has_attr("data-selectable-paragraph"),
        story_test_id=isinstance(test_id, str) and "story" in test_id,
        nav_count=len(tag.select(NAV_SELECTOR)),
        form_count=len(tag.select(FORM_SELECTOR)),
        ad_count=len(tag.select(AD_SELECTOR)),
        social_count=len(tag.select(SOCIAL_SELECTOR)),
        link_count=len(tag.find_all("a")),
        text_offset=document.text_offset(tag) if document is not None else None,
    )


def score_candidate(features: CandidateFeatures, viewport_chars: int = 3000) -> float:
    """
    Score how likely an element is to be the page's main content.

    Returns 0 for elements with less than 50 characters of text; scores
    are never negative.
    """
    if features.text_length < MIN_TEXT_LENGTH:
        return 0.0

    score = 0.0

    density = features.text_length / max(features.markup_length, 1)
    score += density * 25

    score += min(features.paragraph_count * 3, 20)

    if features.word_count > 100:
        score += 15
    if features.word_count > 300:
        score += 10
    if features.word_count > 500:
        score += 5

    score += min(features.heading_count * 2, 10)
    score += min(features.list_count * 0.5, 5)

    if CONTENT_HINTS.search(features.class_and_id):
        score += 15
    if BODY_HINTS.search(features.class_and_id):
        score += 10
    if PLATFORM_HINTS.search(features.class_and_id):
        score += 8

    if features.paragraph_marker:
        score += 20
    if features.story_test_id:
        score += 15

    score -= min(features.nav_count * 5, 15)
    score -= min(features.form_count * 2, 10)
    score -= min(features.ad_count * 8, 20)
    score -= min(features.social_count * 3, 10)

    link_ratio = features.link_count / max(features.word_count / 50, 1)
    if link_ratio > 0.1:
        score -= link_ratio * 10

    # Elements starting inside the first screenful of text.
    if features.text_offset is not None and 0 < features.text_offset < viewport_chars * 1.5:
        score += 5

    return max(0.0, score)
