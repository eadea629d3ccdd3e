"""
Readability estimation and content-type classification.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlparse

from bs4 import Tag

from .models import ContentMetadata
from .text import split_sentences

_LETTER_RUNS = re.compile(r"[a-z]+")
_VOWEL_GROUPS = re.compile(r"[aeiouy]+")

URL_PATTERNS = [
    (("/blog/", "/post/"), "blog"),
    (("/news/", "/article/"), "news"),
    (("/docs/", "/documentation/"), "documentation"),
    (("/tutorial/", "/guide/"), "tutorial"),
]

DOMAIN_PATTERNS = [
    ("wikipedia.org", "encyclopedia"),
    ("medium.com", "blog"),
    ("stackoverflow.com", "technical"),
]


def estimate_syllables(text: str) -> int:
    """Vowel-group syllable estimate; a trailing ``e`` is silent."""
    syllables = 0
    for word in _LETTER_RUNS.findall(text.lower()):
        count = len(_VOWEL_GROUPS.findall(word)) or 1
        if word.endswith("e"):
            count -= 1
        syllables += max(1, count)
    return syllables


def reading_ease(word_count: int, sentence_count: int, text: str) -> int:
    """Flesch reading ease clamped to 0-100."""
    if sentence_count == 0 or word_count == 0:
        return 0
    words_per_sentence = word_count / sentence_count
    syllables_per_word = estimate_syllables(text) / word_count
    score = 206.835 - 1.015 * words_per_sentence - 84.6 * syllables_per_word
    return max(0, min(100, round(score)))


def identify_content_type(element: Optional[Tag], text: str, url: Optional[str] = None) -> str:
    lowered = (url or "").lower()
    for fragments, content_type in URL_PATTERNS:
        if any(fragment in lowered for fragment in fragments):
            return content_type

    domain = urlparse(lowered).hostname or ""
    for marker, content_type in DOMAIN_PATTERNS:
        if marker in domain:
            return content_type

    if element is not None:
        if element.find(["code", "pre"]) is not None:
            return "technical"
        headings = element.find_all(["h1", "h2", "h3", "h4", "h5", "h6"])
        if len(headings) > 3 and len(text) > 2000:
            return "long-form"

    return "article"


def build_metadata(element: Optional[Tag], cleaned_text: str, url: Optional[str] = None) -> ContentMetadata:
    words = cleaned_text.split()
    sentences = split_sentences(cleaned_text, min_length=0)
    word_count = len(words)
    sentence_count = len(sentences)
    letters = len(re.sub(r"\s", "", cleaned_text))

    return ContentMetadata(
        word_count=word_count,
        sentence_count=sentence_count,
        character_count=len(cleaned_text),
        avg_words_per_sentence=word_count / sentence_count if sentence_count else 0.0,
        avg_chars_per_word=letters / word_count if word_count else 0.0,
        readability_score=reading_ease(word_count, sentence_count, cleaned_text),
        content_type=identify_content_type(element, cleaned_text, url),
        has_headings=element is not None and element.find(["h1", "h2", "h3", "h4", "h5", "h6"]) is not None,
        has_lists=element is not None and element.find(["ul", "ol", "li"]) is not None,
        has_blockquotes=element is not None and element.find("blockquote") is not None,
        domain=(urlparse(url).hostname or "") if url else "",
        url=url,
    )
