"""
Data models for main-content detection.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, Iterator, List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

# Strings under these tags are never readable text.
NON_TEXT_TAGS = frozenset({"script", "style", "noscript", "template"})

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
LIST_TAGS = ("ul", "ol")


def _is_hidden(string: NavigableString, root: Optional[Tag] = None) -> bool:
    for parent in string.parents:
        if parent.name in NON_TEXT_TAGS:
            return True
        if parent is root:
            return False
    return False


def iter_text(tag: Tag) -> Iterator[str]:
    """Yield the stripped, non-empty readable strings below ``tag``."""
    for string in tag.find_all(string=True):
        if isinstance(string, PreformattedString) or _is_hidden(string, tag):
            continue
        text = string.strip()
        if text:
            yield text


def element_text(tag: Tag) -> str:
    """Readable text of ``tag`` with whitespace collapsed to single spaces."""
    return " ".join(" ".join(iter_text(tag)).split())


def count_words(text: str) -> int:
    return len(text.split())


class Document:
    """
    A parsed, read-only HTML document.

    Nothing in PageBrief mutates ``soup``. Containers assembled by the
    detector hold copies of the document's nodes.
    """

    def __init__(self, soup: BeautifulSoup, url: Optional[str] = None, parser: str = "html.parser") -> None:
        self.soup = soup
        self.url = url
        self.parser = parser
        self._offsets: Optional[Dict[int, int]] = None

    @classmethod
    def from_html(cls, html: str, url: Optional[str] = None, parser: str = "html.parser") -> Document:
        return cls(BeautifulSoup(html, parser), url=url, parser=parser)

    @property
    def host(self) -> str:
        if not self.url:
            return ""
        return (urlparse(self.url).hostname or "").lower()

    @property
    def title(self) -> str:
        if self.soup.title is None:
            return ""
        return element_text(self.soup.title)

    def select(self, selector: str) -> List[Tag]:
        return self.soup.select(selector)

    def select_one(self, selector: str) -> Optional[Tag]:
        return self.soup.select_one(selector)

    def meta_content(self, *, name: Optional[str] = None, prop: Optional[str] = None) -> str:
        attrs = {"name": name} if name else {"property": prop}
        meta = self.soup.find("meta", attrs=attrs)
        if meta is None:
            return ""
        content = meta.get("content")
        return content.strip() if isinstance(content, str) else ""

    def text_offset(self, tag: Tag) -> Optional[int]:
        """
        Number of readable characters preceding ``tag`` in document order.

        Returns None for nodes that are not part of this document, such as
        the copies held by synthetic containers.
        """
        if self._offsets is None:
            self._offsets = self._compute_offsets()
        return self._offsets.get(id(tag))

    def _compute_offsets(self) -> Dict[int, int]:
        offsets: Dict[int, int] = {}
        position = 0
        for node in self.soup.descendants:
            if isinstance(node, Tag):
                offsets[id(node)] = position
            elif isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
                if _is_hidden(node):
                    continue
                position += len(node.strip())
        return offsets

    def new_container(self, nodes: Iterable[Tag]) -> Tag:
        """Build a detached ``<div>`` holding copies of ``nodes``."""
        holder = BeautifulSoup("<div></div>", self.parser)
        container = holder.div
        assert container is not None
        for node in nodes:
            container.append(copy.copy(node))
        return container


@dataclass(frozen=True, eq=False)
class ContentElement:
    """The subtree chosen as a document's main content."""

    tag: Tag
    text: str
    word_count: int
    strategy: str
    synthetic: bool = False

    @classmethod
    def from_tag(cls, tag: Tag, strategy: str, synthetic: bool = False) -> ContentElement:
        text = element_text(tag)
        return cls(tag=tag, text=text, word_count=count_words(text), strategy=strategy, synthetic=synthetic)

    @property
    def tag_name(self) -> str:
        return self.tag.name

    @property
    def child_count(self) -> int:
        return len(self.tag.find_all(True, recursive=False))

    @property
    def has_headings(self) -> bool:
        return self.tag.find(HEADING_TAGS) is not None

    @property
    def has_lists(self) -> bool:
        return self.tag.find(LIST_TAGS + ("li",)) is not None

    @property
    def has_blockquotes(self) -> bool:
        return self.tag.find("blockquote") is not None

    @property
    def markup_length(self) -> int:
        return len(self.tag.decode_contents())


@dataclass(frozen=True)
class NotFound:
    """No element in the document carries enough readable content."""

    reason: str
    attempted: tuple[str, ...] = ()


@dataclass(frozen=True, eq=False)
class PageAnalysis:
    """Article classification of a whole page."""

    is_article: bool
    title: str
    author: str
    publish_date: str
    word_count: int
    confidence: float
    main_content: Optional[ContentElement]
    source_url: Optional[str]
    strategy: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not (0.0 <= self.confidence <= 1.0):
            raise ValueError("Confidence must be between 0.0 and 1.0")
        if self.is_article and (self.word_count < 100 or self.confidence <= 0.6):
            raise ValueError("An article needs at least 100 words and confidence above 0.6")

    def to_dict(self) -> Dict[str, object]:
        return {
            "is_article": self.is_article,
            "title": self.title,
            "author": self.author,
            "publish_date": self.publish_date,
            "word_count": self.word_count,
            "confidence": self.confidence,
            "strategy": self.strategy,
            "source_url": self.source_url,
            "timestamp": self.timestamp.isoformat(),
        }
