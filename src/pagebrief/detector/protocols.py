"""
Protocols for pluggable main-content detection strategies.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from .models import ContentElement, Document


@runtime_checkable
class DetectionStrategy(Protocol):
    """One way of locating a document's main content."""

    name: str

    def try_detect(self, document: Document) -> Optional[ContentElement]:
        """Return a candidate element, or None when the strategy finds nothing.

        Args:
            document: Parsed document to inspect. Must not be modified.

        Returns:
            ContentElement for the candidate, or None
        """
        ...
