"""
Exception hierarchy for PageBrief.

Detection and analysis report their failures as returned values
(``NotFound``, ``AnalysisError``). Everything that can go wrong while
talking to a summarization provider is raised as a ``SummarizationError``.
"""

from __future__ import annotations

from typing import Optional


class PageBriefError(Exception):
    """Base exception for PageBrief."""

    pass


class SummarizationError(PageBriefError):
    """Base exception for summary generation failures."""

    pass


class ProviderNotConfiguredError(SummarizationError):
    """Raised when no provider credentials are available."""

    def __init__(self, message: str = "Summarization provider is not configured") -> None:
        super().__init__(message)


class ProviderError(SummarizationError):
    """Raised when the provider rejects or fails a request."""

    retriable: bool = False

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class ApiKeyInvalidError(ProviderError):
    """Raised when the provider refuses the API key."""

    pass


class ProviderRateLimitedError(ProviderError):
    """Raised when the provider answers with a rate-limit response."""

    retriable = True

    def __init__(self, message: str, *, status: Optional[int] = 429, retry_after: Optional[float] = None) -> None:
        super().__init__(message, status=status)
        self.retry_after = retry_after


class ProviderTimeoutError(ProviderError):
    """Raised when a provider request exceeds its timeout."""

    retriable = True


class TransientProviderError(ProviderError):
    """Raised on server-side or connection failures that may succeed on retry."""

    retriable = True


class RateLimitedError(SummarizationError):
    """Raised when the local rate limiter refuses to dispatch a request."""

    def __init__(self, retry_after: float) -> None:
        super().__init__(f"Request rate limit reached, retry in {retry_after:.1f}s")
        self.retry_after = retry_after


class ParseFailureError(SummarizationError):
    """Raised when provider output does not match the requested format."""

    def __init__(self, format_name: str, reason: str) -> None:
        super().__init__(f"Could not parse {format_name} output: {reason}")
        self.format_name = format_name
        self.reason = reason
