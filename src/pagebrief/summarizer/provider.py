"""
Summarization provider clients.
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import aiohttp
import structlog

from ..config.config import ProviderConfig
from ..errors import (
    ApiKeyInvalidError,
    ParseFailureError,
    ProviderError,
    ProviderNotConfiguredError,
    ProviderRateLimitedError,
    ProviderTimeoutError,
    TransientProviderError,
)
from ..observability.metrics import METRICS
from .prompts import ProviderRequest

logger = structlog.get_logger(__name__)

TRANSIENT_STATUSES = {500, 502, 503, 504, 529}


class SummaryProvider(ABC):
    """A text-generation backend that answers one prompt at a time."""

    name: str = "provider"

    @abstractmethod
    async def complete(self, request: ProviderRequest) -> str:
        """Send ``request`` and return the generated text.

        Raises:
            ProviderError: the provider failed or refused the request
        """

    async def close(self) -> None:
        return None


def _retry_after(headers: Any) -> Optional[float]:
    value = headers.get("Retry-After") if headers is not None else None
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class AnthropicProvider(SummaryProvider):
    """Client for the Anthropic Messages API."""

    name = "anthropic"

    def __init__(self, config: ProviderConfig, session: Optional[aiohttp.ClientSession] = None) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None
        self._request_count = 0

    def _headers(self) -> Dict[str, str]:
        if self.config.api_key is None or not self.config.api_key.get_secret_value():
            raise ProviderNotConfiguredError("No API key configured for the summarization provider")
        return {
            "x-api-key": self.config.api_key.get_secret_value(),
            "anthropic-version": self.config.api_version,
            "content-type": "application/json",
        }

    def _payload(self, request: ProviderRequest) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "system": request.system,
            "messages": [{"role": "user", "content": request.prompt}],
        }

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
        return self.session

    async def complete(self, request: ProviderRequest) -> str:
        headers = self._headers()
        session = await self._get_session()
        start_time = time.perf_counter()
        self._request_count += 1

        try:
            async with asyncio.timeout(self.config.timeout_seconds):
                async with session.post(self.config.base_url, json=self._payload(request), headers=headers) as response:
                    status = response.status
                    if status == 200:
                        data = await response.json(content_type=None)
                    else:
                        body = await response.text()
                        self._raise_for_status(status, body, response.headers)
        except asyncio.TimeoutError as e:
            METRICS["provider_requests_total"].labels(format=request.format, outcome="timeout").inc()
            logger.warning("Provider request timed out", format=request.format, timeout=self.config.timeout_seconds)
            raise ProviderTimeoutError(f"Request timed out after {self.config.timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            METRICS["provider_requests_total"].labels(format=request.format, outcome="connection_error").inc()
            logger.warning("Provider request failed", format=request.format, error=str(e))
            raise TransientProviderError(f"Connection to provider failed: {e}") from e
        except ProviderError:
            METRICS["provider_requests_total"].labels(format=request.format, outcome="error").inc()
            raise

        METRICS["provider_latency_seconds"].labels(format=request.format).observe(time.perf_counter() - start_time)
        METRICS["provider_requests_total"].labels(format=request.format, outcome="success").inc()
        return self._extract_text(request.format, data)

    def _raise_for_status(self, status: int, body: str, headers: Any) -> None:
        detail = body[:200]
        if status in (401, 403):
            raise ApiKeyInvalidError("Invalid API key. Please check your settings.", status=status)
        if status == 429:
            raise ProviderRateLimitedError(
                "Provider rate limit exceeded. Please try again later.",
                retry_after=_retry_after(headers),
            )
        if status in TRANSIENT_STATUSES:
            raise TransientProviderError(f"Provider unavailable ({status}): {detail}", status=status)
        if status == 402:
            raise ProviderError("Insufficient credits on the provider account.", status=status)
        raise ProviderError(f"Provider request failed ({status}): {detail}", status=status)

    @staticmethod
    def _extract_text(format_name: str, data: Any) -> str:
        try:
            text = data["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ParseFailureError(format_name, "provider response carries no text content") from e
        if not isinstance(text, str):
            raise ParseFailureError(format_name, "provider response text is not a string")
        return text

    def get_stats(self) -> Dict[str, Any]:
        return {"name": self.name, "model": self.config.model, "requests": self._request_count}

    async def close(self) -> None:
        if self.session is not None and self._owns_session and not self.session.closed:
            await self.session.close()
        self.session = None
        logger.debug("Provider session closed")

    async def __aenter__(self) -> AnthropicProvider:
        await self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def create_provider(config: ProviderConfig) -> SummaryProvider:
    if config.name == "anthropic":
        return AnthropicProvider(config)
    raise ValueError(f"Unknown provider: {config.name}")
