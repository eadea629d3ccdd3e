"""
Summary generation orchestrator.

Turns an AnalysisResult into a SummaryData: cache lookup first, then one
provider request per requested format, rate limited and retried, with
strict parsing of every response. Concurrent requests for the same
content and options share a single generation.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import random
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional

import structlog
from structlog.contextvars import bound_contextvars

from ..analyzer.models import AnalysisResult
from ..analyzer.text import truncate_text
from ..config.config import Config
from ..errors import (
    ProviderError,
    ProviderNotConfiguredError,
    RateLimitedError,
    SummarizationError,
)
from ..observability.metrics import METRICS
from .collaborators import (
    STATUS_COMPLETED,
    STATUS_ERROR,
    STATUS_PROCESSING,
    STATUS_READY,
    Presenter,
    SettingsProvider,
    UserSettings,
)
from .models import HighlightResult, SummaryData, SummaryOptions
from .parsing import parse_format, parse_highlights
from .prompts import ACTION_ITEMS, CONCEPTS, DETAILED, DIFFICULTY, ELI15, KEY_POINTS, QUICK, PromptBuilder, ProviderRequest
from .provider import SummaryProvider
from .rate_limiter import RequestRateLimiter

if TYPE_CHECKING:
    from ..cache.store import CacheStore

logger = structlog.get_logger(__name__)

Sleep = Callable[[float], Awaitable[Any]]

KEY_SEPARATOR = "\x1f"


def normalize_whitespace(text: str) -> str:
    return " ".join(text.split())


class SummarizationOrchestrator:
    """
    Coordinates cache, rate limiter, provider and presenter for summaries.

    Features:
    - Content fingerprinting independent of whitespace and force_regenerate
    - One in-flight generation per fingerprint
    - Exponential backoff with jitter on retriable provider failures
    - Status reporting to an optional presenter
    """

    def __init__(
        self,
        config: Config,
        provider: SummaryProvider,
        cache: CacheStore,
        settings_provider: SettingsProvider,
        presenter: Optional[Presenter] = None,
        rate_limiter: Optional[RequestRateLimiter] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self.provider = provider
        self.cache = cache
        self.settings_provider = settings_provider
        self.presenter = presenter
        self.sleep = sleep
        self.rate_limiter = rate_limiter or RequestRateLimiter.from_config(config.rate_limit, sleep=sleep)
        self.prompts = PromptBuilder(config.provider)
        self.logger = logger.bind(component="summarization_orchestrator")

        self._in_flight: Dict[str, asyncio.Task[SummaryData]] = {}
        self._dismissed = False

        self._metrics: Dict[str, float] = {
            "requests": 0,
            "cache_hits": 0,
            "generations": 0,
            "failures": 0,
            "dispatches": 0,
            "retries": 0,
            "deduplicated": 0,
            "total_time": 0.0,
        }

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def fingerprint(
        self,
        analysis: AnalysisResult,
        options: SummaryOptions,
        settings: Optional[UserSettings] = None,
    ) -> str:
        """
        Cache key for ``analysis`` summarized with ``options``.

        The key covers the whitespace-normalized processed content and every
        option except ``force_regenerate``, with the length resolved against
        the user's preferred length.
        """
        settings = settings or self.settings_provider.load()
        signature = options.signature(settings.preferred_length)
        material = (
            normalize_whitespace(analysis.processed_content)
            + KEY_SEPARATOR
            + json.dumps(signature, sort_keys=True)
        )
        return hashlib.sha256(material.encode("utf-8")).hexdigest()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate(self, analysis: AnalysisResult, options: Optional[SummaryOptions] = None) -> SummaryData:
        """
        Produce every summary format requested by ``options``.

        A cached summary is returned without any provider request unless
        ``options.force_regenerate`` is set; a forced run still stores its
        result.

        Raises:
            SummarizationError: generation failed after retries
        """
        options = options or SummaryOptions()
        settings = self.settings_provider.load()
        key = self.fingerprint(analysis, options, settings)
        self._metrics["requests"] += 1

        if not options.force_regenerate:
            cached = await self.cache.get(key)
            if cached is not None:
                self._metrics["cache_hits"] += 1
                METRICS["summaries_total"].labels(outcome="cached").inc()
                self.logger.debug("Serving cached summary", request_key=key[:16])
                self._set_status(STATUS_COMPLETED, "cached")
                return cached

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.create_task(self._generate_uncached(key, analysis, options, settings))
            self._in_flight[key] = task
            task.add_done_callback(lambda done, key=key: self._forget(key, done))
        else:
            self._metrics["deduplicated"] += 1
            self.logger.debug("Joining in-flight generation", request_key=key[:16])

        # A caller that goes away must not abort a paid generation.
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task[SummaryData]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Callers may all have been cancelled; mark the failure as seen.
        if not task.cancelled():
            task.exception()

    async def _generate_uncached(
        self,
        key: str,
        analysis: AnalysisResult,
        options: SummaryOptions,
        settings: UserSettings,
    ) -> SummaryData:
        with bound_contextvars(request_key=key):
            start_time = time.perf_counter()
            self._set_status(STATUS_PROCESSING)
            try:
                if not settings.is_configured:
                    raise ProviderNotConfiguredError("Please configure your API key first")

                length = options.resolved_length(settings.preferred_length)
                results: Dict[str, Any] = {}
                for format_name, request in self.prompts.build_all(analysis, options, length).items():
                    raw = await self._dispatch(request)
                    results[format_name] = parse_format(format_name, raw)

                summary = SummaryData(
                    quick_summary=results.get(QUICK, ""),
                    detailed_summary=results.get(DETAILED, ""),
                    key_points=results.get(KEY_POINTS, []),
                    action_items=results.get(ACTION_ITEMS, []),
                    eli_summary=results.get(ELI15, ""),
                    concepts=results.get(CONCEPTS, []),
                    difficulty_level=results.get(DIFFICULTY, "Intermediate"),
                    content_type=analysis.metadata.content_type,
                    original_word_count=analysis.metadata.word_count,
                )
                await self.cache.put(key, summary)
            except SummarizationError as e:
                self._metrics["failures"] += 1
                METRICS["summaries_total"].labels(outcome="failed").inc()
                self.logger.error("Summary generation failed", error=str(e), error_type=type(e).__name__)
                self._set_status(STATUS_ERROR, str(e))
                raise
            finally:
                self._metrics["total_time"] += time.perf_counter() - start_time

            self._metrics["generations"] += 1
            METRICS["summaries_total"].labels(outcome="generated").inc()
            self.logger.info(
                "Summary generated",
                formats=len(results),
                length=length,
                duration=round(time.perf_counter() - start_time, 3),
            )
            self._set_status(STATUS_COMPLETED)
            return summary

    async def _dispatch(self, request: ProviderRequest) -> str:
        """Send one request, retrying retriable failures with backoff."""
        max_retries = self.config.provider.max_retries
        attempt = 0
        while True:
            attempt += 1
            try:
                await self.rate_limiter.acquire()
                self._metrics["dispatches"] += 1
                return await self.provider.complete(request)
            except (ProviderError, RateLimitedError) as e:
                retriable = isinstance(e, RateLimitedError) or e.retriable
                if not retriable or attempt > max_retries:
                    raise
                delay = self._calculate_backoff_delay(attempt)
                self._metrics["retries"] += 1
                self.logger.warning(
                    "Retrying provider request",
                    format=request.format,
                    attempt=attempt,
                    max_retries=max_retries,
                    delay=round(delay, 2),
                    error=str(e),
                )
                await self.sleep(delay)

    def _calculate_backoff_delay(self, attempt: int) -> float:
        """Exponential backoff with ±20% jitter: 1s, 2s, 4s at the default base."""
        base_delay = self.config.provider.backoff_base_seconds * 2 ** (attempt - 1)
        return base_delay * random.uniform(0.8, 1.2)

    async def regenerate(self, analysis: AnalysisResult, options: Optional[SummaryOptions] = None) -> SummaryData:
        """Drop the cached summary and generate a fresh one.

        If the presenter is showing the summary for this content, it is
        replaced with the new one.
        """
        options = (options or SummaryOptions()).model_copy(update={"force_regenerate": True})
        key = self.fingerprint(analysis, options)
        await self.cache.delete(key)
        summary = await self.generate(analysis, options)
        if self.presenter is not None and self.presenter.is_showing and self.presenter.displayed_key == key:
            self.presenter.show(summary, key)
        return summary

    async def present(self, analysis: AnalysisResult, options: Optional[SummaryOptions] = None) -> Optional[SummaryData]:
        """Generate and show a summary unless the display is dismissed meanwhile."""
        options = options or SummaryOptions()
        self._dismissed = False
        summary = await self.generate(analysis, options)
        if self._dismissed:
            self.logger.debug("Display dismissed before the summary was ready")
            return None
        self.show(summary, self.fingerprint(analysis, options))
        return summary

    def show(self, summary: SummaryData, key: Optional[str] = None) -> None:
        if self.presenter is not None:
            self.presenter.show(summary, key or "")

    def dismiss(self) -> None:
        """Close the display; in-flight generations keep running and are cached."""
        self._dismissed = True
        if self.presenter is not None:
            self.presenter.hide()
        self._set_status(STATUS_READY)

    async def has_cached(self, analysis: AnalysisResult, options: Optional[SummaryOptions] = None) -> bool:
        return await self.cache.contains(self.fingerprint(analysis, options or SummaryOptions()))

    async def clear_cache(self) -> int:
        deleted = await self.cache.clear()
        self._set_status(STATUS_READY, "cache cleared")
        return deleted

    async def highlight(self, analysis: AnalysisResult) -> HighlightResult:
        """
        Ask the provider which spans of the content matter most.

        Only spans found verbatim in the (truncated) cleaned text are kept.
        """
        settings = self.settings_provider.load()
        if not settings.is_configured:
            raise ProviderNotConfiguredError("Please configure your API key first")

        source = truncate_text(
            analysis.cleaned_text,
            self.config.analysis.max_content_length,
            self.config.analysis.boundary_ratio,
        )
        raw = await self._dispatch(self.prompts.build_highlights(source))
        result = parse_highlights(raw, source)
        self.logger.info("Highlights generated", high=len(result.high), medium=len(result.medium), low=len(result.low))
        return result

    def _set_status(self, status: str, detail: str = "") -> None:
        if self.presenter is not None:
            self.presenter.set_status(status, detail)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get generation statistics.

        Returns:
            Counters plus derived success rate and average generation time
        """
        attempted = self._metrics["generations"] + self._metrics["failures"]
        return {
            **self._metrics,
            "success_rate": self._metrics["generations"] / attempted if attempted else 0.0,
            "avg_time": self._metrics["total_time"] / attempted if attempted else 0.0,
            "in_flight": len(self._in_flight),
            "rate_limiter": self.rate_limiter.get_stats(),
        }
