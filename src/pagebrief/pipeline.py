"""
End-to-end summarization of a single HTML page.

detect main content -> clean and validate -> summarize (cache first)
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import structlog

from pagebrief.analyzer import AnalysisError, AnalysisOutcome, AnalysisResult, ContentAnalyzer
from pagebrief.cache import CacheStore
from pagebrief.config import Config
from pagebrief.detector import ContentDetector, Document, PageAnalysis, PageAnalyzer
from pagebrief.errors import ProviderNotConfiguredError, SummarizationError
from pagebrief.summarizer import (
    ConfigSettingsProvider,
    HighlightResult,
    Presenter,
    SettingsProvider,
    SummarizationOrchestrator,
    SummaryData,
    SummaryOptions,
    SummaryProvider,
    create_provider,
)

logger = structlog.get_logger(__name__)


class PipelineStatus(str, Enum):
    """Outcome of running the pipeline on one page."""

    COMPLETED = "completed"
    NO_CONTENT = "no_content"
    INVALID_CONTENT = "invalid_content"
    NOT_CONFIGURED = "not_configured"
    FAILED = "failed"


@dataclass
class PipelineResult:
    """Everything produced for one page, up to the stage that stopped it."""

    status: PipelineStatus
    message: str = ""
    page: Optional[PageAnalysis] = None
    analysis: Optional[AnalysisResult] = None
    summary: Optional[SummaryData] = None
    highlights: Optional[HighlightResult] = None
    error_type: Optional[str] = None
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == PipelineStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "page": self.page.to_dict() if self.page else None,
            "summary": self.summary.model_dump() if self.summary else None,
            "highlights": self.highlights.model_dump() if self.highlights else None,
            "error_type": self.error_type,
            "duration": self.duration,
        }


class SummaryPipeline:
    """
    Wires detection, analysis and the summarization orchestrator together.

    Detection and analysis failures are reported as statuses, never raised.
    """

    def __init__(
        self,
        config: Config,
        provider: Optional[SummaryProvider] = None,
        cache: Optional[CacheStore] = None,
        settings_provider: Optional[SettingsProvider] = None,
        presenter: Optional[Presenter] = None,
    ) -> None:
        self.config = config
        self.detector = ContentDetector(config.detection)
        self.page_analyzer = PageAnalyzer(config.detection, self.detector)
        self.analyzer = ContentAnalyzer(config.analysis)
        self.provider = provider or create_provider(config.provider)
        self.cache = cache or CacheStore.from_config(config.cache)
        self.orchestrator = SummarizationOrchestrator(
            config,
            self.provider,
            self.cache,
            settings_provider or ConfigSettingsProvider(config),
            presenter=presenter,
        )
        self.logger = logger.bind(component="pipeline")

    def inspect(self, html: str, url: Optional[str] = None) -> PageAnalysis:
        """Article detection only."""
        document = Document.from_html(html, url=url, parser=self.config.detection.parser)
        return self.page_analyzer.analyze(document)

    def prepare(self, html: str, url: Optional[str] = None) -> Tuple[PageAnalysis, Optional[AnalysisOutcome]]:
        """Detect and analyze the main content of a page.

        The outcome is None when no main content was found.
        """
        page = self.inspect(html, url)
        if page.main_content is None:
            return page, None
        return page, self.analyzer.analyze(page.main_content, url=url)

    def _stop(
        self, html: str, url: Optional[str]
    ) -> Tuple[PageAnalysis, Optional[AnalysisResult], Optional[PipelineResult]]:
        page, outcome = self.prepare(html, url)
        if outcome is None:
            return page, None, PipelineResult(
                status=PipelineStatus.NO_CONTENT,
                message="No main content found on this page",
                page=page,
            )
        if isinstance(outcome, AnalysisError):
            return page, None, PipelineResult(
                status=PipelineStatus.INVALID_CONTENT,
                message=f"Content not suitable for summarization: {outcome.message}",
                page=page,
                error_type=outcome.kind.value,
            )
        return page, outcome, None

    def _failure(self, error: SummarizationError, page: PageAnalysis, analysis: AnalysisResult) -> PipelineResult:
        if isinstance(error, ProviderNotConfiguredError):
            status = PipelineStatus.NOT_CONFIGURED
        else:
            status = PipelineStatus.FAILED
        self.logger.warning("Summarization did not complete", status=status.value, error=str(error))
        return PipelineResult(
            status=status,
            message=str(error),
            page=page,
            analysis=analysis,
            error_type=type(error).__name__,
        )

    async def summarize(
        self,
        html: str,
        url: Optional[str] = None,
        options: Optional[SummaryOptions] = None,
    ) -> PipelineResult:
        start_time = time.perf_counter()
        page, analysis, stopped = self._stop(html, url)
        if stopped is not None:
            self.logger.info("Nothing to summarize", url=url, status=stopped.status.value)
            return stopped
        assert analysis is not None

        try:
            summary = await self.orchestrator.generate(analysis, options or self.default_options())
        except SummarizationError as e:
            result = self._failure(e, page, analysis)
        else:
            result = PipelineResult(
                status=PipelineStatus.COMPLETED,
                message="Summary ready",
                page=page,
                analysis=analysis,
                summary=summary,
            )
        result.duration = time.perf_counter() - start_time
        return result

    async def highlight(self, html: str, url: Optional[str] = None) -> PipelineResult:
        page, analysis, stopped = self._stop(html, url)
        if stopped is not None:
            return stopped
        assert analysis is not None

        try:
            highlights = await self.orchestrator.highlight(analysis)
        except SummarizationError as e:
            return self._failure(e, page, analysis)
        return PipelineResult(
            status=PipelineStatus.COMPLETED,
            message="Highlights ready",
            page=page,
            analysis=analysis,
            highlights=highlights,
        )

    def default_options(self) -> SummaryOptions:
        summary = self.config.summary
        return SummaryOptions(
            include_key_points=summary.include_key_points,
            include_quick_summary=summary.include_quick_summary,
            include_detailed_summary=summary.include_detailed_summary,
            include_action_items=summary.include_action_items,
            include_concepts=summary.include_concepts,
        )

    async def close(self) -> None:
        await self.provider.close()
        await self.cache.close()

    async def __aenter__(self) -> SummaryPipeline:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
