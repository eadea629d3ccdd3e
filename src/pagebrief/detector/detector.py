"""
ContentDetector: locates the main readable content of a document.

Runs an ordered list of detection strategies and returns the first
candidate carrying enough words.
"""

from __future__ import annotations

import time
from typing import Dict, List, Optional, Sequence, Union

import structlog

from ..config.config import DetectionConfig
from ..observability.metrics import METRICS
from .models import ContentElement, Document, NotFound
from .protocols import DetectionStrategy
from .strategies import STRATEGY_TYPES

logger = structlog.get_logger(__name__)

DetectionResult = Union[ContentElement, NotFound]


class ContentDetector:
    """
    Folds over detection strategies in priority order.

    Features:
    - Configurable strategy order
    - Aggregate word-count gate applied to every candidate
    - Strategy failures are logged and skipped
    - Per-strategy performance metrics
    """

    def __init__(
        self,
        config: Optional[DetectionConfig] = None,
        strategies: Optional[Sequence[DetectionStrategy]] = None,
    ) -> None:
        self.config = config or DetectionConfig()
        self.logger = logger.bind(component="ContentDetector")

        if strategies is None:
            strategies = [self._build_strategy(name) for name in self.config.cascade_order]
        self.strategies: List[DetectionStrategy] = list(strategies)

        self._detection_metrics: Dict[str, Dict[str, float]] = {
            strategy.name: {"attempts": 0, "successes": 0, "total_time": 0.0} for strategy in self.strategies
        }

    def _build_strategy(self, name: str) -> DetectionStrategy:
        if name not in STRATEGY_TYPES:
            raise ValueError(
                f"Invalid strategy '{name}' in cascade_order. Available strategies: {list(STRATEGY_TYPES)}"
            )
        return STRATEGY_TYPES[name](self.config)

    def detect(self, document: Document) -> DetectionResult:
        """
        Locate the main content of ``document``.

        Args:
            document: Parsed document. It is never modified.

        Returns:
            ContentElement of the first strategy whose candidate carries at
            least ``min_total_words`` words, otherwise NotFound
        """
        self.logger.debug(
            "Starting detection cascade",
            url=document.url,
            cascade_order=[strategy.name for strategy in self.strategies],
        )

        for strategy in self.strategies:
            metrics = self._detection_metrics.setdefault(
                strategy.name, {"attempts": 0, "successes": 0, "total_time": 0.0}
            )
            metrics["attempts"] += 1
            start_time = time.perf_counter()

            try:
                candidate = strategy.try_detect(document)
            except Exception as e:
                self.logger.error(
                    "Detection strategy failed",
                    strategy=strategy.name,
                    url=document.url,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue
            finally:
                metrics["total_time"] += time.perf_counter() - start_time

            if candidate is None:
                continue

            if candidate.word_count < self.config.min_total_words:
                self.logger.debug(
                    "Candidate below word threshold",
                    strategy=strategy.name,
                    word_count=candidate.word_count,
                    threshold=self.config.min_total_words,
                )
                continue

            metrics["successes"] += 1
            METRICS["detections_total"].labels(strategy=strategy.name).inc()
            self.logger.info(
                "Main content detected",
                strategy=strategy.name,
                url=document.url,
                tag=candidate.tag_name,
                word_count=candidate.word_count,
                children=candidate.child_count,
                synthetic=candidate.synthetic,
            )
            return candidate

        METRICS["detections_total"].labels(strategy="none").inc()
        self.logger.info("No main content found", url=document.url)
        return NotFound(
            reason=f"No element carries at least {self.config.min_total_words} words of readable text",
            attempted=tuple(strategy.name for strategy in self.strategies),
        )

    def detect_html(self, html: str, url: Optional[str] = None) -> DetectionResult:
        return self.detect(Document.from_html(html, url=url, parser=self.config.parser))

    def get_metrics(self) -> Dict[str, Dict[str, float]]:
        """
        Get detection performance metrics.

        Returns:
            Dictionary of metrics per strategy
        """
        metrics = {}
        for name, raw in self._detection_metrics.items():
            attempts = raw["attempts"]
            metrics[name] = {
                "attempts": attempts,
                "successes": raw["successes"],
                "success_rate": raw["successes"] / attempts if attempts > 0 else 0.0,
                "total_time": raw["total_time"],
                "avg_time": raw["total_time"] / attempts if attempts > 0 else 0.0,
            }
        return metrics
