"""
PageBrief - main-content detection, cleaning and LLM summaries for web pages.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config
from .pipeline import PipelineResult, PipelineStatus, SummaryPipeline

__all__ = ["__version__", "Config", "PipelineResult", "PipelineStatus", "SummaryPipeline"]
