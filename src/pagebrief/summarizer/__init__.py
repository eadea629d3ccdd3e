"""
LLM-backed summary generation.
"""

from .collaborators import (
    ConfigSettingsProvider,
    ConsolePresenter,
    Presenter,
    SettingsProvider,
    UserSettings,
)
from .models import Concept, HighlightResult, SummaryData, SummaryOptions
from .orchestrator import SummarizationOrchestrator
from .prompts import PromptBuilder, ProviderRequest
from .provider import AnthropicProvider, SummaryProvider, create_provider
from .rate_limiter import RequestRateLimiter

__all__ = [
    "AnthropicProvider",
    "Concept",
    "ConfigSettingsProvider",
    "ConsolePresenter",
    "HighlightResult",
    "Presenter",
    "PromptBuilder",
    "ProviderRequest",
    "RequestRateLimiter",
    "SettingsProvider",
    "SummarizationOrchestrator",
    "SummaryData",
    "SummaryOptions",
    "SummaryProvider",
    "UserSettings",
    "create_provider",
]
