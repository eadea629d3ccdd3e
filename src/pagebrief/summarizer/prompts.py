"""
Prompt construction for the summarization provider.

Each summary format is requested separately, with an instruction header
describing the exact output shape the parser expects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from ..analyzer.models import AnalysisResult
from ..config.config import ProviderConfig
from .models import SummaryLength, SummaryOptions

QUICK = "quick"
DETAILED = "detailed"
KEY_POINTS = "key_points"
ACTION_ITEMS = "action_items"
ELI15 = "eli15"
CONCEPTS = "concepts"
DIFFICULTY = "difficulty"
HIGHLIGHTS = "highlights"

# Temperature for classification-style outputs.
DETERMINISTIC = 0.0

SYSTEM_PROMPT = (
    "You are an expert content analyst who writes accurate, faithful summaries for students "
    "and professionals. Follow the requested output format exactly and add nothing else."
)

QUICK_LENGTH = {"short": "one or two sentences", "medium": "two or three sentences", "long": "three to five sentences"}
DETAILED_LENGTH = {"short": "about 150 words", "medium": "about 350 words", "long": "about 700 words"}
LIST_LENGTH = {"short": "3", "medium": "5", "long": "7"}

# Output budget of each format relative to the length's token bound.
TOKEN_SCALE = {
    QUICK: 0.5,
    DETAILED: 2.0,
    KEY_POINTS: 1.0,
    ACTION_ITEMS: 1.0,
    ELI15: 1.0,
    CONCEPTS: 1.5,
}


@dataclass(frozen=True)
class ProviderRequest:
    """One message sent to the summarization provider."""

    format: str
    prompt: str
    max_tokens: int
    temperature: float
    system: str = SYSTEM_PROMPT


def _context_block(analysis: AnalysisResult) -> str:
    metadata = analysis.metadata
    return (
        "CONTENT METADATA:\n"
        f"- Type: {metadata.content_type}\n"
        f"- Word count: {metadata.word_count}\n"
        f"- Readability score: {metadata.readability_score}/100\n"
        f"- Has headings: {'yes' if metadata.has_headings else 'no'}\n"
        "\n"
        "Paragraphs are tagged [INTRO], [HEADING], [CONTENT] and [CONCLUSION] to show their position.\n"
        "\n"
        "CONTENT:\n"
        f"{analysis.processed_content}\n"
    )


def _instructions(format_name: str, length: SummaryLength) -> str:
    if format_name == QUICK:
        return (
            f"Write a quick summary of the content in {QUICK_LENGTH[length]} capturing its main message. "
            "Respond with plain text only: no heading, no markdown, no quotation marks."
        )
    if format_name == DETAILED:
        return (
            f"Write a detailed summary of the content in {DETAILED_LENGTH[length]}. "
            "Respond in markdown with ## section headings, bullet lists where useful and a blank line "
            "before and after every list. Do not wrap the answer in a code block."
        )
    if format_name == KEY_POINTS:
        return (
            f"List the {LIST_LENGTH[length]} most important points of the content. "
            'Respond with a JSON array of strings only, for example ["First point", "Second point"].'
        )
    if format_name == ACTION_ITEMS:
        return (
            f"List up to {LIST_LENGTH[length]} concrete, actionable takeaways a reader could apply. "
            "Respond with a JSON array of strings only. Respond with [] if the content has none."
        )
    if format_name == ELI15:
        return (
            "Explain the content so that a 15-year-old could understand it, using everyday analogies "
            "and no jargon. Respond with plain text only."
        )
    if format_name == CONCEPTS:
        return (
            f"Pick up to {LIST_LENGTH[length]} technical terms or concepts a newcomer would need explained. "
            'Respond with a JSON array of objects with exactly the keys "term", "definition" and "analogy", '
            'for example [{"term": "...", "definition": "...", "analogy": "..."}].'
        )
    if format_name == DIFFICULTY:
        return (
            "Classify how demanding the content is to read. "
            'Respond with a JSON object only: {"difficulty_level": "Beginner"}, '
            '{"difficulty_level": "Intermediate"} or {"difficulty_level": "Advanced"}.'
        )
    raise ValueError(f"Unknown summary format: {format_name}")


class PromptBuilder:
    """Builds provider requests for the formats a SummaryOptions asks for."""

    def __init__(self, config: ProviderConfig) -> None:
        self.config = config

    def requested_formats(self, options: SummaryOptions) -> List[str]:
        formats: List[str] = []
        if options.include_quick_summary:
            formats.append(QUICK)
        if options.include_detailed_summary:
            formats.append(DETAILED)
        if options.include_key_points:
            formats.append(KEY_POINTS)
        if options.include_action_items:
            formats.append(ACTION_ITEMS)
        # The simplified explanation and difficulty rating are always produced.
        formats.append(ELI15)
        if options.include_concepts:
            formats.append(CONCEPTS)
        formats.append(DIFFICULTY)
        return formats

    def max_tokens(self, format_name: str, length: SummaryLength) -> int:
        if format_name == DIFFICULTY:
            return 32
        return max(64, int(self.config.max_tokens[length] * TOKEN_SCALE[format_name]))

    def build(self, analysis: AnalysisResult, format_name: str, length: SummaryLength) -> ProviderRequest:
        prompt = f"{_instructions(format_name, length)}\n\n{_context_block(analysis)}"
        temperature = DETERMINISTIC if format_name == DIFFICULTY else self.config.temperature
        return ProviderRequest(
            format=format_name,
            prompt=prompt,
            max_tokens=self.max_tokens(format_name, length),
            temperature=temperature,
        )

    def build_all(self, analysis: AnalysisResult, options: SummaryOptions, length: SummaryLength) -> Dict[str, ProviderRequest]:
        return {name: self.build(analysis, name, length) for name in self.requested_formats(options)}

    def build_highlights(self, source: str) -> ProviderRequest:
        prompt = (
            "Select the sentences and phrases of the text below that a reader should highlight, "
            "grouped by importance. Copy every span exactly as it appears in the text, character for "
            "character. Respond with a JSON object only, with exactly the keys \"high\", \"medium\" and "
            '"low", each an array of strings ordered as they appear in the text.\n'
            "\n"
            "TEXT:\n"
            f"{source}\n"
        )
        return ProviderRequest(
            format=HIGHLIGHTS,
            prompt=prompt,
            max_tokens=self.config.max_tokens["long"],
            temperature=DETERMINISTIC,
        )
