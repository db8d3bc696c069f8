"""Narrative analysis - combines Layer 1 + Layer 2.

Takes a repository snapshot, feeds it into the prompt template, calls the
model and turns its freeform reply into a fully populated AnalysisResult.

Parsing happens in two independent stages:

1. ``iter_json_spans`` yields balanced ``{...}`` spans in the reply, since
   the model may wrap its JSON in prose or code fences. The first span
   that loads as a JSON object wins.
2. ``coerce_analysis`` fills every field, defaulting each one on its own.

If no span loads as an object the fixed ``FALLBACK_ANALYSIS``
is returned. Model transport errors (auth, rate limit, upstream) are not
parse failures and propagate to the caller.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any, Iterator

from .analyzer import RepositorySnapshot
from .logging import get_logger
from .model import GeminiClient
from .prompts import analysis_prompt

MIN_COMPLEXITY = 1
MAX_COMPLEXITY = 10
DEFAULT_COMPLEXITY = 5

logger = get_logger(__name__)


@dataclass(frozen=True)
class Architecture:
    pattern: str = "Unknown"
    components: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"pattern": self.pattern, "components": list(self.components)}


@dataclass(frozen=True)
class Insights:
    code_quality: str = "No assessment available"
    complexity: int = DEFAULT_COMPLEXITY
    performance: str = "No performance notes available"

    def to_dict(self) -> dict[str, Any]:
        return {
            "codeQuality": self.code_quality,
            "complexity": self.complexity,
            "performance": self.performance,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Narrative report. Every field is always populated."""

    summary: str = "No summary available"
    features: tuple[str, ...] = ()
    architecture: Architecture = field(default_factory=Architecture)
    insights: Insights = field(default_factory=Insights)
    recommendations: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "features": list(self.features),
            "architecture": self.architecture.to_dict(),
            "insights": self.insights.to_dict(),
            "recommendations": list(self.recommendations),
        }


FALLBACK_ANALYSIS = AnalysisResult(
    summary=(
        "Analysis completed but could not parse detailed results. The repository "
        "appears to be a software project with various files and components."
    ),
    features=("Code organization", "File structure", "Documentation"),
    architecture=Architecture(
        pattern="Standard project structure",
        components=("Source files", "Configuration files", "Documentation"),
    ),
    insights=Insights(
        code_quality="Repository structure suggests organized development practices.",
        complexity=DEFAULT_COMPLEXITY,
        performance="Performance characteristics depend on the specific implementation details.",
    ),
    recommendations=(
        "Consider adding more documentation",
        "Ensure proper testing coverage",
        "Optimize build configuration if applicable",
    ),
)


class NarrativeAnalyzer:
    """Turns a snapshot into an AnalysisResult using a Gemini client."""

    def __init__(self, client: GeminiClient):
        self.client = client

    def analyze(self, snapshot: RepositorySnapshot) -> AnalysisResult:
        prompt = analysis_prompt(snapshot)
        text = self.client.generate(prompt)
        return parse_analysis_result(text)


def analyze(snapshot: RepositorySnapshot, credential: str) -> AnalysisResult:
    """One-shot analysis with a fresh client for ``credential``."""
    with GeminiClient(api_key=credential) as client:
        return NarrativeAnalyzer(client).analyze(snapshot)


def extract_json_span(text: str) -> str | None:
    """Return the first balanced {...} span in text, or None."""
    return next(iter_json_spans(text), None)


def iter_json_spans(text: str) -> Iterator[str]:
    """Yield balanced {...} spans in order of their opening brace.

    Braces inside JSON string literals do not count towards the balance.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    yield text[start : i + 1]
                    break
        start = text.find("{", start + 1)


def parse_analysis_result(text: str) -> AnalysisResult:
    found_span = False
    for span in iter_json_spans(text or ""):
        found_span = True
        try:
            data = json.loads(span)
        except json.JSONDecodeError:
            # prose like "set {x} first" before the real object
            continue
        if isinstance(data, dict):
            return coerce_analysis(data)
    if found_span:
        logger.warning("Model reply has no valid JSON object, using fallback analysis")
    else:
        logger.warning("No JSON object in model reply, using fallback analysis")
    return FALLBACK_ANALYSIS


def coerce_analysis(data: dict[str, Any]) -> AnalysisResult:
    """Build an AnalysisResult, defaulting each missing or malformed field."""
    architecture = _mapping(data.get("architecture"))
    insights = _mapping(data.get("insights"))
    defaults = Insights()

    return AnalysisResult(
        summary=_text(data.get("summary"), AnalysisResult.summary),
        features=_strings(data.get("features")),
        architecture=Architecture(
            pattern=_text(architecture.get("pattern"), Architecture.pattern),
            components=_strings(architecture.get("components")),
        ),
        insights=Insights(
            code_quality=_text(insights.get("codeQuality"), defaults.code_quality),
            complexity=clamp_complexity(insights.get("complexity")),
            performance=_text(insights.get("performance"), defaults.performance),
        ),
        recommendations=_strings(data.get("recommendations")),
    )


def clamp_complexity(value: Any) -> int:
    """Round into [1, 10]; 5 when absent or not a number."""
    if isinstance(value, bool):
        return DEFAULT_COMPLEXITY
    try:
        number = float(value)
    except OverflowError:
        # integer literal beyond float range
        return MAX_COMPLEXITY if value > 0 else MIN_COMPLEXITY
    except (TypeError, ValueError):
        return DEFAULT_COMPLEXITY
    if math.isnan(number):
        return DEFAULT_COMPLEXITY
    if math.isinf(number):
        return MAX_COMPLEXITY if number > 0 else MIN_COMPLEXITY
    return max(MIN_COMPLEXITY, min(MAX_COMPLEXITY, round(number)))


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


def _strings(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(item) for item in value if item is not None)
