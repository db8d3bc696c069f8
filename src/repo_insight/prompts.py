"""Prompt templates for the narrative analysis.

The template takes a repository snapshot and asks the model for a single
JSON object in the AnalysisResult shape.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .analyzer import RepositorySnapshot, SampleFile

SAMPLE_CHAR_LIMIT = 1000
MAX_PROMPT_SAMPLES = 5

RESPONSE_SHAPE = """{
  "summary": "Brief overview of what this project does and its purpose",
  "features": ["List of main features/functionalities"],
  "architecture": {
    "pattern": "Architecture pattern used (MVC, Component-based, etc.)",
    "components": ["Key architectural components"]
  },
  "insights": {
    "codeQuality": "Assessment of code quality and organization",
    "complexity": 5,
    "performance": "Performance considerations and potential issues"
  },
  "recommendations": ["List of improvement suggestions"]
}"""


def _sample_block(sample: SampleFile) -> str:
    content = sample.content[:SAMPLE_CHAR_LIMIT]
    if len(sample.content) > SAMPLE_CHAR_LIMIT:
        content += "..."
    return f"--- {sample.path} ---\n{content}"


def analysis_prompt(snapshot: RepositorySnapshot) -> str:
    """Build the single instruction sent to the generative service."""
    repo = snapshot.repository
    stats = snapshot.stats
    samples = "\n\n".join(
        _sample_block(s) for s in snapshot.sample_files[:MAX_PROMPT_SAMPLES]
    )

    return f"""Analyze this GitHub repository and provide a comprehensive analysis in the following JSON format:

{RESPONSE_SHAPE}

Repository Information:
- Name: {repo.name}
- Description: {repo.description or "No description"}
- Stars: {repo.stargazers_count}
- Language: {repo.language or "Unknown"}
- Created: {repo.created_at}
- Last Updated: {repo.updated_at}

Statistics:
- Total Files: {stats.total_files}
- Components: {stats.components}
- Pages: {stats.pages}
- Languages: {", ".join(snapshot.languages)}
- Technologies: {", ".join(snapshot.technologies)}

Sample File Contents:
{samples or "(none)"}

Please provide a thorough analysis focusing on:
1. What the application does and its main purpose
2. Technical architecture and patterns used
3. Code quality and organization
4. Performance considerations
5. Suggestions for improvement

Respond ONLY with valid JSON format."""
