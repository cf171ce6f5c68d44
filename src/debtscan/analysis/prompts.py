"""Prompt templates for file analysis and run summaries."""

import json
from typing import Any

CODE_DEBT_ANALYSIS = """You are a code debt analyzer. Analyze the following code based on these project opinions and standards:
{opinions}

Report the code debt in {file_path}, highlighting any violations of these standards.
Your output will be consumed by a machine, so be concise. Don't mention the
project opinions and standards in your output. Just analyze the code.
{context}
Respond with a single JSON object of this shape:
{{
  "totalIssues": <number>,
  "issuesBySeverity": {{"<label>": {{"score": <number>, "issues": [<string>]}}}},
  "issues": [
    {{"type": <string>, "frequency": <number>, "severity": <1-10>,
      "affectedComponents": [<string>], "confidence": <1-10>}}
  ]
}}

Here's the code to analyze:
{content}
"""

SIMILAR_CODE_SECTION = """
For context, these are the most similar snippets elsewhere in the codebase.
Use them to spot duplication and inconsistent conventions:
{snippets}
"""

CODE_DEBT_SUMMARY = """You are summarizing a code debt analysis of a whole codebase.

Aggregate metrics:
{metrics}

Folder structure with per-folder totals:
{folders}

Per-file findings:
{findings}

Debt scores run from 0 (worst) to 100 (clean); a "high" priority marks a
file to fix first.

Write a concise report in Markdown: the overall state of the codebase, the
most common and most severe kinds of debt, the folders and files that need
attention first, and any files that could not be analyzed.
"""


def build_analysis_prompt(
    file_path: str,
    content: str,
    opinions: str = "",
    similar_chunks: list[str] | None = None,
) -> str:
    """Build the per-file prompt, adding retrieved snippets when there are any."""
    context = ""
    if similar_chunks:
        snippets = "\n".join(
            f"--- snippet {i} ---\n{chunk}" for i, chunk in enumerate(similar_chunks, 1)
        )
        context = SIMILAR_CODE_SECTION.format(snippets=snippets)
    return CODE_DEBT_ANALYSIS.format(
        opinions=opinions or "(no project-specific standards provided)",
        file_path=file_path,
        context=context,
        content=content,
    )


def build_summary_prompt(
    metrics: dict[str, Any],
    folders: dict[str, Any],
    findings: dict[str, Any],
) -> str:
    return CODE_DEBT_SUMMARY.format(
        metrics=json.dumps(metrics, indent=2),
        folders=json.dumps(folders, indent=2),
        findings=json.dumps(findings, indent=2),
    )
