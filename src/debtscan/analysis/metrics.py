"""Roll per-file results up into codebase metrics and a folder tree."""

import logging
from collections import Counter
from typing import Mapping, Optional

from pydantic import ValidationError

from debtscan.analysis.schemas import CodeDebtAnalysis
from debtscan.analysis.scoring import score_file, score_project
from debtscan.models import (
    Analysis,
    AnalysisFailure,
    AnalysisMetrics,
    FolderNode,
    NodeMetrics,
)

logger = logging.getLogger(__name__)

TOP_FILES = 10


def severity_band(severity: int) -> str:
    """Map a 1-10 severity onto a named band."""
    if severity <= 3:
        return "low"
    if severity <= 6:
        return "medium"
    if severity <= 8:
        return "high"
    return "critical"


def parse_report(analysis: Analysis) -> CodeDebtAnalysis | None:
    """Return the structured report, or None for failures and malformed payloads."""
    if isinstance(analysis, AnalysisFailure):
        return None
    try:
        return CodeDebtAnalysis.model_validate(analysis.payload)
    except ValidationError as e:
        logger.warning(f"Ignoring malformed analysis payload: {e.error_count()} errors")
        return None


def _file_metrics(report: CodeDebtAnalysis, line_count: Optional[int]) -> NodeMetrics:
    by_type: Counter[str] = Counter()
    by_severity: Counter[str] = Counter()
    for issue in report.issues:
        count = max(issue.frequency, 1)
        by_type[issue.type] += count
        by_severity[severity_band(issue.severity)] += count
    return NodeMetrics(
        total_files=1,
        total_issues=report.total_issues,
        total_lines=line_count or 0,
        issues_by_type=dict(by_type),
        issues_by_severity=dict(by_severity),
        score=score_file(report, line_count),
    )


def compute_metrics(
    results: Mapping[str, Analysis],
    line_counts: Optional[Mapping[str, int]] = None,
) -> AnalysisMetrics:
    """Aggregate counts and debt scores over every file's analysis.

    Args:
        results: Analysis per file path
        line_counts: Lines per file path; files missing here are scored
            without a density penalty and left out of the per-1000-lines rate
    """
    line_counts = line_counts or {}
    metrics = AnalysisMetrics(total_files=len(results))
    by_type: Counter[str] = Counter()
    by_severity: Counter[str] = Counter()
    per_file: list[tuple[str, int]] = []
    severities: list[int] = []
    counted_issues = 0

    for path in sorted(results):
        report = parse_report(results[path])
        if report is None:
            metrics.failed_files += 1
            continue
        metrics.analyzed_files += 1
        file_metrics = _file_metrics(report, line_counts.get(path))
        metrics.total_issues += file_metrics.total_issues
        if path in line_counts:
            metrics.total_lines += file_metrics.total_lines
            counted_issues += file_metrics.total_issues
        by_type.update(file_metrics.issues_by_type)
        by_severity.update(file_metrics.issues_by_severity)
        severities.extend(issue.severity for issue in report.issues)
        per_file.append((path, file_metrics.total_issues))
        if file_metrics.score is not None:
            metrics.file_scores[path] = file_metrics.score

    metrics.issues_by_type = dict(by_type.most_common())
    metrics.issues_by_severity = dict(by_severity)
    if severities:
        metrics.average_severity = round(sum(severities) / len(severities), 2)
    if metrics.total_lines:
        metrics.average_issues_per_1000_lines = round(
            counted_issues / metrics.total_lines * 1000, 2
        )
    per_file.sort(key=lambda item: (-item[1], item[0]))
    metrics.top_files = [item for item in per_file[:TOP_FILES] if item[1] > 0]
    metrics.project_score = score_project(metrics.file_scores.values(), metrics.total_issues)
    return metrics


def _merge(target: NodeMetrics, source: NodeMetrics) -> None:
    target.total_files += source.total_files
    target.total_issues += source.total_issues
    target.total_lines += source.total_lines
    for key, value in source.issues_by_type.items():
        target.issues_by_type[key] = target.issues_by_type.get(key, 0) + value
    for key, value in source.issues_by_severity.items():
        target.issues_by_severity[key] = target.issues_by_severity.get(key, 0) + value


def build_folder_structure(
    results: Mapping[str, Analysis],
    root_name: str = ".",
    line_counts: Optional[Mapping[str, int]] = None,
) -> FolderNode:
    """Build a directory tree of the analyzed files with rolled-up totals.

    Failed files appear in the tree and count toward ``total_files`` but
    contribute no issues. File nodes carry their debt score.

    Raises:
        ValueError: for a path with no file name component
    """
    line_counts = line_counts or {}
    root = FolderNode(name=root_name, path="", type="directory")

    for path in sorted(results):
        parts = [p for p in path.split("/") if p and p != "."]
        if not parts:
            raise ValueError(f"cannot place {path!r} in the folder tree")

        report = parse_report(results[path])
        if report is not None:
            file_metrics = _file_metrics(report, line_counts.get(path))
        else:
            file_metrics = NodeMetrics(total_files=1)

        node = root
        _merge(node.metrics, file_metrics)
        for depth, name in enumerate(parts[:-1], start=1):
            child = node.child(name)
            if child is None:
                child = FolderNode(name=name, path="/".join(parts[:depth]), type="directory")
                node.children.append(child)
            node = child
            _merge(node.metrics, file_metrics)

        node.children.append(
            FolderNode(name=parts[-1], path=path, type="file", metrics=file_metrics)
        )

    return root
