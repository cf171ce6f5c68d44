"""Debt scores for files and for the whole project.

A file starts at 100 and loses points for each issue, for how severe the
issues are, for how densely they occur per line and for how many
different kinds of debt it shows. Scores map onto a fix-first priority.
"""

import math
from typing import Iterable, Optional

from debtscan.analysis.schemas import CodeDebtAnalysis
from debtscan.models import FileScore, ProjectScore
from debtscan.models.metrics import Priority

ISSUE_PENALTY = 5
SEVERITY_PENALTY = 10
DENSITY_PENALTY = 15
DIVERSITY_PENALTY = 10

# Issues per 1000 lines at which density saturates.
MAX_DENSITY_PER_1000_LINES = 10
# Distinct issue types at which diversity saturates.
MAX_DIVERSITY_TYPES = 5


def priority_for(score: int) -> Priority:
    if score < 30:
        return "high"
    if score < 70:
        return "medium"
    return "low"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def severity_weight(report: CodeDebtAnalysis) -> float:
    """Mean severity of the issues scaled to 0..1; 0 with no issues."""
    if not report.issues:
        return 0.0
    return sum(issue.severity for issue in report.issues) / len(report.issues) / 10


def density(issue_count: int, line_count: Optional[int]) -> float:
    """Issues per 1000 lines scaled to 0..1.

    An unknown line count is not penalized; an empty file is.
    """
    if line_count is None:
        return 0.0
    if line_count <= 0:
        return 1.0
    per_1000 = issue_count / line_count * 1000
    return min(1.0, per_1000 / MAX_DENSITY_PER_1000_LINES)


def diversity(report: CodeDebtAnalysis) -> float:
    if not report.issues:
        return 0.0
    return min(1.0, len({issue.type for issue in report.issues}) / MAX_DIVERSITY_TYPES)


def score_file(report: CodeDebtAnalysis, line_count: Optional[int] = None) -> FileScore:
    """Score one file's report.

    Args:
        report: The validated analysis of the file
        line_count: Lines in the file, if known

    Returns:
        Score in 0..100 with its priority and factors
    """
    issue_count = len(report.issues)
    weight = severity_weight(report)
    dens = density(issue_count, line_count)
    div = diversity(report)

    penalty = (
        issue_count * ISSUE_PENALTY
        + weight * SEVERITY_PENALTY
        + dens * DENSITY_PENALTY
        + div * DIVERSITY_PENALTY
    )
    score = max(0, min(100, _round_half_up(100 - penalty)))
    return FileScore(
        score=score,
        priority=priority_for(score),
        issue_count=issue_count,
        severity_weight=round(weight, 3),
        density=round(dens, 3),
        diversity=round(div, 3),
    )


def score_project(file_scores: Iterable[FileScore], total_issues: int) -> ProjectScore | None:
    """Average the file scores; None when no file was scored."""
    scores = list(file_scores)
    if not scores:
        return None

    def mean(values: list[float]) -> float:
        return round(sum(values) / len(values), 3)

    score = _round_half_up(sum(s.score for s in scores) / len(scores))
    return ProjectScore(
        score=score,
        priority=priority_for(score),
        total_issues=total_issues,
        average_severity_weight=mean([s.severity_weight for s in scores]),
        average_density=mean([s.density for s in scores]),
        average_diversity=mean([s.diversity for s in scores]),
    )
