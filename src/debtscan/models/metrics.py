"""Aggregate metrics computed from per-file results."""

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

Priority = Literal["high", "medium", "low"]


@dataclass(frozen=True)
class FileScore:
    """Debt score of one file: 100 is clean, 0 is as bad as it gets.

    The factors are kept so a reader can see what pulled the score down:
    ``severity_weight``, ``density`` and ``diversity`` are each in 0..1.
    """

    score: int
    priority: Priority
    issue_count: int
    severity_weight: float
    density: float
    diversity: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "priority": self.priority,
            "factors": {
                "issueCount": self.issue_count,
                "severityWeight": self.severity_weight,
                "densityScore": self.density,
                "diversityScore": self.diversity,
            },
        }


@dataclass(frozen=True)
class ProjectScore:
    """Mean of the file scores, with the averaged factors."""

    score: int
    priority: Priority
    total_issues: int
    average_severity_weight: float
    average_density: float
    average_diversity: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "priority": self.priority,
            "factors": {
                "totalIssues": self.total_issues,
                "averageSeverity": self.average_severity_weight,
                "averageDensity": self.average_density,
                "averageDiversity": self.average_diversity,
            },
        }


@dataclass
class NodeMetrics:
    """Totals rolled up for a file or directory."""

    total_files: int = 0
    total_issues: int = 0
    total_lines: int = 0
    issues_by_type: dict[str, int] = field(default_factory=dict)
    issues_by_severity: dict[str, int] = field(default_factory=dict)
    score: Optional[FileScore] = None  # files only

    @property
    def issues_per_1000_lines(self) -> float:
        if not self.total_lines:
            return 0.0
        return round(self.total_issues / self.total_lines * 1000, 2)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "totalFiles": self.total_files,
            "totalIssues": self.total_issues,
            "totalLines": self.total_lines,
            "issuesPer1000Lines": self.issues_per_1000_lines,
            "issuesByType": dict(self.issues_by_type),
            "issuesBySeverity": dict(self.issues_by_severity),
        }
        if self.score is not None:
            data["debtScore"] = self.score.to_dict()
        return data


@dataclass
class FolderNode:
    """A directory or file in the analyzed tree."""

    name: str
    path: str
    type: Literal["file", "directory"]
    children: list["FolderNode"] = field(default_factory=list)
    metrics: NodeMetrics = field(default_factory=NodeMetrics)

    def child(self, name: str) -> Optional["FolderNode"]:
        for node in self.children:
            if node.name == name:
                return node
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "path": self.path,
            "type": self.type,
            "metrics": self.metrics.to_dict(),
        }
        if self.type == "directory":
            data["children"] = [c.to_dict() for c in self.children]
        return data


@dataclass
class AnalysisMetrics:
    """Codebase-wide roll-up of a finished run."""

    total_files: int = 0
    analyzed_files: int = 0
    failed_files: int = 0
    total_issues: int = 0
    total_lines: int = 0
    issues_by_type: dict[str, int] = field(default_factory=dict)
    issues_by_severity: dict[str, int] = field(default_factory=dict)
    average_severity: float = 0.0
    average_issues_per_1000_lines: float = 0.0
    top_files: list[tuple[str, int]] = field(default_factory=list)
    file_scores: dict[str, FileScore] = field(default_factory=dict)
    project_score: Optional[ProjectScore] = None

    def to_dict(self, include_file_scores: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "totalFiles": self.total_files,
            "analyzedFiles": self.analyzed_files,
            "failedFiles": self.failed_files,
            "totalIssues": self.total_issues,
            "totalLines": self.total_lines,
            "issuesByType": dict(self.issues_by_type),
            "issuesBySeverity": dict(self.issues_by_severity),
            "averageSeverity": self.average_severity,
            "averageIssuesPer1000Lines": self.average_issues_per_1000_lines,
            "topFiles": [{"filePath": p, "issues": n} for p, n in self.top_files],
            "projectScore": self.project_score.to_dict() if self.project_score else None,
        }
        if include_file_scores:
            data["fileScores"] = {p: s.to_dict() for p, s in self.file_scores.items()}
        return data
