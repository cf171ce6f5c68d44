"""Pydantic schemas the generated analysis must satisfy."""

from pydantic import BaseModel, ConfigDict, Field


class SeverityBucket(BaseModel):
    """Issues grouped under one severity label."""

    score: float
    issues: list[str] = Field(default_factory=list)


class DebtIssue(BaseModel):
    """One kind of code debt found in a file."""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    frequency: int = Field(ge=0)
    severity: int = Field(ge=1, le=10)
    affected_components: list[str] = Field(default_factory=list, alias="affectedComponents")
    confidence: int = Field(ge=1, le=10)


class CodeDebtAnalysis(BaseModel):
    """Structured code debt report for a single file."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"description": "Code debt analysis of one source file"},
    )

    total_issues: int = Field(ge=0, alias="totalIssues")
    issues_by_severity: dict[str, SeverityBucket] = Field(
        default_factory=dict, alias="issuesBySeverity"
    )
    issues: list[DebtIssue] = Field(default_factory=list)
