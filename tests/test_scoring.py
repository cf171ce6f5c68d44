"""Tests for file and project debt scores."""

import pytest

from debtscan.analysis.schemas import CodeDebtAnalysis
from debtscan.analysis.scoring import density, priority_for, score_file, score_project

from conftest import VALID_ANALYSIS


def report(*issues):
    return CodeDebtAnalysis.model_validate(
        {
            "totalIssues": len(issues),
            "issues": [
                {"type": t, "frequency": 1, "severity": s, "affectedComponents": [], "confidence": 5}
                for t, s in issues
            ],
        }
    )


@pytest.mark.parametrize("score,priority", [(0, "high"), (29, "high"), (30, "medium"), (69, "medium"), (70, "low"), (100, "low")])
def test_priority_for(score, priority):
    assert priority_for(score) == priority


class TestScoreFile:
    def test_combines_all_factors(self):
        score = score_file(CodeDebtAnalysis.model_validate(VALID_ANALYSIS), line_count=400)

        assert score.issue_count == 2
        assert score.severity_weight == 0.45
        assert score.density == 0.5
        assert score.diversity == 0.4
        assert score.score == 74
        assert score.priority == "low"

    def test_unknown_line_count_has_no_density_penalty(self):
        score = score_file(report(("duplication", 9)))

        assert score.density == 0.0
        assert score.score == 84

    def test_clean_file_scores_100(self):
        score = score_file(report(), line_count=10)

        assert score.score == 100
        assert score.severity_weight == 0.0
        assert score.diversity == 0.0

    def test_score_never_negative(self):
        score = score_file(report(*[("complexity", 10)] * 20), line_count=50)

        assert score.score == 0
        assert score.priority == "high"

    def test_density_saturates(self):
        assert density(5, 100) == 1.0
        assert density(1, 1000) == 0.1
        assert density(0, 0) == 1.0


class TestScoreProject:
    def test_mean_of_file_scores(self):
        clean = score_file(report(), line_count=10)
        noisy = score_file(report(*[("complexity", 10)] * 20), line_count=50)

        project = score_project([clean, noisy], total_issues=20)

        assert project.score == 50
        assert project.priority == "medium"
        assert project.total_issues == 20
        assert project.to_dict()["factors"]["averageDensity"] == 0.5

    def test_no_files_has_no_score(self):
        assert score_project([], total_issues=0) is None
