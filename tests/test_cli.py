"""Tests for the debtscan command line."""

import sys

import pytest

from debtscan import cli
from debtscan.models import AnalysisFailure, AnalysisSuccess, FileAnalysisResult
from debtscan.storage import AnalysisStateStore


def test_results_lists_each_file(tmp_path, capsys):
    store = AnalysisStateStore(tmp_path)
    store.save_result(FileAnalysisResult.create("a.ts", AnalysisSuccess({"totalIssues": 4})))
    store.save_result(FileAnalysisResult.create("b.ts", AnalysisFailure("Failed to analyze file: x")))

    cli.results(tmp_path)

    out = capsys.readouterr().out
    assert "4 issues" in out
    assert "ERROR  Failed to analyze file: x" in out


def test_results_empty(tmp_path, capsys):
    cli.results(tmp_path)
    assert "No results" in capsys.readouterr().out


def test_invalid_config_exits_with_2(monkeypatch, tmp_path):
    monkeypatch.setattr(
        sys, "argv", ["debtscan", "info", str(tmp_path), "--chunk-size", "10", "--chunk-overlap", "50"]
    )

    with pytest.raises(SystemExit) as exc_info:
        cli.main()

    assert exc_info.value.code == 2


def test_info_reports_missing_cache(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "debtscan",
            "info",
            str(tmp_path),
            "--embedding-model",
            "bag-of-words",
            "--cache-dir",
            str(tmp_path / "cache"),
            "--output-dir",
            str(tmp_path / "out"),
        ],
    )

    cli.main()

    out = capsys.readouterr().out
    assert "Model: bag-of-words" in out
    assert "Status: missing" in out
    assert "Analyzed files: 0" in out
    assert "Last summary: never" in out
