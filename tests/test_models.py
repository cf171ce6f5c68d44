"""Tests for persisted record models and the state store."""

import json

import pytest

from debtscan.models import (
    AnalysisFailure,
    AnalysisState,
    AnalysisSuccess,
    FileAnalysisResult,
)
from debtscan.models.analysis import analysis_from_json
from debtscan.storage import AnalysisStateStore
from debtscan.utils import safe_file_name


class TestAnalysisState:
    def test_mark_analyzed_is_idempotent(self):
        state = AnalysisState()

        assert state.mark_analyzed("a.ts") is True
        assert state.mark_analyzed("a.ts") is False
        assert state.analyzed_files == ["a.ts"]
        assert state.is_analyzed("a.ts")

    def test_duplicates_dropped_on_load(self):
        state = AnalysisState.from_dict({"analyzedFiles": ["a", "b", "a"], "excludePatterns": []})
        assert state.analyzed_files == ["a", "b"]
        assert state.total_files is None

    def test_wrong_shape_rejected(self):
        with pytest.raises(ValueError):
            AnalysisState.from_dict({"analyzedFiles": "a.ts"})

    def test_to_dict_omits_unknown_total(self):
        assert AnalysisState(["x"]).to_dict() == {"analyzedFiles": ["x"], "excludePatterns": []}

    def test_directory_round_trips(self):
        state = AnalysisState(["a.ts"], directory="/work/projA")
        restored = AnalysisState.from_dict(state.to_dict())

        assert restored.directory == "/work/projA"
        assert restored.belongs_to("/work/projA")
        assert not restored.belongs_to("/work/projB")

    def test_state_without_directory_belongs_anywhere(self):
        assert AnalysisState.from_dict({"analyzedFiles": []}).belongs_to("/any")


class TestFileAnalysisResult:
    def test_error_only_object_is_failure(self):
        assert analysis_from_json({"error": "boom"}) == AnalysisFailure(error="boom")
        assert isinstance(analysis_from_json({"error": "x", "totalIssues": 0}), AnalysisSuccess)

    def test_failure_layout(self):
        result = FileAnalysisResult.create("src/a.ts", AnalysisFailure(error="Failed to analyze file: x"))
        data = result.to_dict()

        assert data["filePath"] == "src/a.ts"
        assert data["analysis"] == {"error": "Failed to analyze file: x"}
        assert "similarChunks" not in data
        assert not result.succeeded

    def test_from_dict_restores_similar_chunks(self):
        data = {
            "filePath": "a.ts",
            "analysis": {"totalIssues": 0, "issues": []},
            "timestamp": "2024-01-01T00:00:00+00:00",
            "similarChunks": ["x"],
            "lineCount": 12,
        }
        result = FileAnalysisResult.from_dict(data)

        assert result.succeeded
        assert result.similar_chunks == ["x"]
        assert result.line_count == 12
        assert result.to_dict() == data


class TestAnalysisStateStore:
    def test_results_keyed_by_source_path(self, tmp_path):
        store = AnalysisStateStore(tmp_path)
        store.save_result(FileAnalysisResult.create("src/a.ts", AnalysisSuccess({"totalIssues": 1})))
        store.save_result(FileAnalysisResult.create("b.ts", AnalysisFailure("nope")))

        results = store.load_results()

        assert sorted(results) == ["b.ts", "src/a.ts"]
        assert (tmp_path / "results" / "src_a_ts.json").exists()

    def test_unreadable_result_skipped(self, tmp_path):
        store = AnalysisStateStore(tmp_path)
        store.save_result(FileAnalysisResult.create("a.ts", AnalysisFailure("nope")))
        (store.results_dir / "junk.json").write_text(json.dumps({"no": "fields"}))

        assert list(store.load_results()) == ["a.ts"]

    def test_clear_results(self, tmp_path):
        store = AnalysisStateStore(tmp_path)
        store.save_result(FileAnalysisResult.create("a.ts", AnalysisFailure("nope")))
        store.save_result(FileAnalysisResult.create("b.ts", AnalysisFailure("nope")))

        assert store.clear_results() == 2
        assert store.load_results() == {}
        assert AnalysisStateStore(tmp_path / "empty").clear_results() == 0

    def test_save_failure_is_logged(self, tmp_path, caplog):
        blocker = tmp_path / "file"
        blocker.write_text("")
        store = AnalysisStateStore(blocker / "out")

        assert store.save(AnalysisState(["a"])) is False
        assert "Error saving state" in caplog.text


def test_safe_file_name():
    assert safe_file_name("src/app.component.ts") == "src_app_component_ts.json"
    assert safe_file_name("C:\\x y", suffix="") == "C__x_y"
