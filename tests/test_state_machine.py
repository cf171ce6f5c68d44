"""Tests for the resumable per-file analysis loop."""

import json

import pytest

from debtscan.analysis import AnalysisStateMachine
from debtscan.generators import ValidatingGenerator
from debtscan.ingesters import FolderIngester
from debtscan.models import AnalysisFailure, AnalysisSuccess, RunStatus
from debtscan.retrieval import Retriever, VectorIndex
from debtscan.storage import AnalysisStateStore

from conftest import VALID_ANALYSIS, ScriptedGenerator, write_tree


@pytest.fixture
def project(tmp_path):
    return write_tree(
        tmp_path / "project",
        {
            "a.ts": "export const a = 1;\n",
            "b.ts": "export const b = 2;\n",
            "c.ts": "x" * 500,
        },
    )


@pytest.fixture
def store(tmp_path):
    return AnalysisStateStore(tmp_path / "out")


def make_machine(store, provider, sleep, events=None, **kwargs):
    return AnalysisStateMachine(
        ValidatingGenerator(provider, max_retries=2, retry_delay=0.01, sleep=sleep),
        store,
        ingester=FolderIngester(max_file_size_bytes=100),
        progress_callback=events.append if events is not None else None,
        **kwargs,
    )


class TestAnalysisStateMachine:
    @pytest.mark.asyncio
    async def test_analyzes_each_eligible_file_once(self, project, store, sleep):
        provider = ScriptedGenerator(json.dumps(VALID_ANALYSIS))
        machine = make_machine(store, provider, sleep)

        await machine.analyze(project, [])

        results = machine.get_results()
        assert sorted(results) == ["a.ts", "b.ts"]
        assert all(isinstance(r, AnalysisSuccess) for r in results.values())
        assert results["a.ts"].payload["totalIssues"] == 2
        assert len(provider.prompts) == 2
        assert machine.status is RunStatus.COMPLETED

        state = json.loads(store.state_path.read_text())
        assert state["analyzedFiles"] == ["a.ts", "b.ts"]
        assert state["totalFiles"] == 2
        assert state["excludePatterns"] == []

    @pytest.mark.asyncio
    async def test_second_run_is_a_no_op(self, project, store, sleep):
        provider = ScriptedGenerator(json.dumps(VALID_ANALYSIS))
        await make_machine(store, provider, sleep).analyze(project, [])
        state_before = store.state_path.read_text()
        results_before = sorted(p.name for p in store.results_dir.iterdir())

        events = []
        await make_machine(store, provider, sleep, events).analyze(project, [])

        assert len(provider.prompts) == 2
        assert store.state_path.read_text() == state_before
        assert sorted(p.name for p in store.results_dir.iterdir()) == results_before
        assert [e.to_dict() for e in events] == [
            {"currentFile": "", "progress": 100.0, "analyzed": 0, "total": 0}
        ]

    @pytest.mark.asyncio
    async def test_resumes_after_partial_run(self, project, store, sleep):
        state = store.load([])
        state.mark_analyzed("a.ts")
        store.save(state)
        provider = ScriptedGenerator(json.dumps(VALID_ANALYSIS))

        await make_machine(store, provider, sleep).analyze(project, [])

        assert len(provider.prompts) == 1
        assert "b.ts" in provider.prompts[0]
        assert store.load([]).analyzed_files == ["a.ts", "b.ts"]

    @pytest.mark.asyncio
    async def test_failure_recorded_and_not_retried(self, project, store, sleep):
        provider = ScriptedGenerator("I cannot help with that.")
        machine = make_machine(store, provider, sleep)

        await machine.analyze(project, [])

        results = machine.get_results()
        assert isinstance(results["a.ts"], AnalysisFailure)
        assert results["a.ts"].error.startswith("Failed to analyze file: Validation failed after 2 attempts")
        assert store.load([]).analyzed_files == ["a.ts", "b.ts"]
        assert len(provider.prompts) == 4

        await make_machine(store, provider, sleep).analyze(project, [])
        assert len(provider.prompts) == 4

    @pytest.mark.asyncio
    async def test_corrupt_state_starts_fresh(self, project, store, sleep):
        store.state_path.parent.mkdir(parents=True)
        store.state_path.write_text("{truncated")
        provider = ScriptedGenerator(json.dumps(VALID_ANALYSIS))

        await make_machine(store, provider, sleep).analyze(project, [])

        assert len(provider.prompts) == 2
        assert store.load([]).analyzed_files == ["a.ts", "b.ts"]

    @pytest.mark.asyncio
    async def test_progress_events(self, project, store, sleep):
        events = []
        machine = make_machine(store, ScriptedGenerator(), sleep, events)

        await machine.analyze(project, [])

        assert [(e.current_file, e.progress, e.analyzed, e.total) for e in events] == [
            ("", 0.0, 0, 2),
            ("a.ts", 50.0, 1, 2),
            ("b.ts", 100.0, 2, 2),
        ]

    @pytest.mark.asyncio
    async def test_exclude_patterns_recorded(self, project, store, sleep):
        machine = make_machine(store, ScriptedGenerator(), sleep)

        await machine.analyze(project, ["b."])

        state = json.loads(store.state_path.read_text())
        assert state == {
            "analyzedFiles": ["a.ts"],
            "excludePatterns": ["b."],
            "totalFiles": 1,
            "directory": str(project.resolve()),
        }

    @pytest.mark.asyncio
    async def test_similar_chunks_reach_prompt_and_result(self, project, store, sleep, embedder):
        chunks = ["export const b = 2;", "unrelated words entirely"]
        index = VectorIndex.build(chunks, await embedder.embed(chunks))
        provider = ScriptedGenerator()
        machine = make_machine(
            store, provider, sleep, retriever=Retriever(index, embedder), top_k=1
        )

        await machine.analyze(project, [])

        assert "export const b = 2;" in provider.prompts[1]
        assert "most similar snippets" in provider.prompts[1]
        record = store.load_result("b.ts")
        assert record.similar_chunks == ["export const b = 2;"]

    @pytest.mark.asyncio
    async def test_result_write_failure_propagates(self, project, store, sleep, monkeypatch):
        def fail(result):
            raise OSError("disk full")

        monkeypatch.setattr(store, "save_result", fail)
        machine = make_machine(store, ScriptedGenerator(), sleep)

        with pytest.raises(OSError):
            await machine.analyze(project, [])

        assert not store.state_path.exists()

    @pytest.mark.asyncio
    async def test_other_directory_starts_fresh(self, tmp_path, store, sleep):
        first = write_tree(tmp_path / "projA", {"index.ts": "export const a = 1;\n"})
        second = write_tree(tmp_path / "projB", {"index.ts": "export const b = 2;\n"})
        provider = ScriptedGenerator()

        await make_machine(store, provider, sleep).analyze(first, [])
        machine = make_machine(store, provider, sleep)
        await machine.analyze(second, [])

        assert len(provider.prompts) == 2
        assert "export const b = 2;" in provider.prompts[1]
        assert list(machine.get_results()) == ["index.ts"]
        state = json.loads(store.state_path.read_text())
        assert state["directory"] == str(second.resolve())
        assert state["analyzedFiles"] == ["index.ts"]

    @pytest.mark.asyncio
    async def test_binary_file_never_reaches_generator(self, project, store, sleep):
        (project / "blob.ts").write_bytes(b"\x00\x01binary")
        provider = ScriptedGenerator()

        await make_machine(store, provider, sleep).analyze(project, [])

        assert len(provider.prompts) == 2
        assert "blob.ts" not in store.load([]).analyzed_files

    @pytest.mark.asyncio
    async def test_line_count_recorded(self, project, store, sleep):
        await make_machine(store, ScriptedGenerator(), sleep).analyze(project, [])

        assert store.load_result("a.ts").line_count == 2
