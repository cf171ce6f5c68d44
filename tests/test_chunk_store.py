"""Tests for file discovery and batched chunk streaming."""

import logging

from debtscan.chunkers import ChunkStore, RecursiveTextSplitter
from debtscan.ingesters import FolderIngester
from debtscan.protocols import Ingester, TextSplitter

from conftest import write_tree


class TestFolderIngester:
    def test_discovers_sorted_relative_paths(self, source_tree):
        paths = list(FolderIngester().discover(source_tree, []))
        assert paths == ["a.ts", "lib/b.ts"]

    def test_exclude_patterns_are_substrings(self, source_tree):
        paths = list(FolderIngester().discover(source_tree, ["lib/"]))
        assert paths == ["a.ts"]

    def test_skips_hidden_and_vendor_directories(self, tmp_path):
        write_tree(
            tmp_path,
            {
                "app.py": "print('hi')\n",
                ".git/hooks/x.py": "x = 1\n",
                "node_modules/pkg/index.js": "module.exports = 1;\n",
                ".hidden.py": "y = 2\n",
            },
        )
        assert list(FolderIngester().discover(tmp_path, [])) == ["app.py"]

    def test_oversized_file_skipped_with_warning(self, tmp_path, caplog):
        write_tree(tmp_path, {"small.ts": "a", "big.ts": "b" * 100})
        ingester = FolderIngester(max_file_size_bytes=10)

        with caplog.at_level(logging.WARNING):
            paths = list(ingester.discover(tmp_path, []))

        assert paths == ["small.ts"]
        assert "big.ts" in caplog.text

    def test_binary_file_skipped(self, tmp_path, caplog):
        (tmp_path / "blob.ts").write_bytes(b"abc\x00def")
        write_tree(tmp_path, {"text.ts": "let a = 1;\n"})

        with caplog.at_level(logging.WARNING):
            docs = list(FolderIngester().ingest(tmp_path, []))

        assert [d.path for d in docs] == ["text.ts"]
        assert docs[0].content == "let a = 1;\n"
        assert "blob.ts" in caplog.text

    def test_binary_file_not_discovered(self, tmp_path):
        (tmp_path / "blob.ts").write_bytes(b"abc\x00def")
        write_tree(tmp_path, {"text.ts": "let a = 1;\n"})

        assert list(FolderIngester().discover(tmp_path, [])) == ["text.ts"]

    def test_extensions_normalized(self):
        ingester = FolderIngester(extensions=["TS", ".Py"])
        assert ingester.extensions == {".ts", ".py"}


class TestChunkStore:
    def test_stream_yields_bounded_batches(self, tmp_path):
        write_tree(tmp_path, {f"f{i}.ts": f"const v{i} = {i};\n" for i in range(5)})
        store = ChunkStore(batch_size=2)

        batches = list(store.stream(tmp_path, []))

        assert [len(b) for b in batches] == [2, 2, 1]
        assert batches[0][0] == "const v0 = 0;\n"

    def test_stream_honours_excludes_and_size_limit(self, tmp_path, caplog):
        write_tree(
            tmp_path,
            {"keep.ts": "ok\n", "skip/me.ts": "no\n", "huge.ts": "x" * 64},
        )
        store = ChunkStore(FolderIngester(max_file_size_bytes=32))

        with caplog.at_level(logging.WARNING):
            batches = list(store.stream(tmp_path, ["skip"]))

        assert batches == [["ok\n"]]
        assert "huge.ts" in caplog.text

    def test_empty_directory_yields_nothing(self, tmp_path):
        assert list(ChunkStore().stream(tmp_path, [])) == []

    def test_chunks_never_span_files(self, tmp_path):
        write_tree(tmp_path, {"a.ts": "alpha\n", "b.ts": "beta\n"})
        store = ChunkStore(batch_size=2)

        assert list(store.iter_chunks(tmp_path, [])) == [["alpha\n", "beta\n"]]

    def test_split_with_one_off_parameters(self):
        store = ChunkStore(chunk_size=1000, chunk_overlap=0)
        text = "word " * 100

        default = store.split(text)
        small = store.split(text, chunk_size=100, chunk_overlap=10)

        assert default == [text]
        assert len(small) > 1
        assert all(len(c) <= 100 for c in small)
        assert store.chunk_size == 1000


def test_default_components_satisfy_protocols():
    assert isinstance(FolderIngester(), Ingester)
    assert isinstance(RecursiveTextSplitter(), TextSplitter)
