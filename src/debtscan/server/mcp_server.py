"""FastMCP server exposing a finished debtscan run."""

import json

from mcp.server.fastmcp import FastMCP

from debtscan.config import AnalysisConfig
from debtscan.models import AnalysisFailure
from debtscan.pipeline import create_embedder
from debtscan.retrieval import VectorIndex
from debtscan.storage import AnalysisStateStore, EmbeddingCache


def create_mcp_server(config: AnalysisConfig) -> FastMCP:
    """Create an MCP server for one analyzed directory.

    Design: 1 process = 1 source tree. The embedding cache must already
    exist (run ``debtscan analyze`` first); ``recall`` reports its absence
    instead of embedding on the fly.

    Args:
        config: Configuration the directory was analyzed with

    Returns:
        Configured FastMCP server instance
    """
    mcp = FastMCP(
        name="debtscan",
    )

    # Loaded once per server
    embedder = create_embedder(config)
    cache = EmbeddingCache(config.cache_dir, config.chunk_size, config.chunk_overlap)
    entry = cache.load(config.directory_key, config.exclude_patterns, embedder.model_name)
    index = VectorIndex.build(entry.chunks, entry.vectors) if entry is not None else None
    store = AnalysisStateStore(config.output_dir)

    @mcp.tool()
    async def recall(query: str, limit: int = 10) -> str:
        """Semantic search across the analyzed codebase.

        Use this to find code by concept, not just keyword.

        Args:
            query: Natural language description of what you're looking for
            limit: Maximum number of results to return (default: 10)

        Returns:
            Ranked list of code chunks with similarity scores
        """
        if index is None:
            return "No embedding cache for this directory. Run `debtscan analyze` first."

        query_embedding = (await embedder.embed([query]))[0]
        hits = index.search(query_embedding, limit)
        if not hits:
            return f"No results found for: {query}"

        lines = []
        for i, hit in enumerate(hits, 1):
            # Truncate long text snippets
            text = hit.text[:200].replace("\n", " ")
            if len(hit.text) > 200:
                text += "..."
            lines.append(f"{i}. [{hit.similarity:.3f}] chunk #{hit.index}")
            lines.append(f"   {text}")
            lines.append("")

        return "\n".join(lines)

    @mcp.tool()
    def analysis(path: str) -> str:
        """Read the code debt analysis of one file.

        Args:
            path: File path relative to the analyzed directory (e.g. "src/app.ts")

        Returns:
            The analysis as JSON, or the error recorded for the file
        """
        record = store.load_result(path)
        if record is None:
            return f"Error: No analysis for: {path}"
        if isinstance(record.analysis, AnalysisFailure):
            return f"Analysis failed: {record.analysis.error}"
        return json.dumps(record.analysis.payload, indent=2)

    @mcp.tool()
    def progress() -> str:
        """Report how many files have been analyzed so far."""
        state = store.load(config.exclude_patterns)
        records = store.load_results()
        failed = sum(1 for r in records.values() if not r.succeeded)
        total = state.total_files if state.total_files is not None else "?"
        return (
            f"Analyzed files: {len(state.analyzed_files)}\n"
            f"Failed: {failed}\n"
            f"Last run total: {total}"
        )

    return mcp
