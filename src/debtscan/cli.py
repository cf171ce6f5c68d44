"""CLI entry point for debtscan."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from debtscan.analysis.summary import last_summary_timestamp
from debtscan.config import AnalysisConfig
from debtscan.errors import DebtScanError
from debtscan.models import AnalysisFailure, ProgressEvent
from debtscan.storage import AnalysisStateStore, EmbeddingCache

logger = logging.getLogger(__name__)


def print_progress(event: ProgressEvent) -> None:
    """Progress line for each analyzed file."""
    if not event.current_file:
        logger.info(f"Starting analysis of {event.total} files")
        return
    logger.info(
        f"[{event.progress:5.1f}%] {event.analyzed}/{event.total}  {event.current_file}"
    )


def analyze(config: AnalysisConfig, summarize: bool = True) -> None:
    """Run the full pipeline over a directory.

    Args:
        config: Run configuration
        summarize: Whether to ask the model for a written summary
    """
    from debtscan.pipeline import create_embedder, create_generator, run_pipeline

    logger.info("Loading embedding model...")
    embedder = create_embedder(config)
    provider = create_generator(config)

    report = asyncio.run(
        run_pipeline(config, embedder, provider, print_progress, summarize=summarize)
    )

    metrics = report.metrics
    logger.info("")
    logger.info(
        f"Analyzed {metrics.analyzed_files} files, {metrics.failed_files} failed, "
        f"{metrics.total_issues} issues -> {config.output_dir}"
    )
    if metrics.project_score is not None:
        logger.info(
            f"Debt score: {metrics.project_score.score}/100 "
            f"({metrics.project_score.priority} priority), "
            f"{metrics.average_issues_per_1000_lines} issues per 1000 lines"
        )
    if report.summary_path:
        logger.info(f"Summary: {report.summary_path}")


def summarize(config: AnalysisConfig) -> None:
    """Recompute metrics and the summary from persisted results."""
    from debtscan.generators import ValidatingGenerator
    from debtscan.pipeline import create_generator, summarize_results

    generator = ValidatingGenerator(
        create_generator(config), config.max_retries, config.retry_delay
    )
    report = asyncio.run(summarize_results(config, generator))
    if not report.results:
        logger.error(f"No results found in {config.output_dir}")
        sys.exit(1)
    logger.info(f"Summary: {report.summary_path}")


def results(output_dir: Path) -> None:
    """List every persisted result with its status."""
    store = AnalysisStateStore(output_dir)
    records = store.load_results()
    if not records:
        print(f"No results in {output_dir}")
        return

    for path, record in records.items():
        if isinstance(record.analysis, AnalysisFailure):
            status = f"ERROR  {record.analysis.error}"
        else:
            issues = record.analysis.payload.get("totalIssues", "?")
            status = f"ok     {issues} issues"
        print(f"{path:<60} {status}")


def serve(config: AnalysisConfig, transport: str = "stdio") -> None:
    """Start MCP server over a finished run.

    Args:
        config: Run configuration (locates the cache and output directory)
        transport: Transport protocol (stdio or sse)
    """
    # Import here to avoid loading MCP unless needed
    from typing import Literal, cast

    from debtscan.server import create_mcp_server

    logger.info(f"Serving {config.directory} via {transport}")
    mcp = create_mcp_server(config)
    mcp.run(transport=cast(Literal["stdio", "sse", "streamable-http"], transport))


def deck(config: AnalysisConfig) -> None:
    """Launch the Flight Deck TUI."""
    from debtscan.flight_deck import main as flight_deck_main

    flight_deck_main(config)


def info(config: AnalysisConfig, model_name: str) -> None:
    """Show cache and progress information for a directory."""
    cache = EmbeddingCache(config.cache_dir, config.chunk_size, config.chunk_overlap)
    cache_path = cache.path_for(config.directory_key, config.exclude_patterns, model_name)
    store = AnalysisStateStore(config.output_dir)
    state = store.load(config.exclude_patterns)

    print(f"Directory: {config.directory}")
    print(f"  Excludes: {', '.join(config.exclude_patterns) or '(none)'}")
    print("")
    print("Embedding cache:")
    print(f"  Model: {model_name}")
    print(f"  File: {cache_path}")
    if cache_path.exists():
        entry = cache.load(config.directory_key, config.exclude_patterns, model_name)
        if entry is not None:
            print(f"  Chunks: {len(entry)}")
            print(f"  Created: {entry.metadata.timestamp}")
        else:
            print("  Status: stale")
    else:
        print("  Status: missing")
    print("")
    print("Analysis:")
    if not state.belongs_to(str(config.directory.resolve())):
        print(f"  State belongs to {state.directory}; the next run starts fresh")
    print(f"  Analyzed files: {len(state.analyzed_files)}")
    if state.total_files is not None:
        print(f"  Last run total: {state.total_files}")
    print(f"  Results: {store.results_dir}")

    print(f"  Last summary: {last_summary_timestamp(config.output_dir) or 'never'}")


def _default_model_name(config: AnalysisConfig) -> str:
    if config.embedding_model:
        return config.embedding_model
    if config.embedding_provider == "ollama":
        from debtscan.embedders.ollama import OllamaEmbedder

        return OllamaEmbedder.DEFAULT_MODEL
    from debtscan.embedders.sentence_transformer import SentenceTransformerEmbedder

    return SentenceTransformerEmbedder.DEFAULT_MODEL


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="debtscan",
        description="debtscan - retrieval-augmented code debt analysis",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # analyze command
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze every source file in a directory (resumes interrupted runs)",
    )
    analyze_parser.add_argument("directory", type=Path, help="Source tree to analyze")
    AnalysisConfig.add_cli_arguments(analyze_parser)
    analyze_parser.add_argument(
        "--no-cache",
        dest="use_cache",
        action="store_false",
        default=None,
        help="Re-embed even if a valid cache exists",
    )
    analyze_parser.add_argument(
        "--no-summary", action="store_true", help="Skip the written summary"
    )

    # summarize command
    summarize_parser = subparsers.add_parser(
        "summarize",
        help="Recompute metrics and summary from persisted results",
    )
    AnalysisConfig.add_cli_arguments(summarize_parser)

    # results command
    results_parser = subparsers.add_parser("results", help="List per-file results")
    results_parser.add_argument("--output-dir", type=Path, help="Output directory of a run")

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Start MCP server over an analyzed directory",
    )
    serve_parser.add_argument("directory", type=Path, help="Analyzed source tree")
    AnalysisConfig.add_cli_arguments(serve_parser)
    serve_parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default="stdio",
        help="Transport protocol (default: stdio)",
    )

    # deck command
    deck_parser = subparsers.add_parser(
        "deck",
        help="Launch Flight Deck TUI for interactive runs",
    )
    AnalysisConfig.add_cli_arguments(deck_parser)

    # info command
    info_parser = subparsers.add_parser(
        "info",
        help="Show cache and progress information for a directory",
    )
    info_parser.add_argument("directory", type=Path, help="Source tree")
    AnalysisConfig.add_cli_arguments(info_parser)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    try:
        if args.command == "results":
            results(args.output_dir or AnalysisConfig().output_dir)
            return

        config = AnalysisConfig.from_args(args)

        if args.command == "analyze":
            analyze(config, summarize=not args.no_summary)
        elif args.command == "summarize":
            summarize(config)
        elif args.command == "serve":
            serve(config, args.transport)
        elif args.command == "deck":
            deck(config)
        elif args.command == "info":
            info(config, _default_model_name(config))
    except ValidationError as e:
        logger.error(f"Invalid configuration:\n{e}")
        sys.exit(2)
    except (DebtScanError, OSError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
