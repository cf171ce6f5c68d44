"""Pipeline driver: cache -> index -> analysis -> metrics -> summary."""

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from debtscan.analysis import (
    AnalysisStateMachine,
    ProgressCallback,
    SummaryWriter,
    build_folder_structure,
    compute_metrics,
)
from debtscan.chunkers import ChunkStore
from debtscan.config import AnalysisConfig
from debtscan.errors import ConfigError
from debtscan.generators import OllamaGenerator, ValidatingGenerator
from debtscan.ingesters import FolderIngester
from debtscan.models import Analysis, AnalysisMetrics, FolderNode
from debtscan.protocols import EmbeddingProvider, GenerationProvider
from debtscan.retrieval import Retriever, VectorIndex
from debtscan.storage import AnalysisStateStore, EmbeddingCache

logger = logging.getLogger(__name__)


@dataclass
class DocumentIndex:
    """Chunks, their vectors and a retriever over them."""

    chunks: list[str]
    vectors: np.ndarray
    retriever: Retriever
    from_cache: bool = False


@dataclass
class RunReport:
    """What a full pipeline run produced."""

    results: dict[str, Analysis]
    metrics: AnalysisMetrics
    folders: FolderNode
    summary_path: Path | None = None


def create_embedder(config: AnalysisConfig) -> EmbeddingProvider:
    """Pick the embedding backend named in the config."""
    if config.embedding_provider == "ollama":
        from debtscan.embedders import OllamaEmbedder

        return OllamaEmbedder(
            config.embedding_model,
            base_url=config.ollama_base_url,
            timeout=config.request_timeout,
        )

    from debtscan.embedders import SentenceTransformerEmbedder

    return SentenceTransformerEmbedder(config.embedding_model)


def create_generator(config: AnalysisConfig) -> GenerationProvider:
    return OllamaGenerator(
        config.generation_model,
        base_url=config.ollama_base_url,
        timeout=config.request_timeout,
    )


def create_ingester(config: AnalysisConfig) -> FolderIngester:
    return FolderIngester(config.extensions, config.max_file_size_bytes)


def load_opinions(path: Path) -> str:
    """Read the project standards text; a missing file means no standards."""
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning(f"No opinions loaded from {path}: {e}")
        return ""


async def embed_chunks(
    chunk_store: ChunkStore,
    embedder: EmbeddingProvider,
    directory: Path,
    exclude_patterns: list[str],
) -> tuple[list[str], np.ndarray]:
    """Chunk the tree batch by batch and embed each batch.

    Each embed call carries at most ``chunk_store.batch_size`` texts.
    Embedding errors propagate.
    """
    chunks: list[str] = []
    blocks: list[np.ndarray] = []
    step = chunk_store.batch_size

    for batch_chunks in chunk_store.iter_chunks(directory, exclude_patterns):
        for start in range(0, len(batch_chunks), step):
            texts = batch_chunks[start:start + step]
            vectors = np.asarray(await embedder.embed(texts), dtype=np.float32)
            if len(vectors) != len(texts):
                raise ValueError(
                    f"embedder returned {len(vectors)} vectors for {len(texts)} texts"
                )
            chunks.extend(texts)
            blocks.append(vectors)
        logger.info(f"Embedded {len(chunks)} chunks so far")

    if not blocks:
        return chunks, np.zeros((0, 0), dtype=np.float32)
    return chunks, np.vstack(blocks)


async def prepare_index(
    config: AnalysisConfig,
    embedder: EmbeddingProvider,
    cache: EmbeddingCache | None = None,
    chunk_store: ChunkStore | None = None,
) -> DocumentIndex:
    """Return the index for the configured tree, embedding only on a cache miss."""
    cache = cache or EmbeddingCache(config.cache_dir, config.chunk_size, config.chunk_overlap)
    directory = config.directory_key
    excludes = list(config.exclude_patterns)

    if not config.use_cache:
        cache.clear(directory, excludes, embedder.model_name)
    else:
        entry = cache.load(directory, excludes, embedder.model_name)
        if entry is not None:
            index = VectorIndex.build(entry.chunks, entry.vectors)
            return DocumentIndex(entry.chunks, entry.vectors, Retriever(index, embedder), True)

    chunk_store = chunk_store or ChunkStore(
        create_ingester(config), config.chunk_size, config.chunk_overlap, config.batch_size
    )
    logger.info(f"Embedding {config.directory} with {embedder.model_name}")
    chunks, vectors = await embed_chunks(chunk_store, embedder, config.directory, excludes)
    cache.store(directory, excludes, vectors, chunks, embedder.model_name)

    index = VectorIndex.build(chunks, vectors)
    return DocumentIndex(chunks, vectors, Retriever(index, embedder), False)


async def run_pipeline(
    config: AnalysisConfig,
    embedder: EmbeddingProvider,
    provider: GenerationProvider,
    progress_callback: ProgressCallback | None = None,
    summarize: bool = True,
) -> RunReport:
    """Run the whole pipeline for ``config.directory``.

    Per-file failures end up in the results; embedding and disk failures
    propagate.

    Raises:
        ConfigError: if the configured directory does not exist
    """
    if not config.directory.is_dir():
        raise ConfigError(f"Not a directory: {config.directory}")

    generator = ValidatingGenerator(provider, config.max_retries, config.retry_delay)
    store = AnalysisStateStore(config.output_dir)

    retriever = None
    if config.top_k > 0:
        retriever = (await prepare_index(config, embedder)).retriever

    machine = AnalysisStateMachine(
        generator,
        store,
        ingester=create_ingester(config),
        retriever=retriever,
        opinions=load_opinions(config.opinions_path),
        top_k=config.top_k,
        progress_callback=progress_callback,
    )
    await machine.analyze(config.directory, list(config.exclude_patterns))

    return await summarize_results(config, generator, summarize)


async def summarize_results(
    config: AnalysisConfig,
    generator: ValidatingGenerator,
    summarize: bool = True,
) -> RunReport:
    """Compute metrics from persisted results and optionally write the summary."""
    records = AnalysisStateStore(config.output_dir).load_results()
    results = {path: record.analysis for path, record in records.items()}
    line_counts = {
        path: record.line_count
        for path, record in records.items()
        if record.line_count is not None
    }
    metrics = compute_metrics(results, line_counts)
    folders = build_folder_structure(
        results, root_name=config.directory.name or ".", line_counts=line_counts
    )
    report = RunReport(results=results, metrics=metrics, folders=folders)

    if summarize and results:
        report.summary_path = await SummaryWriter(generator, config.output_dir).write(
            results, metrics, folders
        )
    return report
