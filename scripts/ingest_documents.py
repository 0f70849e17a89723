from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.ragq.generation.providers.ollama_provider import OllamaProvider
from src.ragq.ingestion.document_loader import ingest_file
from src.ragq.retrieval.vector_stores.qdrant_store import QdrantStore
from src.ragq.utils.exceptions import RagqError
from src.ragq.utils.logging_config import setup_logging
from src.ragq.utils.settings import settings

logger = logging.getLogger(__name__)


async def run(args: argparse.Namespace) -> int:
    llm = OllamaProvider(
        host=args.ollama_url,
        embedding_model=args.embedding_model,
    )
    vector_store = QdrantStore(
        embedder=llm,
        url=args.qdrant_url,
        collection_name=args.collection_name,
        embedding_dim=args.embedding_dim,
    )
    try:
        ids = await ingest_file(args.source, vector_store, batch_size=args.batch_size)
    finally:
        await vector_store.close()

    for point_id in ids:
        print(point_id)
    return len(ids)


def main() -> None:
    """Bulk-load documents from a JSON/JSONL file into the collection."""
    parser = argparse.ArgumentParser(description="Ingest documents into the ragq collection")

    parser.add_argument(
        "source",
        type=Path,
        help="Path to a .json or .jsonl file of {content, metadata} documents",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=64,
        help="Documents per embedding/upsert batch",
    )
    parser.add_argument(
        "--embedding-model",
        default=settings.llm.embedding_model,
        help="Ollama embedding model",
    )
    parser.add_argument(
        "--embedding-dim",
        type=int,
        default=settings.qdrant.embedding_dim,
        help="Vector size of the embedding model",
    )
    parser.add_argument(
        "--ollama-url",
        default=settings.llm.ollama_url,
        help="Ollama server URL",
    )
    parser.add_argument(
        "--qdrant-url",
        default=settings.qdrant.url,
        help="Qdrant server URL",
    )
    parser.add_argument(
        "--collection-name",
        default=settings.qdrant.collection_name,
        help="Qdrant collection name",
    )
    parser.add_argument(
        "--log-level",
        default=settings.app.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    args = parser.parse_args()

    setup_logging(level=args.log_level)

    logger.info("Starting document ingestion")
    logger.info("Configuration:")
    logger.info("  Source: %s", args.source)
    logger.info("  Embedding model: %s", args.embedding_model)
    logger.info("  Qdrant URL: %s", args.qdrant_url)
    logger.info("  Collection: %s", args.collection_name)

    if not args.source.exists():
        logger.error(f"Source not found: {args.source}")
        sys.exit(1)

    try:
        count = asyncio.run(run(args))
    except (RagqError, ValueError) as e:
        logger.error(f"Ingestion failed: {e}")
        sys.exit(1)

    logger.info(f"✓ Ingested {count} documents")


if __name__ == "__main__":
    main()
