from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
root_dir = Path(__file__).parent.parent.parent.parent
env_path = root_dir / ".env"

load_dotenv(dotenv_path=env_path, override=False)


def str_to_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes", "t", "y")


def str_to_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class AppConfig:
    """General application configuration."""
    app_env: str = os.getenv("APP_ENV", "development")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


@dataclass
class QdrantConfig:
    """Qdrant vector store configuration."""
    url: str = os.getenv("QDRANT_URL", "http://localhost:6333")
    api_key: Optional[str] = os.getenv("QDRANT_API_KEY") or None

    collection_name: str = os.getenv("QDRANT_COLLECTION_NAME", "embeddings")
    # nomic-embed-text produces 768-dim vectors
    embedding_dim: int = int(os.getenv("QDRANT_EMBEDDING_DIM", "768"))
    distance_metric: str = os.getenv("QDRANT_DISTANCE_METRIC", "cosine")
    timeout_s: int = int(os.getenv("QDRANT_TIMEOUT_S", "60"))


@dataclass
class LLMConfig:
    """Ollama model configuration."""
    ollama_url: str = os.getenv("OLLAMA_URL", "http://localhost:11434")
    model_name: str = os.getenv("LLM_MODEL_NAME", "llama3")
    embedding_model: str = os.getenv("EMBEDDING_MODEL", "nomic-embed-text")
    temperature: Optional[float] = (
        float(os.environ["LLM_TEMPERATURE"]) if os.getenv("LLM_TEMPERATURE") else None
    )
    prompt_template: str = os.getenv("PROMPT_TEMPLATE", "stuff")


@dataclass
class RetrievalConfig:
    """Retrieval configuration."""
    top_k: int = int(os.getenv("TOP_K_RETRIEVE", "4"))


@dataclass
class APIConfig:
    """API server configuration."""
    host: str = os.getenv("API_HOST", "0.0.0.0")
    port: int = int(os.getenv("API_PORT", "8000"))
    reload: bool = str_to_bool(os.getenv("API_RELOAD", "false"))
    cors_origins: List[str] = field(
        default_factory=lambda: str_to_list(os.getenv("CORS_ORIGINS", "*"))
    )


@dataclass
class Settings:
    """Main settings object containing all configuration sections."""
    app: AppConfig
    qdrant: QdrantConfig
    llm: LLMConfig
    retrieval: RetrievalConfig
    api: APIConfig

    @classmethod
    def load(cls) -> Settings:
        """Load settings from environment variables."""
        return cls(
            app=AppConfig(),
            qdrant=QdrantConfig(),
            llm=LLMConfig(),
            retrieval=RetrievalConfig(),
            api=APIConfig(),
        )


settings = Settings.load()


if __name__ == "__main__":
    print("=== Settings Debug ===")
    print(f"Root dir: {root_dir}")
    print(f".env path: {env_path}")
    print(f".env exists: {env_path.exists()}")
    print(f"\nQdrant URL: {settings.qdrant.url}")
    print(f"Collection: {settings.qdrant.collection_name}")
    print(f"Ollama URL: {settings.llm.ollama_url}")
    print(f"LLM model: {settings.llm.model_name}")
    print(f"Embedding model: {settings.llm.embedding_model}")
