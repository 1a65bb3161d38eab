"""
Environment settings and configuration management.

Provides centralized configuration using Pydantic models
for type safety and validation.
"""

import os
from typing import Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class EmbeddingConfig(BaseSettings):
    """Embedding model configuration."""

    model_name: str = Field(default="text-embedding-3-small")
    spacy_model: str = Field(default="en_core_web_sm")
    enable_fallback: bool = Field(default=True)
    timeout: float = Field(default=30.0, gt=0)

    model_config = SettingsConfigDict(env_prefix="NOTERAG_EMBEDDING_", extra="ignore")


class CacheConfig(BaseSettings):
    """Two-tier embedding cache configuration."""

    directory: str = Field(default=os.path.join(".", "cache", "embeddings"))
    memory_max_items: int = Field(default=1000, gt=0)
    memory_max_bytes: int = Field(default=32 * 1024 * 1024, gt=0)
    persistent_enabled: bool = Field(default=True)

    model_config = SettingsConfigDict(env_prefix="NOTERAG_CACHE_", extra="ignore")


class DataConfig(BaseSettings):
    """Text chunking configuration."""

    chunk_size: int = Field(default=200, gt=0)
    # Character budget kept for reference only; overlap is driven by overlap_words
    chunk_overlap: int = Field(default=50, ge=0)
    overlap_words: int = Field(default=5, ge=0)
    retrieval_unit: Literal["chunk", "sentence"] = Field(default="chunk")

    model_config = SettingsConfigDict(env_prefix="NOTERAG_DATA_", extra="ignore")


class IngestionConfig(BaseSettings):
    """Ingestion pipeline configuration."""

    max_concurrent_documents: int = Field(default=4, gt=0)

    model_config = SettingsConfigDict(env_prefix="NOTERAG_INGESTION_", extra="ignore")


class RetrievalConfig(BaseSettings):
    """Retrieval and reranking configuration."""

    default_limit: int = Field(default=3, gt=0)
    similarity_weight: float = Field(default=0.7, ge=0, le=1)
    lexical_weight: float = Field(default=0.3, ge=0, le=1)

    model_config = SettingsConfigDict(env_prefix="NOTERAG_RETRIEVAL_", extra="ignore")


class LLMConfig(BaseSettings):
    """Large Language Model configuration."""

    model_name: str = Field(default="gpt-4o-mini")
    temperature: float = Field(default=0.0)
    max_tokens: int = Field(default=1000)
    timeout: int = Field(default=120)

    model_config = SettingsConfigDict(env_prefix="NOTERAG_LLM_", extra="ignore")


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO")
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    file_path: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(env_prefix="NOTERAG_LOG_", extra="ignore")


class RAGConfig(BaseSettings):
    """Main NoteRAG configuration."""

    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # API Keys
    openai_api_key: Optional[str] = Field(default=None, validation_alias="OPENAI_API_KEY")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields from .env
        populate_by_name=True,
    )


# Process default; components also accept an explicit RAGConfig
config = RAGConfig()


def get_config() -> RAGConfig:
    """Get the default configuration instance."""
    return config


def validate_api_keys(rag_config: Optional[RAGConfig] = None) -> None:
    """Validate that required API keys are present."""
    rag_config = rag_config or config
    required_keys = ["openai_api_key"]
    missing_keys = []

    for key in required_keys:
        if not getattr(rag_config, key):
            missing_keys.append(key)

    if missing_keys:
        raise ValueError(f"Missing required API keys: {', '.join(missing_keys)}")
