"""Library configuration using Pydantic Settings.

All configuration is loaded from environment variables.
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Table name parts are interpolated into DDL.
IDENTIFIER_PATTERN = r"^[A-Za-z0-9_]*$"


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class ScoringMode(str, Enum):
    """Where similarity scoring runs.

    ``auto`` pushes scoring into the database when the dialect supports it.
    """

    AUTO = "auto"
    CLIENT = "client"
    SERVER = "server"


class DatabaseSettings(BaseSettings):
    """Relational store configuration."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    url: SecretStr = Field(
        default=SecretStr("sqlite+aiosqlite:///./sqlvec.db"),
        description="SQLAlchemy async database URL (may embed credentials)",
    )
    echo: bool = Field(
        default=False,
        description="Log every SQL statement",
    )
    pool_pre_ping: bool = Field(
        default=True,
        description="Test pooled connections before use",
    )
    pool_timeout: float = Field(
        default=30.0,
        description="Seconds to wait for a pooled connection",
    )
    connect_timeout: float | None = Field(
        default=None,
        description="Driver connect timeout in seconds (passed through as-is)",
    )


class EmbeddingSettings(BaseSettings):
    """Embedding service configuration."""

    model_config = SettingsConfigDict(env_prefix="EMBEDDING_")

    base_url: str = Field(
        default="http://localhost:8080",
        description="Embedding service base URL",
    )
    model: str = Field(
        default="mixedbread-ai/mxbai-embed-large-v1",
        description="Embedding model name",
    )
    model_revision: str = Field(
        default="main",
        description="Model revision, part of the model identifier",
    )
    batch_size: int = Field(
        default=32,
        ge=1,
        description="Batch size for embedding requests",
    )
    max_input_length: int = Field(
        default=512,
        ge=1,
        description="Maximum characters per embedded segment",
    )
    dimensions: int | None = Field(
        default=None,
        ge=1,
        description="Embedding dimensions override",
    )
    timeout: float = Field(
        default=60.0,
        description="Request timeout in seconds",
    )


class VectorSettings(BaseSettings):
    """Vector category defaults."""

    model_config = SettingsConfigDict(env_prefix="VECTOR_")

    category: str = Field(
        default="general",
        description="Default category name",
    )
    dimension: int | None = Field(
        default=None,
        ge=1,
        description="Category dimension (defaults to the embedder's)",
    )
    engine: str = Field(
        default="InnoDB",
        pattern=IDENTIFIER_PATTERN,
        description="Storage engine for category tables (MySQL only)",
    )
    table_prefix: str = Field(
        default="vectors_",
        pattern=IDENTIFIER_PATTERN,
        description="Prefix for category table names",
    )
    table_suffix: str = Field(
        default="",
        pattern=IDENTIFIER_PATTERN,
        description="Suffix for category table names",
    )
    duplicate_threshold: float = Field(
        default=0.999,
        ge=-1.0,
        le=1.0,
        description="Similarity at or above which stored text counts as a duplicate",
    )
    search_limit: int = Field(
        default=10,
        ge=1,
        description="Default number of search results",
    )
    scoring: ScoringMode = Field(
        default=ScoringMode.AUTO,
        description="Similarity scoring placement",
    )


class Settings(BaseSettings):
    """Main settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    vector: VectorSettings = Field(default_factory=VectorSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
