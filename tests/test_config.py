"""Tests for library configuration."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError as PydanticValidationError

from sqlvec.config import (
    DatabaseSettings,
    EmbeddingSettings,
    Environment,
    ScoringMode,
    Settings,
    VectorSettings,
    get_settings,
)


class TestDatabaseSettings:
    """Tests for database configuration."""

    def test_default_values(self) -> None:
        """Default database is a local SQLite file."""
        settings = DatabaseSettings()
        assert settings.url.get_secret_value() == "sqlite+aiosqlite:///./sqlvec.db"
        assert settings.echo is False
        assert settings.pool_pre_ping is True
        assert settings.connect_timeout is None

    def test_env_override(self) -> None:
        """Environment variables override defaults."""
        with patch.dict(
            os.environ,
            {"DB_URL": "mysql+aiomysql://user:pw@db/vectors", "DB_CONNECT_TIMEOUT": "5"},
        ):
            settings = DatabaseSettings()
            assert settings.url.get_secret_value() == "mysql+aiomysql://user:pw@db/vectors"
            assert settings.connect_timeout == 5.0

    def test_url_hidden_in_repr(self) -> None:
        """Credentials in the URL do not leak into repr."""
        settings = DatabaseSettings(url="mysql+aiomysql://user:hunter2@db/vectors")
        assert "hunter2" not in repr(settings)


class TestEmbeddingSettings:
    """Tests for embedding configuration."""

    def test_default_values(self) -> None:
        """Default values for embedding service."""
        settings = EmbeddingSettings()
        assert settings.base_url == "http://localhost:8080"
        assert settings.model == "mixedbread-ai/mxbai-embed-large-v1"
        assert settings.model_revision == "main"
        assert settings.batch_size == 32
        assert settings.max_input_length == 512

    def test_env_override(self) -> None:
        """Environment variables override defaults."""
        with patch.dict(os.environ, {"EMBEDDING_BATCH_SIZE": "64"}):
            settings = EmbeddingSettings()
            assert settings.batch_size == 64

    def test_max_input_length_positive(self) -> None:
        """Segment length must be positive."""
        with pytest.raises(PydanticValidationError):
            EmbeddingSettings(max_input_length=0)


class TestVectorSettings:
    """Tests for vector category configuration."""

    def test_default_values(self) -> None:
        """Default category settings."""
        settings = VectorSettings()
        assert settings.category == "general"
        assert settings.dimension is None
        assert settings.engine == "InnoDB"
        assert settings.table_prefix == "vectors_"
        assert settings.table_suffix == ""
        assert settings.duplicate_threshold == 0.999
        assert settings.search_limit == 10
        assert settings.scoring == ScoringMode.AUTO

    def test_scoring_from_env(self) -> None:
        """Scoring mode can be set via string."""
        with patch.dict(os.environ, {"VECTOR_SCORING": "client"}):
            settings = VectorSettings()
            assert settings.scoring == ScoringMode.CLIENT

    def test_table_parts_must_be_identifiers(self) -> None:
        """Prefix and suffix may only hold identifier characters."""
        with pytest.raises(PydanticValidationError):
            VectorSettings(table_prefix="vectors; DROP")
        with pytest.raises(PydanticValidationError):
            VectorSettings(table_suffix="-x")

    def test_duplicate_threshold_range(self) -> None:
        """Duplicate threshold is a cosine value."""
        with pytest.raises(PydanticValidationError):
            VectorSettings(duplicate_threshold=1.5)


class TestSettings:
    """Tests for main settings."""

    def test_default_environment(self) -> None:
        """Default environment is development."""
        settings = Settings()
        assert settings.environment == Environment.DEVELOPMENT

    def test_nested_settings_loaded(self) -> None:
        """Nested settings are initialized."""
        settings = Settings()
        assert isinstance(settings.database, DatabaseSettings)
        assert isinstance(settings.embedding, EmbeddingSettings)
        assert isinstance(settings.vector, VectorSettings)

    def test_environment_enum(self) -> None:
        """Environment can be set via string."""
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            settings = Settings()
            assert settings.environment == Environment.PRODUCTION


class TestGetSettings:
    """Tests for settings singleton."""

    def test_returns_settings_instance(self) -> None:
        """get_settings returns a Settings instance."""
        get_settings.cache_clear()
        settings = get_settings()
        assert isinstance(settings, Settings)

    def test_caching(self) -> None:
        """Settings are cached."""
        get_settings.cache_clear()
        settings1 = get_settings()
        settings2 = get_settings()
        assert settings1 is settings2
