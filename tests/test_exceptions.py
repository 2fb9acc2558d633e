"""Tests for library exceptions."""

import pytest

from sqlvec.exceptions import (
    ConfigurationError,
    DimensionMismatchError,
    EmbeddingError,
    ErrorCode,
    InvalidStateError,
    NotFoundError,
    SchemaError,
    SqlVecError,
    StoreError,
    ValidationError,
)


class TestErrorCode:
    """Tests for error codes."""

    def test_error_code_format(self) -> None:
        """Error codes follow VEC-XXXX format."""
        for code in ErrorCode:
            assert code.value.startswith("VEC-")
            assert len(code.value) == 8

    def test_error_code_uniqueness(self) -> None:
        """All error codes are unique."""
        codes = [code.value for code in ErrorCode]
        assert len(codes) == len(set(codes))


class TestSqlVecError:
    """Tests for base exception."""

    def test_basic_exception(self) -> None:
        """Base exception stores message and code."""
        error = SqlVecError("Something went wrong")
        assert error.message == "Something went wrong"
        assert error.code == ErrorCode.INTERNAL_ERROR
        assert error.details == {}

    def test_exception_with_details(self) -> None:
        """Exception can have additional details."""
        error = SqlVecError(
            "Validation failed",
            code=ErrorCode.VALIDATION_ERROR,
            details={"field": "vector"},
        )
        assert error.details == {"field": "vector"}

    def test_to_dict(self) -> None:
        """Exception converts to a serializable dict."""
        error = SqlVecError(
            "Something went wrong",
            details={"table": "vectors_docs"},
        )

        assert error.to_dict() == {
            "error": {
                "code": "VEC-1000",
                "message": "Something went wrong",
                "details": {"table": "vectors_docs"},
            }
        }

    def test_str_representation(self) -> None:
        """Exception string is the message."""
        assert str(SqlVecError("Test error")) == "Test error"

    def test_code_is_keyword_only(self) -> None:
        """Codes cannot be passed positionally."""
        with pytest.raises(TypeError):
            SqlVecError("x", ErrorCode.STORE_ERROR)  # type: ignore[misc]

    def test_subclass_code_override(self) -> None:
        """Any subclass accepts a narrower code."""
        error = StoreError("Gone", code=ErrorCode.RECORD_NOT_FOUND)
        assert error.code == ErrorCode.RECORD_NOT_FOUND
        assert StoreError.default_code == ErrorCode.STORE_ERROR


class TestConfigurationError:
    """Tests for configuration exception."""

    def test_default_code(self) -> None:
        """ConfigurationError has correct default code."""
        error = ConfigurationError("Missing driver")
        assert error.code == ErrorCode.CONFIGURATION_ERROR
        assert isinstance(error, SqlVecError)


class TestValidationErrors:
    """Tests for validation exceptions."""

    def test_default_code(self) -> None:
        """ValidationError has correct default code."""
        assert ValidationError("Invalid input").code == ErrorCode.VALIDATION_ERROR

    def test_zero_magnitude_code(self) -> None:
        """ValidationError can carry a narrower code."""
        error = ValidationError("Zero vector", code=ErrorCode.ZERO_MAGNITUDE)
        assert error.code == ErrorCode.ZERO_MAGNITUDE

    def test_dimension_mismatch(self) -> None:
        """DimensionMismatchError reports both lengths."""
        error = DimensionMismatchError(expected=4, actual=3, details={"table": "t"})

        assert isinstance(error, ValidationError)
        assert error.code == ErrorCode.DIMENSION_MISMATCH
        assert error.message == "Vector has 3 dimensions, expected 4"
        assert error.details == {"expected": 4, "actual": 3, "table": "t"}


class TestStoreErrors:
    """Tests for persistence exceptions."""

    def test_default_code(self) -> None:
        """StoreError has correct default code."""
        assert StoreError("Connection failed").code == ErrorCode.STORE_ERROR

    def test_subclass_codes(self) -> None:
        """Store failures have their own codes and share a base."""
        cases = [
            (SchemaError("x"), ErrorCode.SCHEMA_ERROR),
            (NotFoundError("x"), ErrorCode.RECORD_NOT_FOUND),
            (InvalidStateError("x"), ErrorCode.CATEGORY_NOT_INITIALIZED),
        ]
        for error, code in cases:
            assert isinstance(error, StoreError)
            assert error.code == code


class TestEmbeddingError:
    """Tests for embedding exception."""

    def test_default_code(self) -> None:
        """EmbeddingError has correct default code."""
        error = EmbeddingError("Service unavailable")
        assert error.code == ErrorCode.EMBEDDING_SERVICE_ERROR
