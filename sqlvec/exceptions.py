"""Library exception hierarchy.

Every error raised by sqlvec is a SqlVecError carrying an ErrorCode, so
callers can branch on ``error.code`` or serialize with ``to_dict()``.
Subclasses only pick a default code; any of them accepts ``code=`` to
narrow it further (a zero vector is a ValidationError with
``ZERO_MAGNITUDE``).
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "VEC-1000"
    CONFIGURATION_ERROR = "VEC-1001"
    VALIDATION_ERROR = "VEC-1002"

    # Vector errors (2xxx)
    DIMENSION_MISMATCH = "VEC-2001"
    ZERO_MAGNITUDE = "VEC-2002"

    # Store errors (3xxx)
    STORE_ERROR = "VEC-3000"
    SCHEMA_ERROR = "VEC-3001"
    RECORD_NOT_FOUND = "VEC-3002"
    CATEGORY_NOT_INITIALIZED = "VEC-3003"

    # Embedding errors (4xxx)
    EMBEDDING_SERVICE_ERROR = "VEC-4000"


class SqlVecError(Exception):
    """Base exception for all sqlvec errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code (``default_code`` unless given).
        details: Context such as table, id or dialect.
    """

    default_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serializable dictionary."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(SqlVecError):
    """Bad URL, missing driver or unsupported scoring backend."""

    default_code = ErrorCode.CONFIGURATION_ERROR


class ValidationError(SqlVecError):
    """Input rejected before touching the store."""

    default_code = ErrorCode.VALIDATION_ERROR


class DimensionMismatchError(ValidationError):
    """Vector length differs from the expected dimension."""

    default_code = ErrorCode.DIMENSION_MISMATCH

    def __init__(
        self,
        expected: int,
        actual: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Vector has {actual} dimensions, expected {expected}",
            details={"expected": expected, "actual": actual, **(details or {})},
        )


class StoreError(SqlVecError):
    """Persistence operation failed."""

    default_code = ErrorCode.STORE_ERROR


class SchemaError(StoreError):
    """Schema creation or removal failed."""

    default_code = ErrorCode.SCHEMA_ERROR


class NotFoundError(StoreError):
    """Referenced record does not exist."""

    default_code = ErrorCode.RECORD_NOT_FOUND


class InvalidStateError(StoreError):
    """Operation attempted on a category that is not initialized."""

    default_code = ErrorCode.CATEGORY_NOT_INITIALIZED


class EmbeddingError(SqlVecError):
    """Embedding service unreachable or returned something unusable."""

    default_code = ErrorCode.EMBEDDING_SERVICE_ERROR
