"""
Electro - Common Schemas.

Shared Pydantic models used across all modules.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


# =============================================================================
# Error Responses
# =============================================================================


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(default=None, description="Additional context")
    request_id: UUID | None = Field(default=None, description="Request ID for tracing")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: ErrorDetail


# =============================================================================
# Operation Results
# =============================================================================


class OperationResult(BaseModel, Generic[T]):
    """Uniform success/error shape returned by gateway and cache operations.

    `error` is always a localized, user-facing message. `code` carries the
    machine-readable taxonomy code when the operation failed.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    code: str | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> "OperationResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, code: str | None = None) -> "OperationResult[T]":
        return cls(success=False, error=error, code=code)


# =============================================================================
# Documents (camelCase on the wire)
# =============================================================================


class CamelModel(BaseModel):
    """Base for store documents: snake_case attributes, camelCase JSON keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self, **kwargs: Any) -> dict[str, Any]:
        """Serialize for the document store."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)


class TimestampMixin(CamelModel):
    """Mixin for created/updated timestamps."""

    created_at: datetime | None = None
    updated_at: datetime | None = None


# =============================================================================
# Health Check
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., pattern="^(healthy|degraded)$")
    version: str
    features: dict[str, bool]
    app_env: str | None = None
    is_production: bool | None = None
