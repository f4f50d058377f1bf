"""Pydantic models for import requests and responses."""

from typing import Any

from pydantic import BaseModel, Field

from spreadsheet_ingest.utils.exceptions import IngestError


class ImportRequest(BaseModel):
    """Uploaded spreadsheet as sent by a client."""

    file_name: str = Field(
        ..., min_length=3, description="Original file name, used for its extension"
    )
    data: str = Field(
        ..., min_length=10, description="Base64-encoded file content"
    )


class ImportResponse(BaseModel):
    """Records parsed from an uploaded spreadsheet."""

    file_name: str = Field(..., description="Original file name")
    rows: list[dict[str, str]] = Field(
        ..., description="One record per data row, keyed by header label"
    )
    row_count: int = Field(..., description="Number of records in rows")


class ErrorDetail(BaseModel):
    """Error payload presented to the client when an import is rejected.

    This model provides structured error responses with:
    - Human-readable error message
    - Machine-readable error code
    - Optional additional details for debugging
    - Optional request ID for correlation
    """

    detail: str = Field(..., description="Human-readable error message")
    error_code: str | None = Field(
        default=None,
        description="Machine-readable error code (e.g., 'E1001')",
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details for debugging",
    )
    request_id: str | None = Field(
        default=None,
        description="Request ID for error correlation",
    )

    @classmethod
    def from_exception(
        cls,
        exc: IngestError,
        request_id: str | None = None,
    ) -> "ErrorDetail":
        """Create an ErrorDetail from an ingestion error.

        Args:
            exc: The raised error.
            request_id: Optional request ID.

        Returns:
            ErrorDetail instance.
        """
        return cls(
            detail=exc.message,
            error_code=exc.error_code.value,
            details=exc.details or None,
            request_id=request_id,
        )
