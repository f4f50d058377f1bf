"""Centralized exception classes for spreadsheet ingestion.

This module provides a hierarchy of custom exceptions with error codes,
HTTP status code mapping, and structured error details so that callers
can branch on the failure kind instead of matching message text.

Exception Hierarchy:
    IngestError (base)
    ├── SpreadsheetError
    │   ├── MalformedArchiveError
    │   ├── UnsupportedCompressionError
    │   ├── MissingWorkbookPartError
    │   └── UnsupportedFileTypeError
    ├── UploadError
    │   ├── EmptyInputError
    │   ├── FileTooLargeError
    │   └── EncodingError
    └── RequestValidationError

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the package.

    Error codes are grouped by category:
    - E1xxx: File/content errors
    - E2xxx: Request errors
    - E9xxx: Internal/unexpected errors
    """

    # File/content errors (E1xxx)
    MALFORMED_ARCHIVE = "E1001"
    UNSUPPORTED_COMPRESSION = "E1002"
    MISSING_WORKBOOK_PART = "E1003"
    UNSUPPORTED_FILE_TYPE = "E1004"
    EMPTY_INPUT = "E1005"
    FILE_TOO_LARGE = "E1006"
    ENCODING_ERROR = "E1007"

    # Request errors (E2xxx)
    INVALID_REQUEST = "E2001"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"


class HTTPStatusMixin:
    """Mixin that provides HTTP status code for exceptions.

    This mixin allows exceptions to declare the status an upload endpoint
    should answer with. Subclasses should set the `http_status` class
    attribute.
    """

    http_status: int = 500

    def get_http_status(self) -> int:
        """Get the HTTP status code for this exception.

        Returns:
            HTTP status code appropriate for this error.
        """
        return self.http_status


class IngestError(Exception, HTTPStatusMixin):
    """Base exception for all spreadsheet ingestion errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
        http_status: HTTP status code for API responses (default 500).
    """

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for API responses.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Spreadsheet Errors (E1001-E1004)
# =============================================================================


class SpreadsheetError(IngestError):
    """Base class for errors raised while parsing a spreadsheet buffer."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class MalformedArchiveError(SpreadsheetError):
    """Raised when the ZIP container structure cannot be read."""

    def __init__(
        self,
        message: str,
        offset: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the offset where reading failed.

        Args:
            message: Error message.
            offset: Byte offset of the offending structure, if known.
            details: Additional details.
        """
        details = details or {}
        if offset is not None:
            details["offset"] = offset
        super().__init__(message, ErrorCode.MALFORMED_ARCHIVE, details)
        self.offset = offset


class UnsupportedCompressionError(SpreadsheetError):
    """Raised when an entry uses neither the stored nor the deflate method."""

    def __init__(
        self,
        method: int,
        entry_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the compression method.

        Args:
            method: ZIP compression method number found in the entry.
            entry_name: Name of the entry using the method.
            details: Additional details.
        """
        details = details or {}
        details["method"] = method
        if entry_name:
            details["entry_name"] = entry_name
        super().__init__(
            f"Unsupported compression method: {method}",
            ErrorCode.UNSUPPORTED_COMPRESSION,
            details,
        )
        self.method = method
        self.entry_name = entry_name


class MissingWorkbookPartError(SpreadsheetError):
    """Raised when a required workbook part is absent or unparseable."""

    def __init__(
        self,
        message: str,
        part: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the part path.

        Args:
            message: Error message.
            part: Path of the package part, e.g. ``xl/workbook.xml``.
            details: Additional details.
        """
        details = details or {}
        if part:
            details["part"] = part
        super().__init__(message, ErrorCode.MISSING_WORKBOOK_PART, details)
        self.part = part


class UnsupportedFileTypeError(SpreadsheetError):
    """Raised when the file name extension is not a supported spreadsheet."""

    def __init__(
        self,
        file_name: str,
        extension: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the rejected file name.

        Args:
            file_name: Name of the uploaded file.
            extension: Extension extracted from the name, if any.
            details: Additional details.
        """
        details = details or {}
        details["file_name"] = file_name
        if extension:
            details["extension"] = extension
        super().__init__(
            "Unsupported file type. Use .xlsx, .xlsm, .csv or .txt",
            ErrorCode.UNSUPPORTED_FILE_TYPE,
            details,
        )
        self.file_name = file_name
        self.extension = extension


# =============================================================================
# Upload Errors (E1005-E1007)
# =============================================================================


class UploadError(IngestError):
    """Base class for errors about an uploaded payload as a whole."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        file_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if file_name:
            details["file_name"] = file_name
        super().__init__(message, error_code, details)
        self.file_name = file_name


class EmptyInputError(UploadError):
    """Raised when no data rows remain after header extraction."""

    http_status: int = 422

    def __init__(
        self,
        file_name: str | None = None,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message or "No rows found in the uploaded file",
            ErrorCode.EMPTY_INPUT,
            file_name=file_name,
            details=details,
        )


class FileTooLargeError(UploadError):
    """Raised when an upload exceeds the maximum allowed size."""

    http_status: int = 413

    def __init__(
        self,
        file_size: int,
        max_size: int,
        file_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with size information.

        Args:
            file_size: Actual file size in bytes.
            max_size: Maximum allowed size in bytes.
            file_name: Optional file name.
            details: Additional details.
        """
        details = details or {}
        details["file_size_bytes"] = file_size
        details["max_size_bytes"] = max_size
        message = (
            f"File size ({file_size} bytes) exceeds maximum "
            f"allowed size ({max_size} bytes)"
        )
        super().__init__(
            message,
            ErrorCode.FILE_TOO_LARGE,
            file_name=file_name,
            details=details,
        )
        self.file_size = file_size
        self.max_size = max_size


class EncodingError(UploadError):
    """Raised when text content cannot be decoded."""

    def __init__(
        self,
        message: str,
        encoding: str | None = None,
        file_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if encoding:
            details["encoding"] = encoding
        super().__init__(
            message,
            ErrorCode.ENCODING_ERROR,
            file_name=file_name,
            details=details,
        )
        self.encoding = encoding


# =============================================================================
# Request Errors (E2xxx)
# =============================================================================


class RequestValidationError(IngestError):
    """Raised when an import request is missing fields or badly encoded."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        field: str | None = None,
        errors: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with validation details.

        Args:
            message: Main error message.
            field: Field that failed validation.
            errors: List of validation errors.
            details: Additional details.
        """
        details = details or {}
        if field:
            details["field"] = field
        if errors:
            details["validation_errors"] = errors
        super().__init__(message, ErrorCode.INVALID_REQUEST, details)
        self.field = field
        self.errors = errors or []
