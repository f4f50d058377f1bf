"""Utilities package for spreadsheet ingestion.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from spreadsheet_ingest.utils.exceptions import (
    EmptyInputError,
    EncodingError,
    ErrorCode,
    FileTooLargeError,
    HTTPStatusMixin,
    IngestError,
    MalformedArchiveError,
    MissingWorkbookPartError,
    RequestValidationError,
    SpreadsheetError,
    UnsupportedCompressionError,
    UnsupportedFileTypeError,
    UploadError,
)
from spreadsheet_ingest.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Exceptions
    "EmptyInputError",
    "EncodingError",
    "ErrorCode",
    "FileTooLargeError",
    "HTTPStatusMixin",
    "IngestError",
    "MalformedArchiveError",
    "MissingWorkbookPartError",
    "RequestValidationError",
    "SpreadsheetError",
    "UnsupportedCompressionError",
    "UnsupportedFileTypeError",
    "UploadError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
