"""Upload import service.

Validates an import request, decodes its base64 payload, bounds its size
and runs the spreadsheet parser. This is the caller-side policy around the
parser: an empty result is turned into ``EmptyInputError`` here, not in the
parser itself.
"""

import base64
import binascii
from typing import Any
from uuid import uuid4

from pydantic import ValidationError

from spreadsheet_ingest.config import Settings, settings
from spreadsheet_ingest.models import ImportRequest, ImportResponse
from spreadsheet_ingest.services.delimited_parser import DelimitedTextParser
from spreadsheet_ingest.services.spreadsheet_parser import SpreadsheetParser
from spreadsheet_ingest.utils.exceptions import (
    EmptyInputError,
    FileTooLargeError,
    IngestError,
    RequestValidationError,
)
from spreadsheet_ingest.utils.logging import LogContext, get_logger, timed_operation

logger = get_logger(__name__)


class ImportService:
    """Turn uploaded spreadsheets into records for the caller."""

    def __init__(
        self,
        config: Settings | None = None,
        parser: SpreadsheetParser | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            config: Settings to use; the module-level settings by default.
            parser: Parser to use; built from the settings by default.
        """
        self._settings = config or settings
        self._parser = parser or SpreadsheetParser(
            delimited_parser=DelimitedTextParser(
                encoding=self._settings.text_encoding,
                detect_encoding=self._settings.detect_encoding,
            )
        )

    def import_rows(self, request: ImportRequest | dict[str, Any]) -> ImportResponse:
        """Validate and parse a base64 import request.

        Args:
            request: An ImportRequest or its raw dictionary form with
                ``file_name`` and ``data`` keys.

        Returns:
            ImportResponse with the parsed records.

        Raises:
            RequestValidationError: If fields are missing, too short or the
                payload is not valid base64.
            IngestError: Any error raised by import_bytes.
        """
        if not isinstance(request, ImportRequest):
            try:
                request = ImportRequest.model_validate(request)
            except ValidationError as e:
                errors = [
                    f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                ]
                raise RequestValidationError(
                    "Invalid import request", errors=errors
                ) from e

        try:
            content = base64.b64decode(request.data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise RequestValidationError(
                "File data is not valid base64", field="data"
            ) from e

        return self.import_bytes(content, request.file_name)

    def import_bytes(self, content: bytes, file_name: str) -> ImportResponse:
        """Parse raw file bytes into an ImportResponse.

        Raises:
            FileTooLargeError: If the content exceeds the configured limit.
            EmptyInputError: If no data rows were found.
            SpreadsheetError: Any parsing failure from SpreadsheetParser.
        """
        max_size = self._settings.max_file_size_bytes
        if len(content) > max_size:
            raise FileTooLargeError(len(content), max_size, file_name=file_name)

        with (
            LogContext(request_id=uuid4().hex[:12], file_name=file_name),
            timed_operation(logger, "import_spreadsheet") as metrics,
        ):
            metrics.bytes_processed = len(content)
            try:
                records = self._parser.parse(content, file_name)
            except IngestError as e:
                logger.warning(
                    "Spreadsheet rejected",
                    error_code=e.error_code.value,
                    reason=e.message,
                )
                raise
            metrics.records_built = len(records)

            if not records:
                logger.info("Spreadsheet has no data rows")
                raise EmptyInputError(file_name=file_name)

            logger.info("Spreadsheet imported", records=len(records))
            return ImportResponse(
                file_name=file_name, rows=records, row_count=len(records)
            )
