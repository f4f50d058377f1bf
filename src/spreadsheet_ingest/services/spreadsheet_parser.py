"""Spreadsheet parsing entry point.

Chooses the OOXML or delimited-text path from the file name extension and
returns header-keyed records. No content sniffing is done: a ``.csv`` that
actually holds a ZIP archive is parsed as text.
"""

from enum import Enum

from spreadsheet_ingest.services.delimited_parser import DelimitedTextParser
from spreadsheet_ingest.services.ooxml_extractor import OOXMLExtractor
from spreadsheet_ingest.services.record_builder import RecordBuilder
from spreadsheet_ingest.services.zip_reader import ZipReader
from spreadsheet_ingest.spreadsheet_document import Record, Row
from spreadsheet_ingest.utils.exceptions import UnsupportedFileTypeError
from spreadsheet_ingest.utils.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    "EXTENSION_TO_FORMAT",
    "SpreadsheetFormat",
    "SpreadsheetParser",
    "detect_format",
    "parse_spreadsheet",
]


class SpreadsheetFormat(str, Enum):
    """Parsing path for an uploaded file."""

    DELIMITED = "delimited"
    OOXML = "ooxml"


# Mapping of lowercase file extensions to parsing paths
EXTENSION_TO_FORMAT: dict[str, SpreadsheetFormat] = {
    # Delimited text
    ".csv": SpreadsheetFormat.DELIMITED,
    ".txt": SpreadsheetFormat.DELIMITED,
    # Office Open XML workbooks
    ".xlsx": SpreadsheetFormat.OOXML,
    ".xlsm": SpreadsheetFormat.OOXML,
}


def detect_format(file_name: str) -> SpreadsheetFormat:
    """Classify a file by the case-insensitive suffix of its name.

    Raises:
        UnsupportedFileTypeError: If the extension is not supported.
    """
    _, dot, suffix = file_name.rpartition(".")
    extension = f".{suffix.lower()}" if dot else None
    spreadsheet_format = EXTENSION_TO_FORMAT.get(extension) if extension else None
    if spreadsheet_format is None:
        raise UnsupportedFileTypeError(file_name, extension=extension)
    return spreadsheet_format


class SpreadsheetParser:
    """Parse an uploaded spreadsheet buffer into records.

    Holds no per-call state, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        zip_reader: ZipReader | None = None,
        ooxml_extractor: OOXMLExtractor | None = None,
        delimited_parser: DelimitedTextParser | None = None,
        record_builder: RecordBuilder | None = None,
    ) -> None:
        self._zip_reader = zip_reader or ZipReader()
        self._ooxml_extractor = ooxml_extractor or OOXMLExtractor()
        self._delimited_parser = delimited_parser or DelimitedTextParser()
        self._record_builder = record_builder or RecordBuilder()

    def parse(self, buffer: bytes, file_name: str) -> list[Record]:
        """Parse ``buffer`` according to the extension of ``file_name``.

        Args:
            buffer: Raw file content.
            file_name: Original file name, used only for its extension.

        Returns:
            One record per non-blank data row. An empty list means the file
            had no data rows.

        Raises:
            UnsupportedFileTypeError: If the extension is not supported.
            MalformedArchiveError: If an OOXML file is not a readable ZIP.
            UnsupportedCompressionError: If a ZIP entry uses another method.
            MissingWorkbookPartError: If a required workbook part is missing.
        """
        rows = self.parse_rows(buffer, file_name)
        return self._record_builder.build(rows)

    def parse_rows(self, buffer: bytes, file_name: str) -> list[Row]:
        """Return the raw rows, header row included, without building records."""
        spreadsheet_format = detect_format(file_name)
        logger.debug(
            "Parsing spreadsheet",
            file_name=file_name,
            format=spreadsheet_format.value,
            size=len(buffer),
        )
        if spreadsheet_format is SpreadsheetFormat.OOXML:
            archive = self._zip_reader.read(buffer)
            return self._ooxml_extractor.extract(archive)
        return self._delimited_parser.parse(buffer)

    @staticmethod
    def get_supported_extensions() -> list[str]:
        """Get list of supported file extensions (with dots)."""
        return sorted(EXTENSION_TO_FORMAT.keys())


def parse_spreadsheet(buffer: bytes, file_name: str) -> list[Record]:
    """Parse ``buffer`` with a default SpreadsheetParser."""
    return SpreadsheetParser().parse(buffer, file_name)
