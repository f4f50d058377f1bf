"""Services for spreadsheet ingestion."""

from spreadsheet_ingest.services.delimited_parser import DelimitedTextParser
from spreadsheet_ingest.services.import_service import ImportService
from spreadsheet_ingest.services.ooxml_extractor import OOXMLExtractor
from spreadsheet_ingest.services.record_builder import RecordBuilder
from spreadsheet_ingest.services.spreadsheet_parser import (
    SpreadsheetParser,
    parse_spreadsheet,
)
from spreadsheet_ingest.services.zip_reader import ZipArchive, ZipReader

__all__ = [
    "DelimitedTextParser",
    "ImportService",
    "OOXMLExtractor",
    "RecordBuilder",
    "SpreadsheetParser",
    "ZipArchive",
    "ZipReader",
    "parse_spreadsheet",
]
