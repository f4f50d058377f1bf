"""Spreadsheet ingestion - uploaded XLSX/CSV files to header-keyed records."""

from spreadsheet_ingest.services.spreadsheet_parser import (
    SpreadsheetParser,
    parse_spreadsheet,
)

__all__ = ["SpreadsheetParser", "parse_spreadsheet"]
__version__ = "0.1.0"


def main() -> int:
    """Run the command line interface."""
    from spreadsheet_ingest.cli import main as cli_main

    return cli_main()
