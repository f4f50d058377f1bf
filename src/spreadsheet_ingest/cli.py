"""Command line interface: parse a spreadsheet file and print its records.

Usage:
    spreadsheet-ingest clientes.xlsx
    spreadsheet-ingest datos.csv --indent 0 --log-level DEBUG
"""

import argparse
import json
import sys
from pathlib import Path

from spreadsheet_ingest.config import settings, validate_settings_on_startup
from spreadsheet_ingest.models import ErrorDetail
from spreadsheet_ingest.services.import_service import ImportService
from spreadsheet_ingest.utils.exceptions import IngestError
from spreadsheet_ingest.utils.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spreadsheet-ingest",
        description="Parse an .xlsx/.xlsm/.csv/.txt file into JSON records",
    )
    parser.add_argument("file", type=Path, help="Spreadsheet file to parse")
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation, 0 for a single line (default: 2)",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help=f"Logging level (default: {settings.log_level})",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    validate_settings_on_startup(settings)

    try:
        content = args.file.read_bytes()
    except OSError as e:
        print(f"Cannot read {args.file}: {e.strerror or e}", file=sys.stderr)
        return 1

    try:
        response = ImportService().import_bytes(content, args.file.name)
    except IngestError as e:
        error = ErrorDetail.from_exception(e)
        print(error.model_dump_json(exclude_none=True), file=sys.stderr)
        return 1

    indent = args.indent if args.indent > 0 else None
    print(json.dumps(response.rows, ensure_ascii=False, indent=indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
