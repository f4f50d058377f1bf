"""Turn rows of cell values into header-keyed records."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from spreadsheet_ingest.spreadsheet_document import Record, Row
from spreadsheet_ingest.utils.logging import get_logger

logger = get_logger(__name__)

PLACEHOLDER_HEADER = "Column {position}"


class RecordBuilder:
    """Build records from a header row and the data rows below it.

    Only header cells that are present define columns; a column the header
    row never addresses is left out of every record. Labels are trimmed and
    an empty label at 0-based position ``i`` becomes ``"Column {i+1}"``.
    Rows whose cells are all blank are skipped. When two headers carry the
    same label the later column's value is the one kept in the record.
    """

    def build(self, rows: Sequence[Row]) -> list[Record]:
        if not rows:
            return []

        columns = self.header_columns(rows[0])
        records: list[Record] = []
        for row in rows[1:]:
            if row.is_blank():
                continue
            record: Record = {}
            for column, label in columns:
                record[label] = row.value_at(column)
            records.append(record)

        logger.debug("Built records", headers=len(columns), records=len(records))
        return records

    @staticmethod
    def header_columns(row: Row) -> list[tuple[int, str]]:
        """Pair each present header cell's column index with its label."""
        columns = [
            (
                cell.column,
                cell.value.strip()
                or PLACEHOLDER_HEADER.format(position=cell.column + 1),
            )
            for cell in row
        ]
        duplicates = sorted(
            label
            for label, count in Counter(label for _, label in columns).items()
            if count > 1
        )
        if duplicates:
            logger.warning(
                "Duplicate header labels, later columns overwrite earlier ones",
                labels=duplicates,
            )
        return columns

    @classmethod
    def header_labels(cls, row: Row) -> list[str]:
        return [label for _, label in cls.header_columns(row)]
