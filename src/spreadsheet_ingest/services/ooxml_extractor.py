"""Cell grid extraction from the first worksheet of an OOXML workbook."""

from __future__ import annotations

import posixpath
import string

from spreadsheet_ingest.services.xml_entities import decode_xml_entities
from spreadsheet_ingest.services.xml_scanner import find_element, iter_elements
from spreadsheet_ingest.services.zip_reader import ZipArchive
from spreadsheet_ingest.spreadsheet_document import (
    Cell,
    CellType,
    Row,
    SharedStringTable,
)
from spreadsheet_ingest.utils.exceptions import MissingWorkbookPartError
from spreadsheet_ingest.utils.logging import get_logger

logger = get_logger(__name__)

WORKBOOK_BASE = "xl"
WORKBOOK_PART = "xl/workbook.xml"
WORKBOOK_RELS_PART = "xl/_rels/workbook.xml.rels"
SHARED_STRINGS_PART = "xl/sharedStrings.xml"

_ASCII_LETTERS = frozenset(string.ascii_letters)


def column_label_to_index(label: str) -> int:
    """Convert a column label to a 0-based index ("A" -> 0, "AA" -> 26)."""
    result = 0
    for char in label.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def column_index_to_label(index: int) -> str:
    """Inverse of column_label_to_index (0 -> "A", 27 -> "AB")."""
    if index < 0:
        raise ValueError(f"Column index must be non-negative, got {index}")
    letters: list[str] = []
    index += 1
    while index:
        index, remainder = divmod(index - 1, 26)
        letters.append(chr(ord("A") + remainder))
    return "".join(reversed(letters))


def _reference_column(reference: str | None) -> int | None:
    """Column index from a cell reference such as "B12", or None if unusable."""
    if not reference:
        return None
    end = 0
    while end < len(reference) and reference[end] in _ASCII_LETTERS:
        end += 1
    if end == 0:
        return None
    return column_label_to_index(reference[:end])


class OOXMLExtractor:
    """Extract rows of cell values from an OOXML spreadsheet package.

    Only the first sheet declared in the workbook is read. Styles, formulas
    and merged ranges are ignored; a formula cell yields its cached value.
    """

    def extract(self, archive: ZipArchive) -> list[Row]:
        """Read the first worksheet of ``archive`` into rows.

        Args:
            archive: Decompressed package parts.

        Returns:
            Rows in document order, each sparse by column index.

        Raises:
            MissingWorkbookPartError: If the workbook, its relationships,
                the sheet declaration or the worksheet part is missing.
        """
        workbook_xml = self._read_part(archive, WORKBOOK_PART, required=True)
        sheet_name, relationship_id = self._first_sheet(workbook_xml)

        rels_xml = self._read_part(archive, WORKBOOK_RELS_PART, required=True)
        sheet_part = self._resolve_sheet_part(rels_xml, relationship_id)
        sheet_xml = self._read_part(archive, sheet_part, required=True)

        shared_strings_xml = self._read_part(archive, SHARED_STRINGS_PART)
        shared_strings = (
            self.parse_shared_strings(shared_strings_xml)
            if shared_strings_xml is not None
            else SharedStringTable()
        )

        rows = self.parse_worksheet(sheet_xml, shared_strings)
        logger.debug(
            "Extracted worksheet",
            sheet=sheet_name,
            part=sheet_part,
            rows=len(rows),
            shared_strings=len(shared_strings),
        )
        return rows

    def parse_shared_strings(self, xml: str) -> SharedStringTable:
        """Parse ``sharedStrings.xml`` into an index-addressed table.

        Rich-text items concatenate the text of every run; plain items use
        their single ``<t>``; items with neither become an empty string.
        """
        strings: list[str] = []
        for item in iter_elements(xml, "si"):
            runs = [
                decode_xml_entities(text.body)
                for run in iter_elements(item.body, "r")
                if (text := find_element(run.body, "t")) is not None
            ]
            if runs:
                strings.append("".join(runs))
                continue
            text = find_element(item.body, "t")
            strings.append(decode_xml_entities(text.body) if text is not None else "")
        return SharedStringTable(strings)

    def parse_worksheet(
        self, xml: str, shared_strings: SharedStringTable
    ) -> list[Row]:
        """Parse worksheet XML into rows of cells."""
        rows: list[Row] = []
        for row_element in iter_elements(xml, "row"):
            row = Row()
            next_column = 0
            for cell_element in iter_elements(row_element.body, "c"):
                column = _reference_column(cell_element.get("r"))
                if column is None:
                    column = next_column
                cell = self._read_cell(
                    column, cell_element.get("t"), cell_element.body, shared_strings
                )
                row.set(cell)
                next_column = column + 1
            rows.append(row)
        return rows

    @staticmethod
    def _read_cell(
        column: int,
        cell_type: str | None,
        body: str,
        shared_strings: SharedStringTable,
    ) -> Cell:
        value_element = find_element(body, "v")
        if value_element is not None:
            raw = value_element.body
            if cell_type == "s":
                return Cell(
                    column,
                    _lookup_shared_string(raw, shared_strings),
                    CellType.SHARED_STRING,
                )
            return Cell(column, decode_xml_entities(raw), CellType.LITERAL)

        inline = find_element(body, "t")
        if inline is not None:
            return Cell(column, decode_xml_entities(inline.body), CellType.INLINE)
        return Cell(column, "", CellType.LITERAL)

    @staticmethod
    def _first_sheet(workbook_xml: str) -> tuple[str, str]:
        for sheet in iter_elements(workbook_xml, "sheet"):
            name = sheet.get("name")
            relationship_id = sheet.get("r:id") or next(
                (
                    value
                    for key, value in sheet.attributes.items()
                    if key.endswith(":id")
                ),
                None,
            )
            if name and relationship_id:
                return name, relationship_id
        raise MissingWorkbookPartError(
            "No sheet found in the workbook", part=WORKBOOK_PART
        )

    @staticmethod
    def _resolve_sheet_part(rels_xml: str, relationship_id: str) -> str:
        for relationship in iter_elements(rels_xml, "Relationship"):
            if relationship.get("Id") != relationship_id:
                continue
            target = relationship.get("Target")
            if not target:
                break
            target = target.lstrip("/")
            # Absolute targets already include the base folder
            if target.startswith(f"{WORKBOOK_BASE}/"):
                return posixpath.normpath(target)
            return posixpath.normpath(f"{WORKBOOK_BASE}/{target}")
        raise MissingWorkbookPartError(
            f"Relationship {relationship_id} for the first sheet not found",
            part=WORKBOOK_RELS_PART,
        )

    @staticmethod
    def _read_part(
        archive: ZipArchive, part: str, required: bool = False
    ) -> str | None:
        data = archive.read(part)
        if data is None:
            if required:
                raise MissingWorkbookPartError(
                    f"Workbook part not found: {part}", part=part
                )
            return None
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise MissingWorkbookPartError(
                f"Workbook part is not valid UTF-8: {part}", part=part
            ) from e


def _lookup_shared_string(raw: str, shared_strings: SharedStringTable) -> str:
    try:
        index = int(raw.strip())
    except ValueError:
        logger.warning("Invalid shared string index", index=raw)
        return ""
    value = shared_strings.resolve(index)
    if value is None:
        logger.warning(
            "Shared string index out of range", index=index, size=len(shared_strings)
        )
        return ""
    return value
