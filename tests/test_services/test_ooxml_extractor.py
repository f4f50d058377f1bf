"""Tests for the OOXML worksheet extractor."""

import logging

import pytest

from spreadsheet_ingest.services.ooxml_extractor import (
    OOXMLExtractor,
    column_index_to_label,
    column_label_to_index,
)
from spreadsheet_ingest.services.zip_reader import ZipReader
from spreadsheet_ingest.spreadsheet_document import CellType, SharedStringTable
from spreadsheet_ingest.utils.exceptions import ErrorCode, MissingWorkbookPartError
from tests.fixtures import (
    build_zip,
    shared_strings_xml,
    sheet_xml,
    workbook_rels_xml,
    workbook_xml,
    xlsx_parts,
)


@pytest.fixture
def extractor() -> OOXMLExtractor:
    return OOXMLExtractor()


def extract(parts: dict[str, bytes]) -> list[list[str]]:
    archive = ZipReader().read(build_zip(parts))
    return [row.values() for row in OOXMLExtractor().extract(archive)]


class TestColumnLabels:
    """Tests for column letter conversion."""

    @pytest.mark.parametrize(
        ("label", "index"),
        [
            ("A", 0),
            ("B", 1),
            ("Z", 25),
            ("AA", 26),
            ("AB", 27),
            ("AZ", 51),
            ("XFD", 16383),
        ],
    )
    def test_label_to_index(self, label: str, index: int) -> None:
        assert column_label_to_index(label) == index
        assert column_index_to_label(index) == label

    def test_lowercase_label(self) -> None:
        assert column_label_to_index("ab") == 27

    def test_negative_index_rejected(self) -> None:
        with pytest.raises(ValueError):
            column_index_to_label(-1)


class TestSharedStrings:
    """Tests for sharedStrings.xml parsing."""

    def test_plain_items(self, extractor: OOXMLExtractor) -> None:
        xml = shared_strings_xml(["<t>Nombre</t>", "<t>Monto</t>"])

        table = extractor.parse_shared_strings(xml)

        assert table.strings == ["Nombre", "Monto"]

    def test_rich_text_runs_concatenated(self, extractor: OOXMLExtractor) -> None:
        """Run properties are ignored and run texts are joined."""
        item = (
            '<r><rPr><b/><rFont val="Calibri"/></rPr><t>Total </t></r>'
            '<r><t xml:space="preserve">general</t></r>'
        )

        table = extractor.parse_shared_strings(shared_strings_xml([item]))

        assert table.strings == ["Total general"]

    def test_item_without_text_is_empty(self, extractor: OOXMLExtractor) -> None:
        """An empty item still occupies its index."""
        xml = shared_strings_xml(["<t>a</t>", "", "<t/>", "<t>d</t>"])

        table = extractor.parse_shared_strings(xml)

        assert table.strings == ["a", "", "", "d"]
        assert table.resolve(3) == "d"

    def test_entities_decoded(self, extractor: OOXMLExtractor) -> None:
        xml = shared_strings_xml(["<t>P&amp;L &lt;2024&gt;</t>"])

        assert extractor.parse_shared_strings(xml).strings == ["P&L <2024>"]


class TestParseWorksheet:
    """Tests for worksheet cell extraction."""

    def test_shared_inline_and_numeric_cells(self, extractor: OOXMLExtractor) -> None:
        xml = sheet_xml(
            [
                [("0", "s"), ("Monto", "inlineStr")],
                [("Ana", "inlineStr"), ("10.5", None)],
            ]
        )

        rows = extractor.parse_worksheet(xml, SharedStringTable(["Nombre"]))

        assert [row.values() for row in rows] == [["Nombre", "Monto"], ["Ana", "10.5"]]
        cell_types = [cell.cell_type for cell in rows[0]]
        assert cell_types == [CellType.SHARED_STRING, CellType.INLINE]

    def test_gaps_keep_column_positions(self, extractor: OOXMLExtractor) -> None:
        """A cell at C1 lands at index 2 even when B1 is absent."""
        xml = sheet_xml([[("a", "inlineStr"), None, ("c", "inlineStr")]])

        rows = extractor.parse_worksheet(xml, SharedStringTable())

        assert rows[0].values() == ["a", "", "c"]

    def test_self_closing_cell_is_empty(self, extractor: OOXMLExtractor) -> None:
        xml = (
            '<sheetData><row r="1"><c r="A1" s="1"/>'
            '<c r="B1"><v>7</v></c></row></sheetData>'
        )

        rows = extractor.parse_worksheet(xml, SharedStringTable())

        assert rows[0].values() == ["", "7"]

    def test_cell_without_reference_follows_previous(
        self, extractor: OOXMLExtractor
    ) -> None:
        xml = '<row r="1"><c r="C1"><v>1</v></c><c><v>2</v></c></row>'

        rows = extractor.parse_worksheet(xml, SharedStringTable())

        assert rows[0].values() == ["", "", "1", "2"]

    def test_formula_cell_uses_cached_value(self, extractor: OOXMLExtractor) -> None:
        xml = '<row r="1"><c r="A1"><f>SUM(B1:B3)</f><v>42</v></c></row>'

        rows = extractor.parse_worksheet(xml, SharedStringTable())

        assert rows[0].values() == ["42"]

    def test_shared_string_index_out_of_range(
        self, extractor: OOXMLExtractor, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A bad index produces an empty value and a warning."""
        xml = (
            '<row r="1"><c r="A1" t="s"><v>5</v></c>'
            '<c r="B1" t="s"><v>x</v></c></row>'
        )

        with caplog.at_level(logging.WARNING):
            rows = extractor.parse_worksheet(xml, SharedStringTable(["only"]))

        assert rows[0].values() == ["", ""]
        assert "out of range" in caplog.text
        assert "Invalid shared string index" in caplog.text

    def test_literal_value_entities_decoded(self, extractor: OOXMLExtractor) -> None:
        xml = '<row r="1"><c r="A1" t="str"><v>A &amp; B</v></c></row>'

        rows = extractor.parse_worksheet(xml, SharedStringTable())

        assert rows[0].values() == ["A & B"]

    def test_empty_rows_are_kept(self, extractor: OOXMLExtractor) -> None:
        """Row filtering is left to the record builder."""
        xml = '<row r="1"/><row r="2"><c r="A2"><v>1</v></c></row>'

        rows = extractor.parse_worksheet(xml, SharedStringTable())

        assert len(rows) == 2
        assert rows[0].values() == []


class TestExtract:
    """Tests for reading the first worksheet from a package."""

    def test_end_to_end(self) -> None:
        worksheet = sheet_xml(
            [
                [("Nombre", "inlineStr"), ("Monto", "inlineStr"), ("0", "s")],
                [("Ana", "inlineStr"), ("10.5", None), ("1", None)],
            ]
        )
        parts = xlsx_parts(worksheet, shared_strings=["<t>Total</t>"])

        assert extract(parts) == [["Nombre", "Monto", "Total"], ["Ana", "10.5", "1"]]

    def test_without_shared_strings_part(self) -> None:
        parts = xlsx_parts(sheet_xml([[("x", "inlineStr")]]))

        assert extract(parts) == [["x"]]

    def test_absolute_relationship_target(self) -> None:
        parts = xlsx_parts(
            sheet_xml([[("x", "inlineStr")]]),
            sheet_target="/xl/worksheets/sheet1.xml",
        )

        assert extract(parts) == [["x"]]

    def test_first_declared_sheet_is_read(self) -> None:
        """Sheet order comes from workbook.xml, not from part names."""
        parts = {
            "xl/workbook.xml": workbook_xml(
                [("Resumen", "rId2"), ("Datos", "rId1")]
            ).encode(),
            "xl/_rels/workbook.xml.rels": workbook_rels_xml(
                [("rId1", "worksheets/sheet1.xml"), ("rId2", "worksheets/sheet2.xml")]
            ).encode(),
            "xl/worksheets/sheet1.xml": sheet_xml([[("datos", "inlineStr")]]).encode(),
            "xl/worksheets/sheet2.xml": sheet_xml(
                [[("resumen", "inlineStr")]]
            ).encode(),
        }

        assert extract(parts) == [["resumen"]]

    def test_missing_workbook(self) -> None:
        parts = xlsx_parts(sheet_xml([]))
        del parts["xl/workbook.xml"]

        with pytest.raises(MissingWorkbookPartError) as exc_info:
            extract(parts)

        assert exc_info.value.part == "xl/workbook.xml"
        assert exc_info.value.error_code == ErrorCode.MISSING_WORKBOOK_PART

    def test_missing_relationships(self) -> None:
        parts = xlsx_parts(sheet_xml([]))
        del parts["xl/_rels/workbook.xml.rels"]

        with pytest.raises(MissingWorkbookPartError) as exc_info:
            extract(parts)

        assert exc_info.value.part == "xl/_rels/workbook.xml.rels"

    def test_missing_worksheet(self) -> None:
        parts = xlsx_parts(sheet_xml([]))
        del parts["xl/worksheets/sheet1.xml"]

        with pytest.raises(MissingWorkbookPartError) as exc_info:
            extract(parts)

        assert exc_info.value.part == "xl/worksheets/sheet1.xml"

    def test_workbook_without_sheets(self) -> None:
        parts = xlsx_parts(sheet_xml([]))
        parts["xl/workbook.xml"] = workbook_xml([]).encode()

        with pytest.raises(MissingWorkbookPartError):
            extract(parts)

    def test_unknown_relationship_id(self) -> None:
        parts = xlsx_parts(sheet_xml([]))
        parts["xl/_rels/workbook.xml.rels"] = workbook_rels_xml(
            [("rId9", "worksheets/sheet1.xml")]
        ).encode()

        with pytest.raises(MissingWorkbookPartError) as exc_info:
            extract(parts)

        assert "rId1" in exc_info.value.message

    def test_part_not_utf8(self) -> None:
        parts = xlsx_parts(sheet_xml([]))
        parts["xl/worksheets/sheet1.xml"] = b"<worksheet>\xff\xfe</worksheet>"

        with pytest.raises(MissingWorkbookPartError):
            extract(parts)

    def test_utf8_bom_in_part(self) -> None:
        worksheet = sheet_xml([[("año", "inlineStr")]])
        parts = xlsx_parts(worksheet)
        parts["xl/worksheets/sheet1.xml"] = b"\xef\xbb\xbf" + worksheet.encode()

        assert extract(parts) == [["año"]]
