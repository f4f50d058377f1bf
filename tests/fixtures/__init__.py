"""Test helpers for building ZIP archives and OOXML packages in memory.

Example usage:
    from tests.fixtures import build_xlsx, sheet_xml

    content = build_xlsx(sheet_xml([[("Nombre", "inlineStr")]]))
"""

import io
import struct
import zipfile
from xml.sax.saxutils import escape

SPREADSHEET_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
RELATIONSHIP_NS = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
)
PACKAGE_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
WORKSHEET_REL_TYPE = f"{RELATIONSHIP_NS}/worksheet"

# A cell is (value, type); type None means a plain numeric/literal cell
CellDef = tuple[str, str | None]


def build_zip(
    entries: dict[str, bytes],
    compression: int = zipfile.ZIP_DEFLATED,
) -> bytes:
    """Write ``entries`` into an in-memory ZIP archive and return its bytes."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=compression) as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buffer.getvalue()


def column_label(index: int) -> str:
    label = ""
    index += 1
    while index:
        index, remainder = divmod(index - 1, 26)
        label = chr(65 + remainder) + label
    return label


def sheet_xml(rows: list[list[CellDef | None]]) -> str:
    """Build worksheet XML; ``None`` entries leave a gap in the row."""
    row_parts = []
    for row_number, row in enumerate(rows, start=1):
        cells = []
        for column, cell in enumerate(row):
            if cell is None:
                continue
            value, cell_type = cell
            reference = f"{column_label(column)}{row_number}"
            if cell_type == "inlineStr":
                cells.append(
                    f'<c r="{reference}" t="inlineStr">'
                    f"<is><t>{escape(value)}</t></is></c>"
                )
            elif cell_type:
                cells.append(
                    f'<c r="{reference}" t="{cell_type}"><v>{escape(value)}</v></c>'
                )
            else:
                cells.append(f'<c r="{reference}"><v>{escape(value)}</v></c>')
        row_parts.append(f'<row r="{row_number}">{"".join(cells)}</row>')
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<worksheet xmlns="{SPREADSHEET_NS}">'
        '<dimension ref="A1"/><cols><col min="1" max="2" width="12"/></cols>'
        f"<sheetData>{''.join(row_parts)}</sheetData></worksheet>"
    )


def shared_strings_xml(items: list[str]) -> str:
    """Build a sharedStrings part from pre-rendered ``<si>`` bodies."""
    body = "".join(f"<si>{item}</si>" for item in items)
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<sst xmlns="{SPREADSHEET_NS}" count="{len(items)}" '
        f'uniqueCount="{len(items)}">{body}</sst>'
    )


def workbook_xml(sheets: list[tuple[str, str]]) -> str:
    """Build workbook.xml declaring ``(name, relationship id)`` sheets."""
    declarations = "".join(
        f'<sheet name="{name}" sheetId="{number}" r:id="{rid}"/>'
        for number, (name, rid) in enumerate(sheets, start=1)
    )
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<workbook xmlns="{SPREADSHEET_NS}" xmlns:r="{RELATIONSHIP_NS}">'
        f"<sheets>{declarations}</sheets></workbook>"
    )


def workbook_rels_xml(relationships: list[tuple[str, str]]) -> str:
    """Build workbook.xml.rels with ``(id, target)`` worksheet relationships."""
    body = "".join(
        f'<Relationship Id="{rid}" Type="{WORKSHEET_REL_TYPE}" Target="{target}"/>'
        for rid, target in relationships
    )
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<Relationships xmlns="{PACKAGE_REL_NS}">{body}</Relationships>'
    )


def xlsx_parts(
    worksheet: str,
    shared_strings: list[str] | None = None,
    sheet_target: str = "worksheets/sheet1.xml",
) -> dict[str, bytes]:
    """Parts of a single-sheet workbook, ready for build_zip."""
    parts = {
        "[Content_Types].xml": b"<Types/>",
        "xl/workbook.xml": workbook_xml([("Hoja1", "rId1")]).encode(),
        "xl/_rels/workbook.xml.rels": workbook_rels_xml(
            [("rId1", sheet_target)]
        ).encode(),
        f"xl/{sheet_target.lstrip('/').removeprefix('xl/')}": worksheet.encode(),
    }
    if shared_strings is not None:
        parts["xl/sharedStrings.xml"] = shared_strings_xml(shared_strings).encode()
    return parts


def build_xlsx(
    worksheet: str,
    shared_strings: list[str] | None = None,
    compression: int = zipfile.ZIP_DEFLATED,
) -> bytes:
    """Single-sheet OOXML package as bytes."""
    return build_zip(xlsx_parts(worksheet, shared_strings), compression=compression)


def local_header(name: bytes, payload: bytes, method: int = 0) -> bytes:
    """Hand-built local file header followed by ``payload``."""
    return (
        struct.pack(
            "<IHHHHHIIIHH",
            0x04034B50,
            20,
            0,
            method,
            0,
            0,
            0,
            len(payload),
            len(payload),
            len(name),
            0,
        )
        + name
        + payload
    )


def central_header(name: bytes, size: int, offset: int, method: int = 0) -> bytes:
    """Hand-built central directory header."""
    return (
        struct.pack(
            "<IHHHHHHIIIHHHHHII",
            0x02014B50,
            20,
            20,
            0,
            method,
            0,
            0,
            0,
            size,
            size,
            len(name),
            0,
            0,
            0,
            0,
            0,
            offset,
        )
        + name
    )


def end_of_central_directory(count: int, size: int, offset: int) -> bytes:
    return struct.pack("<IHHHHIIH", 0x06054B50, 0, 0, count, count, size, offset, 0)


def build_raw_zip(name: bytes, payload: bytes, method: int = 0) -> bytes:
    """Single-entry archive written byte by byte, for methods zipfile refuses."""
    local = local_header(name, payload, method)
    central = central_header(name, len(payload), 0, method)
    return local + central + end_of_central_directory(1, len(central), len(local))
