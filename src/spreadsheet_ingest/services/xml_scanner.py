"""Cursor-based scanner for the handful of tags read from OOXML parts.

This is not an XML parser: there is no namespace, CDATA, comment or
nesting awareness. It finds elements by exact tag name, reads their
attributes and hands back the raw text between the start and end tags.
Every search moves a cursor forward, so scanning is linear in the input
size even on hostile documents.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from spreadsheet_ingest.services.xml_entities import decode_xml_entities

_NAME_TERMINATORS = frozenset(" \t\r\n/>")
_WHITESPACE = frozenset(" \t\r\n")
_NAME_STOPS = _WHITESPACE | {"="}


@dataclass(frozen=True)
class XmlElement:
    """A scanned element: its attributes and unparsed body text."""

    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    body: str = ""

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.attributes.get(name, default)


def iter_elements(
    xml: str,
    tag: str,
    start: int = 0,
    end: int | None = None,
) -> Iterator[XmlElement]:
    """Yield every ``<tag ...>...</tag>`` or ``<tag .../>`` in ``xml[start:end]``.

    Elements are returned in document order. A start tag without a matching
    end tag ends the scan, so a truncated part yields the complete elements
    before the cut.
    """
    limit = len(xml) if end is None else min(end, len(xml))
    open_token = f"<{tag}"
    close_token = f"</{tag}>"
    cursor = start

    while cursor < limit:
        position = xml.find(open_token, cursor, limit)
        if position < 0:
            return
        name_end = position + len(open_token)
        if name_end >= limit:
            return
        if xml[name_end] not in _NAME_TERMINATORS:
            # A longer tag name sharing the prefix, e.g. <cols> for <c
            cursor = name_end
            continue

        tag_close = xml.find(">", name_end, limit)
        if tag_close < 0:
            return

        self_closing = xml[tag_close - 1] == "/"
        attribute_end = tag_close - 1 if self_closing else tag_close
        attributes = parse_attributes(xml, name_end, attribute_end)
        if self_closing:
            yield XmlElement(tag, attributes, "")
            cursor = tag_close + 1
            continue

        body_start = tag_close + 1
        body_end = xml.find(close_token, body_start, limit)
        if body_end < 0:
            return
        yield XmlElement(tag, attributes, xml[body_start:body_end])
        cursor = body_end + len(close_token)


def find_element(xml: str, tag: str) -> XmlElement | None:
    """First element named ``tag`` in ``xml``, if any."""
    return next(iter_elements(xml, tag), None)


def parse_attributes(
    xml: str, start: int = 0, end: int | None = None
) -> dict[str, str]:
    """Parse ``name="value"`` pairs between ``start`` and ``end``.

    Values may use single or double quotes and are entity-decoded. Names
    keep their namespace prefix (``r:id``). Stray tokens without a value
    are skipped.
    """
    limit = len(xml) if end is None else end
    attributes: dict[str, str] = {}
    cursor = start

    while cursor < limit:
        while cursor < limit and xml[cursor] in _WHITESPACE:
            cursor += 1
        name_start = cursor
        while cursor < limit and xml[cursor] not in _NAME_STOPS:
            cursor += 1
        name = xml[name_start:cursor]

        while cursor < limit and xml[cursor] in _WHITESPACE:
            cursor += 1
        if cursor >= limit or xml[cursor] != "=":
            continue
        cursor += 1
        while cursor < limit and xml[cursor] in _WHITESPACE:
            cursor += 1
        if cursor >= limit or xml[cursor] not in "\"'":
            continue

        quote = xml[cursor]
        value_end = xml.find(quote, cursor + 1, limit)
        if value_end < 0:
            break
        if name:
            attributes[name] = decode_xml_entities(xml[cursor + 1 : value_end])
        cursor = value_end + 1

    return attributes
