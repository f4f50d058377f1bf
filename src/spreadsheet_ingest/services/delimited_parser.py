"""Delimited text (CSV/TSV-like) parsing with delimiter sniffing.

Lines are split on ``\\n`` (a preceding ``\\r`` is dropped) and blank lines
are discarded before anything else happens, so a quoted field cannot span
lines. The delimiter is chosen from the first retained line only.
"""

from __future__ import annotations

import chardet

from spreadsheet_ingest.spreadsheet_document import Row
from spreadsheet_ingest.utils.exceptions import EncodingError
from spreadsheet_ingest.utils.logging import get_logger

logger = get_logger(__name__)

COMMA = ","
SEMICOLON = ";"
TAB = "\t"
QUOTE = '"'


def sniff_delimiter(line: str) -> str:
    """Pick the delimiter for a file from its first line.

    Semicolon wins when it outnumbers commas and is at least as frequent as
    tabs; tab wins when it outnumbers commas; comma otherwise.
    """
    commas = line.count(COMMA)
    semicolons = line.count(SEMICOLON)
    tabs = line.count(TAB)
    if semicolons > commas and semicolons >= tabs:
        return SEMICOLON
    if tabs > commas:
        return TAB
    return COMMA


def split_delimited_line(line: str, delimiter: str) -> list[str]:
    """Split one line into trimmed fields using double-quote rules.

    A quote toggles the quoted state, a doubled quote inside quotes is a
    literal quote, and the delimiter only separates fields outside quotes.
    """
    fields: list[str] = []
    current: list[str] = []
    inside_quotes = False
    index = 0
    length = len(line)

    while index < length:
        char = line[index]
        if char == QUOTE:
            if inside_quotes and index + 1 < length and line[index + 1] == QUOTE:
                current.append(QUOTE)
                index += 1
            else:
                inside_quotes = not inside_quotes
        elif char == delimiter and not inside_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        index += 1

    fields.append("".join(current).strip())
    return fields


class DelimitedTextParser:
    """Parse delimited text buffers into rows of string cells."""

    # Tried in order after detection fails; latin-1 accepts any byte sequence
    FALLBACK_ENCODINGS = ["utf-8", "cp1252", "latin-1"]

    # Minimum confidence threshold for encoding detection
    MIN_ENCODING_CONFIDENCE = 0.5

    def __init__(self, encoding: str = "utf-8", detect_encoding: bool = True) -> None:
        """Initialize the parser.

        Args:
            encoding: Encoding tried first. UTF-8 input may carry a BOM.
            detect_encoding: Use chardet when the first attempt fails.
        """
        self.encoding = encoding
        self.detect_encoding = detect_encoding

    def parse(self, buffer: bytes) -> list[Row]:
        """Decode ``buffer`` and split it into rows.

        Raises:
            EncodingError: If the buffer cannot be decoded and detection is
                disabled.
        """
        return self.parse_text(self.decode(buffer))

    def parse_text(self, text: str) -> list[Row]:
        """Split already decoded text into rows."""
        lines = [
            line[:-1] if line.endswith("\r") else line for line in text.split("\n")
        ]
        lines = [line for line in lines if line.strip()]
        if not lines:
            return []

        delimiter = sniff_delimiter(lines[0])
        logger.debug(
            "Parsing delimited text", delimiter=repr(delimiter), lines=len(lines)
        )
        return [
            Row.from_values(split_delimited_line(line, delimiter)) for line in lines
        ]

    def decode(self, buffer: bytes) -> str:
        """Decode bytes to text, detecting the encoding if needed."""
        encoding = "utf-8-sig" if self.encoding in ("utf-8", "utf8") else self.encoding
        try:
            return buffer.decode(encoding)
        except UnicodeDecodeError as e:
            if not self.detect_encoding:
                raise EncodingError(
                    f"Failed to decode content as {self.encoding}: {e}",
                    encoding=self.encoding,
                ) from e

        detected, confidence = self._detect_encoding(buffer)
        if detected:
            try:
                logger.debug(
                    "Decoding with detected encoding",
                    encoding=detected,
                    confidence=f"{confidence:.2f}",
                )
                return buffer.decode(detected)
            except (UnicodeDecodeError, LookupError):
                logger.debug("Detected encoding failed", encoding=detected)

        for fallback in self.FALLBACK_ENCODINGS:
            try:
                return buffer.decode(fallback)
            except UnicodeDecodeError:
                continue
        # Unreachable while latin-1 is a fallback
        raise EncodingError("Could not decode content", encoding=self.encoding)

    def _detect_encoding(self, buffer: bytes) -> tuple[str | None, float]:
        result = chardet.detect(buffer)
        encoding = result.get("encoding")
        confidence = result.get("confidence", 0.0) or 0.0
        if encoding and confidence >= self.MIN_ENCODING_CONFIDENCE:
            return encoding, confidence
        logger.warning(
            "Could not detect encoding confidently",
            encoding=encoding,
            confidence=f"{confidence:.2f}",
        )
        return None, confidence
