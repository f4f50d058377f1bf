"""Minimal ZIP container reader for OOXML packages.

Reads the end-of-central-directory record, walks the central directory,
resolves every entry's local header and decompresses stored or deflate
payloads. Multi-volume archives, encryption and ZIP64 are not handled.
"""

from __future__ import annotations

import struct
import zlib
from collections.abc import Iterator
from dataclasses import dataclass, field

from spreadsheet_ingest.utils.exceptions import (
    MalformedArchiveError,
    UnsupportedCompressionError,
)
from spreadsheet_ingest.utils.logging import get_logger

logger = get_logger(__name__)

EOCD_SIGNATURE = 0x06054B50
CENTRAL_DIRECTORY_SIGNATURE = 0x02014B50
LOCAL_HEADER_SIGNATURE = 0x04034B50

EOCD_SIZE = 22
CENTRAL_HEADER_SIZE = 46
LOCAL_HEADER_SIZE = 30

METHOD_STORED = 0
METHOD_DEFLATE = 8

_EOCD_MARKER = struct.pack("<I", EOCD_SIGNATURE)


@dataclass(frozen=True)
class ZipEntry:
    """Central-directory metadata for one archive member."""

    name: str
    compression_method: int
    compressed_size: int
    local_header_offset: int


@dataclass
class ZipArchive:
    """Decompressed entries addressed by name.

    Entries are stored once in ``entries``/``contents`` and looked up through
    an index; a later entry with a duplicate name replaces the earlier one.
    """

    entries: list[ZipEntry] = field(default_factory=list)
    contents: list[bytes] = field(default_factory=list)
    _index: dict[str, int] = field(default_factory=dict, repr=False)

    def add(self, entry: ZipEntry, data: bytes) -> None:
        if entry.name in self._index:
            logger.warning("Duplicate ZIP entry name", entry_name=entry.name)
        self._index[entry.name] = len(self.entries)
        self.entries.append(entry)
        self.contents.append(data)

    def read(self, name: str) -> bytes | None:
        """Return the decompressed bytes of ``name`` or None if absent."""
        position = self._index.get(name)
        return self.contents[position] if position is not None else None

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)


class ZipReader:
    """Read the entries of an in-memory ZIP archive."""

    def read(self, buffer: bytes) -> ZipArchive:
        """Parse ``buffer`` and decompress every entry.

        Args:
            buffer: Complete ZIP archive bytes.

        Returns:
            ZipArchive mapping each entry name to its decompressed bytes.

        Raises:
            MalformedArchiveError: If a signature is missing or a structure
                is truncated or corrupt.
            UnsupportedCompressionError: If an entry is neither stored nor
                deflated.
        """
        entries = self.read_central_directory(buffer)
        archive = ZipArchive()
        for entry in entries:
            payload = self._load_payload(buffer, entry)
            archive.add(entry, self._decompress(entry, payload))

        logger.debug("Read ZIP archive", entries=len(entries), size=len(buffer))
        return archive

    def read_central_directory(self, buffer: bytes) -> list[ZipEntry]:
        """List the entries declared in the central directory."""
        eocd_offset = self.find_end_of_central_directory(buffer)
        entry_count = _read_u16(buffer, eocd_offset + 10)
        cursor = _read_u32(buffer, eocd_offset + 16)

        entries: list[ZipEntry] = []
        for _ in range(entry_count):
            if _read_u32(buffer, cursor) != CENTRAL_DIRECTORY_SIGNATURE:
                raise MalformedArchiveError(
                    "Invalid central directory entry", offset=cursor
                )
            method = _read_u16(buffer, cursor + 10)
            compressed_size = _read_u32(buffer, cursor + 20)
            name_length = _read_u16(buffer, cursor + 28)
            extra_length = _read_u16(buffer, cursor + 30)
            comment_length = _read_u16(buffer, cursor + 32)
            local_header_offset = _read_u32(buffer, cursor + 42)

            name_start = cursor + CENTRAL_HEADER_SIZE
            raw_name = _read_bytes(buffer, name_start, name_length)
            entries.append(
                ZipEntry(
                    name=raw_name.decode("utf-8", errors="replace"),
                    compression_method=method,
                    compressed_size=compressed_size,
                    local_header_offset=local_header_offset,
                )
            )
            cursor = name_start + name_length + extra_length + comment_length

        return entries

    @staticmethod
    def find_end_of_central_directory(buffer: bytes) -> int:
        """Offset of the last EOCD signature that leaves room for the record.

        The whole buffer is searched backward, not only the trailing
        comment window.
        """
        if len(buffer) >= EOCD_SIZE:
            offset = buffer.rfind(_EOCD_MARKER, 0, len(buffer) - EOCD_SIZE + 4)
            if offset >= 0:
                return offset
        raise MalformedArchiveError("End of central directory not found")

    def _load_payload(self, buffer: bytes, entry: ZipEntry) -> bytes:
        """Compressed bytes of ``entry``, located through its local header."""
        offset = entry.local_header_offset
        if _read_u32(buffer, offset) != LOCAL_HEADER_SIGNATURE:
            raise MalformedArchiveError(
                f"Invalid local header for {entry.name}", offset=offset
            )
        name_length = _read_u16(buffer, offset + 26)
        extra_length = _read_u16(buffer, offset + 28)
        data_start = offset + LOCAL_HEADER_SIZE + name_length + extra_length
        return _read_bytes(buffer, data_start, entry.compressed_size)

    @staticmethod
    def _decompress(entry: ZipEntry, payload: bytes) -> bytes:
        if entry.compression_method == METHOD_STORED:
            return payload
        if entry.compression_method == METHOD_DEFLATE:
            try:
                # Negative window bits: raw deflate stream without zlib header
                return zlib.decompress(payload, -zlib.MAX_WBITS)
            except zlib.error as e:
                raise MalformedArchiveError(
                    f"Corrupt deflate data in {entry.name}: {e}",
                    offset=entry.local_header_offset,
                ) from e
        raise UnsupportedCompressionError(
            entry.compression_method, entry_name=entry.name
        )


def _read_u16(buffer: bytes, offset: int) -> int:
    try:
        return struct.unpack_from("<H", buffer, offset)[0]
    except struct.error as e:
        raise MalformedArchiveError("Truncated ZIP structure", offset=offset) from e


def _read_u32(buffer: bytes, offset: int) -> int:
    try:
        return struct.unpack_from("<I", buffer, offset)[0]
    except struct.error as e:
        raise MalformedArchiveError("Truncated ZIP structure", offset=offset) from e


def _read_bytes(buffer: bytes, offset: int, length: int) -> bytes:
    data = buffer[offset : offset + length]
    if len(data) != length:
        raise MalformedArchiveError("Truncated ZIP entry data", offset=offset)
    return bytes(data)
