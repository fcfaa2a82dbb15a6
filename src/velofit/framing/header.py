"""FIT file framing.

This module builds and parses the FIT file header and wraps a record region
into a complete file with its trailing CRC.

The frame structure is:
- [Header (14 bytes)] [Records (data_size bytes)] [CRC (2 bytes, LE)]

Header layout:
- header size (1), protocol version (1), profile version (2, LE),
  data size (4, LE), ".FIT" (4), header CRC over the preceding 12 bytes (2, LE)
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Optional, Tuple

from loguru import logger

from ..config import DEFAULT_CONFIG, CodecConfig
from ..exceptions import FramingError
from ..utils.crc import crc16, crc16_bytes

FIT_MAGIC = b".FIT"
HEADER_SIZE = 14
LEGACY_HEADER_SIZE = 12
CRC_SIZE = 2


@dataclass(frozen=True)
class FileHeader:
    """Parsed FIT file header.

    Attributes:
        header_size: Size of the header in bytes (12 or 14)
        protocol_version: Protocol version byte
        profile_version: Profile version
        data_size: Size of the record region in bytes
        header_crc: Header CRC, or None for a 12-byte header
    """

    header_size: int
    protocol_version: int
    profile_version: int
    data_size: int
    header_crc: Optional[int] = None

    @property
    def records_end(self) -> int:
        """Offset one past the last record byte."""
        return self.header_size + self.data_size


def build_header(data_size: int, config: CodecConfig = DEFAULT_CONFIG) -> bytes:
    """Build a 14-byte FIT header for a record region of ``data_size`` bytes.

    Example:
        >>> header = build_header(0)
        >>> len(header), header[8:12]
        (14, b'.FIT')
    """
    result = bytearray()
    result.append(HEADER_SIZE)
    result.append(config.protocol_version)
    result.extend(struct.pack("<H", config.profile_version))
    result.extend(struct.pack("<I", data_size))
    result.extend(FIT_MAGIC)
    result.extend(crc16_bytes(bytes(result)))
    return bytes(result)


def parse_header(data: bytes, *, verify_checksum: bool = True) -> FileHeader:
    """Parse and validate the header at the start of ``data``.

    A header CRC of 0x0000 means "not computed" and is accepted.

    Raises:
        FramingError: If the header is short, has the wrong magic tag or a
            bad CRC
    """
    if len(data) < LEGACY_HEADER_SIZE:
        raise FramingError(f"File too short for a FIT header: {len(data)} bytes")

    header_size = data[0]
    if header_size < LEGACY_HEADER_SIZE or len(data) < header_size:
        raise FramingError(f"Invalid header size {header_size} for {len(data)}-byte file")

    if data[8:12] != FIT_MAGIC:
        raise FramingError(f"Missing {FIT_MAGIC!r} tag, got {bytes(data[8:12])!r}")

    protocol_version = data[1]
    profile_version, data_size = struct.unpack("<HI", data[2:8])

    header_crc = None
    if header_size >= HEADER_SIZE:
        header_crc = struct.unpack("<H", data[12:14])[0]
        if verify_checksum and header_crc != 0 and header_crc != crc16(data[:12]):
            raise FramingError(
                f"Header CRC mismatch: stored 0x{header_crc:04x}, "
                f"computed 0x{crc16(data[:12]):04x}"
            )

    return FileHeader(header_size, protocol_version, profile_version, data_size, header_crc)


def frame_file(records: bytes, config: CodecConfig = DEFAULT_CONFIG) -> bytes:
    """Wrap a record region into a complete FIT file.

    Args:
        records: Concatenated definition and data records
        config: Codec configuration (protocol/profile versions)

    Returns:
        Header + records + trailing CRC
    """
    header = build_header(len(records), config)
    body = header + records
    return body + crc16_bytes(body)


def unframe_file(
    data: bytes, *, verify_checksum: bool = True
) -> Tuple[FileHeader, bool]:
    """Validate the framing of a FIT file.

    The trailing CRC covers the header and all records. When the file is
    shorter than its header claims the CRC cannot be checked; the caller
    finds out while reading records.

    Args:
        data: Complete file bytes
        verify_checksum: If True, check header and file CRCs

    Returns:
        Tuple of (header, complete) where ``complete`` tells whether the
        whole record region and trailing CRC are present

    Raises:
        FramingError: If the header is invalid or a CRC check fails
    """
    header = parse_header(data, verify_checksum=verify_checksum)
    complete = len(data) >= header.records_end + CRC_SIZE

    if not complete:
        logger.warning(
            f"FIT file is {len(data)} bytes, header declares {header.records_end + CRC_SIZE}; "
            "file CRC not verified"
        )
    elif verify_checksum:
        stored = struct.unpack("<H", data[header.records_end : header.records_end + CRC_SIZE])[0]
        computed = crc16(data[: header.records_end])
        if stored != computed:
            raise FramingError(
                f"File CRC mismatch: stored 0x{stored:04x}, computed 0x{computed:04x}"
            )

    return header, complete
