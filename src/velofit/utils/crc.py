"""CRC (Cyclic Redundancy Check) implementation for FIT files.

FIT files use the bit-reversed CRC-16 with polynomial 0xA001 and a zero
initial value, both for the header checksum and the trailing file checksum.
"""

from __future__ import annotations

import struct

FIT_CRC_POLY = 0xA001


def crc16(data: bytes, init: int = 0x0000) -> int:
    """Calculate the FIT CRC-16 checksum.

    Args:
        data: Data to checksum
        init: Initial CRC value (default: 0x0000). Pass a previous result to
            continue a running checksum over several buffers.

    Returns:
        16-bit CRC value

    Example:
        >>> hex(crc16(b"123456789"))
        '0xbb3d'
    """
    crc = init

    for byte in data:
        for _ in range(8):
            mix = (crc ^ byte) & 0x01
            crc >>= 1
            if mix:
                crc ^= FIT_CRC_POLY
            byte >>= 1

    return crc & 0xFFFF


def crc16_bytes(data: bytes, init: int = 0x0000) -> bytes:
    """Calculate CRC-16 checksum and return as 2 bytes (little-endian).

    Args:
        data: Data to checksum
        init: Initial CRC value

    Returns:
        2 bytes representing the CRC value, as written into FIT files
    """
    return struct.pack("<H", crc16(data, init))


def verify_crc16(data: bytes, expected_crc: int | bytes) -> bool:
    """Verify a FIT CRC-16 checksum.

    Args:
        data: Data to verify
        expected_crc: Expected CRC value (int or 2 little-endian bytes)

    Returns:
        True if CRC matches, False otherwise

    Example:
        >>> data = b"Hello, World!"
        >>> verify_crc16(data, crc16(data))
        True
    """
    if isinstance(expected_crc, (bytes, bytearray)):
        if len(expected_crc) != 2:
            raise ValueError(f"CRC-16 must be 2 bytes, got {len(expected_crc)}")
        expected_crc = struct.unpack("<H", expected_crc)[0]

    return crc16(data) == expected_crc
