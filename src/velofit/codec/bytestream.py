"""Byte cursor used by the record decoder.

FIT records are byte-aligned, so unlike a general bit unpacker the reader
only needs whole-byte reads with an explicit endianness per read.
"""

from __future__ import annotations

import struct


class ByteReader:
    """Reads values from a byte buffer, front to back.

    Reads never go past ``limit``; a read that would raises IndexError, which
    the decoder turns into a truncated-stream error.

    Example:
        >>> reader = ByteReader(b"\\x0e\\x20\\x00\\x01")
        >>> reader.read_uint8()
        14
        >>> reader.read_uint8(), reader.read_uint16()
        (32, 256)
    """

    def __init__(self, data: bytes, start: int = 0, limit: int | None = None) -> None:
        """Initialize a reader over ``data[start:limit]``.

        Args:
            data: Byte buffer to read
            start: Initial position
            limit: Position reads may not pass (defaults to the buffer length)
        """
        self._data = memoryview(data)
        self._position = start
        self._limit = len(data) if limit is None else min(limit, len(data))

    def read_bytes(self, num_bytes: int) -> bytes:
        """Read raw bytes.

        Raises:
            IndexError: If not enough bytes are available
        """
        end = self._position + num_bytes
        if end > self._limit:
            raise IndexError(
                f"Not enough bytes at offset {self._position}: need {num_bytes}, "
                f"have {self._limit - self._position}"
            )
        chunk = bytes(self._data[self._position : end])
        self._position = end
        return chunk

    def read_uint8(self) -> int:
        return self.read_bytes(1)[0]

    def read_uint16(self, little_endian: bool = True) -> int:
        fmt = "<H" if little_endian else ">H"
        return struct.unpack(fmt, self.read_bytes(2))[0]

    def position(self) -> int:
        """Return the current byte position in the underlying buffer."""
        return self._position
