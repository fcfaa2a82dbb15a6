"""Unit tests for CRC utilities."""

from __future__ import annotations

import pytest

from velofit.utils.crc import crc16, crc16_bytes, verify_crc16


class TestCRC16:
    """Test FIT CRC-16 functionality."""

    def test_crc16_check_value(self) -> None:
        """Test the standard check value of the ARC variant."""
        assert crc16(b"123456789") == 0xBB3D

    def test_crc16_empty(self) -> None:
        """Test CRC of empty data is the initial value."""
        assert crc16(b"") == 0x0000

    def test_crc16_deterministic(self) -> None:
        """Test CRC-16 is deterministic."""
        data = b"Test data"
        assert crc16(data) == crc16(data)

    def test_crc16_different_data(self) -> None:
        """Test different data produces different CRC."""
        assert crc16(b"Hello") != crc16(b"World")

    def test_crc16_running_checksum(self) -> None:
        """Test continuing a checksum over a second buffer."""
        assert crc16(b"6789", crc16(b"12345")) == crc16(b"123456789")

    def test_crc16_bytes_little_endian(self) -> None:
        """Test CRC-16 as bytes is little-endian."""
        assert crc16_bytes(b"123456789") == b"\x3d\xbb"

    def test_appended_crc_gives_zero_residue(self) -> None:
        """Test data followed by its own CRC checksums to zero."""
        data = b"FIT record region"
        assert crc16(data + crc16_bytes(data)) == 0

    def test_verify_crc16_success(self) -> None:
        """Test successful CRC-16 verification."""
        data = b"Test data"
        assert verify_crc16(data, crc16(data)) is True
        assert verify_crc16(data, crc16_bytes(data)) is True

    def test_verify_crc16_failure(self) -> None:
        """Test failed CRC-16 verification."""
        assert verify_crc16(b"Test data", 0x1234) is False

    def test_verify_crc16_wrong_length(self) -> None:
        """Test CRC bytes of the wrong length are rejected."""
        with pytest.raises(ValueError, match="2 bytes"):
            verify_crc16(b"Test data", b"\x00")

    def test_single_bit_flip_detected(self) -> None:
        """Test flipping any single bit changes the CRC."""
        data = bytearray(b"power=250;hr=140")
        original = crc16(bytes(data))
        for i in range(len(data)):
            for bit in range(8):
                data[i] ^= 1 << bit
                assert crc16(bytes(data)) != original
                data[i] ^= 1 << bit
