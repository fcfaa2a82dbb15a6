"""Unit tests for the FIT base type registry."""

from __future__ import annotations

import pytest

from velofit.codec.types import BaseType, type_of
from velofit.exceptions import SchemaError


class TestCatalog:
    """Test the base type catalog."""

    def test_type_ids_unique(self) -> None:
        """Test every base type has its own id."""
        ids = [base.type_id for base in BaseType]
        assert len(ids) == len(set(ids)) == 13

    def test_attributes(self) -> None:
        """Test type id, size and invalid value of a few types."""
        assert (BaseType.ENUM.type_id, BaseType.ENUM.size, BaseType.ENUM.invalid) == (0x00, 1, 0xFF)
        assert (BaseType.SINT16.type_id, BaseType.SINT16.invalid) == (0x83, 0x7FFF)
        assert (BaseType.UINT32.type_id, BaseType.UINT32.size) == (0x86, 4)
        assert BaseType.UINT32Z.invalid == 0
        assert BaseType.BYTE.type_id == 0x0D

    def test_lookup_by_name(self) -> None:
        """Test lookup by FIT type name, case-insensitive."""
        assert type_of("uint16") is BaseType.UINT16
        assert type_of("UINT16") is BaseType.UINT16
        assert type_of(BaseType.STRING) is BaseType.STRING

    def test_lookup_by_id(self) -> None:
        """Test lookup by base type id."""
        assert type_of(0x84) is BaseType.UINT16
        assert type_of(0x07) is BaseType.STRING

    def test_unknown_id_is_byte(self) -> None:
        """Test unknown ids fall back to raw bytes."""
        assert type_of(0x99) is BaseType.BYTE

    def test_unknown_name_rejected(self) -> None:
        """Test unknown names raise SchemaError."""
        with pytest.raises(SchemaError, match="Unknown base type"):
            type_of("uint128")


class TestIntegers:
    """Test integer encoding and sentinels."""

    def test_uint16_little_and_big_endian(self) -> None:
        """Test byte order follows the architecture flag."""
        assert BaseType.UINT16.encode(250) == b"\xfa\x00"
        assert BaseType.UINT16.encode(250, little_endian=False) == b"\x00\xfa"
        assert BaseType.UINT16.decode(b"\x00\xfa", little_endian=False) == 250

    def test_none_encodes_sentinel(self) -> None:
        """Test missing values become the invalid pattern."""
        assert BaseType.UINT8.encode(None) == b"\xff"
        assert BaseType.SINT8.encode(None) == b"\x7f"
        assert BaseType.UINT16.encode(None) == b"\xff\xff"
        assert BaseType.UINT8Z.encode(None) == b"\x00"
        assert BaseType.SINT32.encode(None, little_endian=False) == b"\x7f\xff\xff\xff"

    def test_sentinel_decodes_none(self) -> None:
        """Test the invalid pattern decodes to None, not zero."""
        assert BaseType.UINT8.decode(b"\xff") is None
        assert BaseType.UINT16Z.decode(b"\x00\x00") is None
        assert BaseType.UINT8.decode(b"\x00") == 0

    def test_signed_values(self) -> None:
        """Test negative values encode in two's complement."""
        assert BaseType.SINT16.encode(-5) == b"\xfb\xff"
        assert BaseType.SINT16.decode(b"\xfb\xff") == -5

    def test_float_values_rounded(self) -> None:
        """Test float input to an integer type is rounded."""
        assert BaseType.UINT16.encode(249.6) == b"\xfa\x00"

    def test_non_finite_is_sentinel(self) -> None:
        """Test NaN and infinity are written as invalid."""
        assert BaseType.UINT8.encode(float("nan")) == b"\xff"
        assert BaseType.UINT16.encode(float("inf")) == b"\xff\xff"

    def test_arrays(self) -> None:
        """Test multi-element fields."""
        assert BaseType.UINT16.encode([1, 2], 4) == b"\x01\x00\x02\x00"
        assert BaseType.UINT16.decode(b"\x01\x00\x02\x00") == [1, 2]
        assert BaseType.UINT16.decode(b"\x01\x00\xff\xff") == [1, None]
        assert BaseType.UINT16.sentinel_bytes(4) == b"\xff" * 4


class TestFloat:
    """Test float32 encoding."""

    def test_roundtrip(self) -> None:
        """Test an exactly representable float survives."""
        assert BaseType.FLOAT32.decode(BaseType.FLOAT32.encode(1.5)) == 1.5

    def test_sentinel(self) -> None:
        """Test the all-ones pattern is detected bit-exactly."""
        assert BaseType.FLOAT32.encode(None) == b"\xff\xff\xff\xff"
        assert BaseType.FLOAT32.decode(b"\xff\xff\xff\xff") is None

    def test_narrow_field_kept_raw(self) -> None:
        """Test a field narrower than four bytes decodes to its raw bytes."""
        assert BaseType.FLOAT32.decode(b"\x00\x3f") == b"\x00\x3f"

    def test_arrays(self) -> None:
        """Test multiples of four bytes decode element by element."""
        raw = BaseType.FLOAT32.encode(1.5) + BaseType.FLOAT32.encode(None)
        assert BaseType.FLOAT32.decode(raw) == [1.5, None]


class TestStrings:
    """Test string and byte fields."""

    def test_padded_and_terminated(self) -> None:
        """Test strings are NUL-terminated and zero-padded."""
        assert BaseType.STRING.encode("abc", 5) == b"abc\x00\x00"
        assert BaseType.STRING.decode(b"abc\x00\x00") == "abc"

    def test_truncated_to_width(self) -> None:
        """Test long strings are cut to leave room for the terminator."""
        assert BaseType.STRING.encode("abcdef", 4) == b"abc\x00"

    def test_truncation_keeps_utf8_valid(self) -> None:
        """Test truncation never splits a multi-byte character."""
        assert BaseType.STRING.encode("héllo", 3) == b"h\x00\x00"

    def test_empty_string_is_invalid(self) -> None:
        """Test an all-zero string field decodes to None."""
        assert BaseType.STRING.encode("", 4) == b"\x00" * 4
        assert BaseType.STRING.decode(b"\x00" * 4) is None

    def test_bytes(self) -> None:
        """Test byte fields are padded and returned raw."""
        assert BaseType.BYTE.encode(b"ab", 4) == b"ab\x00\x00"
        assert BaseType.BYTE.decode(b"ab\x00\x00") == b"ab\x00\x00"
        assert BaseType.BYTE.decode(b"\x05") == 5
        assert BaseType.BYTE.decode(b"\x00\x00") is None
