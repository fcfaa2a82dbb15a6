"""Unit tests for message definitions and data record encoding."""

from __future__ import annotations

import pytest

from velofit.codec.encoder import encode_record
from velofit.codec.schema import DevFieldDef, DevFieldKey, FieldDef, define_message
from velofit.codec.types import BaseType
from velofit.exceptions import SchemaError


class TestFieldDefs:
    """Test field descriptors."""

    def test_size_defaults_to_base_type(self) -> None:
        """Test size falls back to the base type size."""
        assert FieldDef(7, BaseType.UINT16).size == 2
        assert DevFieldDef(0, BaseType.UINT32).size == 4

    def test_type_name_accepted(self) -> None:
        """Test base types may be given by name."""
        field = FieldDef(3, "uint8")
        assert field.base_type is BaseType.UINT8

    def test_invalid_number(self) -> None:
        """Test field numbers outside a byte are rejected."""
        with pytest.raises(SchemaError, match="Field number"):
            FieldDef(256, BaseType.UINT8)

    def test_invalid_size(self) -> None:
        """Test field sizes outside 1-255 are rejected."""
        with pytest.raises(SchemaError, match="size"):
            FieldDef(1, BaseType.STRING, 256)


class TestDefineMessage:
    """Test definition record encoding."""

    def test_definition_bytes(self) -> None:
        """Test the exact bytes of a simple definition."""
        d = define_message(6, 20, [FieldDef(253, BaseType.UINT32), FieldDef(7, BaseType.UINT16)])
        assert d.encoded.hex() == "460000140002fd0486070284"
        assert d.data_size == 6
        assert not d.has_dev_fields

    def test_developer_fields(self) -> None:
        """Test the developer flag and trailing developer field list."""
        d = define_message(
            6, 20, [FieldDef(7, BaseType.UINT16)], [DevFieldDef(0, BaseType.UINT16, dev_index=0)]
        )
        assert d.encoded == bytes([0x66, 0, 0, 20, 0, 1, 7, 2, 0x84, 1, 0, 2, 0])
        assert d.has_dev_fields
        assert d.data_size == 4

    def test_big_endian(self) -> None:
        """Test the architecture byte and global number byte order."""
        d = define_message(1, 0x0102, [], little_endian=False)
        assert d.encoded == bytes([0x41, 0, 1, 0x01, 0x02, 0])

    def test_field_order_preserved(self) -> None:
        """Test fields are written in the order given."""
        d = define_message(0, 0, [FieldDef(4, BaseType.UINT32), FieldDef(0, BaseType.ENUM)])
        assert [f.number for f in d.fields] == [4, 0]
        assert d.encoded[6] == 4

    def test_invalid_slot(self) -> None:
        """Test local slots outside 0-15 are rejected."""
        with pytest.raises(SchemaError, match="Local slot"):
            define_message(16, 20, [])

    def test_invalid_global_id(self) -> None:
        """Test global numbers outside 16 bits are rejected."""
        with pytest.raises(SchemaError, match="Global message number"):
            define_message(0, 70000, [])


class TestEncodeRecord:
    """Test data record encoding."""

    def test_values_by_field_number(self) -> None:
        """Test values are placed in definition order."""
        d = define_message(6, 20, [FieldDef(3, BaseType.UINT8), FieldDef(7, BaseType.UINT16)])
        assert encode_record(d, {7: 250, 3: 140}) == bytes([6, 140, 250, 0])

    def test_missing_values_are_sentinels(self) -> None:
        """Test absent fields are written as invalid."""
        d = define_message(6, 20, [FieldDef(3, BaseType.UINT8), FieldDef(7, BaseType.UINT16)])
        assert encode_record(d, {7: 250}).hex() == "06fffa00"
        assert encode_record(d).hex() == "06ffffff"

    def test_developer_values(self) -> None:
        """Test developer values are keyed by index and number."""
        d = define_message(
            6, 20, [FieldDef(7, BaseType.UINT16)], [DevFieldDef(0, BaseType.UINT16, dev_index=0)]
        )
        record = encode_record(d, {7: 100}, {DevFieldKey(0, 0): 300})
        assert record == bytes([6, 100, 0, 0x2C, 0x01])

    def test_developer_index_distinguishes_fields(self) -> None:
        """Test a value under another developer index is not used."""
        d = define_message(
            6, 20, [FieldDef(7, BaseType.UINT16)], [DevFieldDef(0, BaseType.UINT16, dev_index=0)]
        )
        record = encode_record(d, {7: 100}, {DevFieldKey(1, 0): 300})
        assert record[-2:] == b"\xff\xff"

    def test_big_endian_data(self) -> None:
        """Test data follows the definition's architecture."""
        d = define_message(2, 20, [FieldDef(7, BaseType.UINT16)], little_endian=False)
        assert encode_record(d, {7: 250}) == bytes([2, 0, 250])

    def test_record_length(self) -> None:
        """Test a record is the header byte plus the data size."""
        d = define_message(
            3,
            206,
            [FieldDef(3, BaseType.STRING, 16), FieldDef(5, BaseType.UINT16)],
        )
        assert len(encode_record(d, {3: "a very long field name indeed"})) == 1 + d.data_size
