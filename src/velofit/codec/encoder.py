"""Data record encoder.

This module provides encode_record(), which turns a mapping of field values
into one data record laid out according to a Definition.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .schema import LOCAL_SLOT_MASK, Definition, DevFieldKey


def encode_record(
    definition: Definition,
    values: Optional[Mapping[int, Any]] = None,
    dev_values: Optional[Mapping[DevFieldKey, Any]] = None,
) -> bytes:
    """Encode one data record.

    Standard fields are looked up by field number, developer fields by
    DevFieldKey. A missing or None value is written as the field type's
    invalid pattern. Strings are truncated and zero-padded to the declared
    width; byte fields are padded or truncated.

    Args:
        definition: Definition the record conforms to
        values: Field number -> value
        dev_values: DevFieldKey -> value

    Returns:
        Record bytes, header byte included

    Example:
        >>> d = define_message(6, 20, [FieldDef(3, BaseType.UINT8), FieldDef(7, BaseType.UINT16)])
        >>> encode_record(d, {7: 250}).hex()
        '06fffa00'
    """
    values = values or {}
    dev_values = dev_values or {}

    result = bytearray()
    result.append(definition.local_slot & LOCAL_SLOT_MASK)

    for f in definition.fields:
        result.extend(f.base_type.encode(values.get(f.number), f.size, definition.little_endian))

    for d in definition.dev_fields:
        value = dev_values.get(DevFieldKey(d.dev_index, d.number))
        result.extend(d.base_type.encode(value, d.size, definition.little_endian))

    return bytes(result)
