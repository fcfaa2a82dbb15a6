"""Message definitions.

A FIT definition record declares the binary shape of the data records that
follow it for one local slot. This module provides the field descriptors and
the immutable Definition object whose ``encoded`` bytes are the ready-to-emit
definition record.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Iterable, NamedTuple, Optional, Tuple

from ..exceptions import SchemaError
from .types import BaseType, type_of

DEFINITION_FLAG = 0x40
DEV_DATA_FLAG = 0x20
LOCAL_SLOT_MASK = 0x0F
MAX_LOCAL_SLOT = 15


class DevFieldKey(NamedTuple):
    """Key of a developer field: the developer data index plus the field number.

    Two vendors may both use field number 0; the developer data index keeps
    their values apart.
    """

    dev_index: int
    number: int


@dataclass(frozen=True)
class FieldDef:
    """A standard field in a definition.

    Attributes:
        number: Field definition number within the global message
        base_type: FIT base type
        size: Encoded size in bytes (defaults to the base type size)
        name: Human-readable name, informational only
    """

    number: int
    base_type: BaseType
    size: int = 0
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_type", type_of(self.base_type))
        if not self.size:
            object.__setattr__(self, "size", self.base_type.size)
        _check_field(self.number, self.size)


@dataclass(frozen=True)
class DevFieldDef:
    """A developer field in a definition.

    The base type is not part of the binary definition; the reader learns it
    from a field description record. It is kept here so the encoder can
    write the value.
    """

    number: int
    base_type: BaseType
    size: int = 0
    dev_index: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_type", type_of(self.base_type))
        if not self.size:
            object.__setattr__(self, "size", self.base_type.size)
        _check_field(self.number, self.size)


def _check_field(number: int, size: int) -> None:
    if not 0 <= number <= 255:
        raise SchemaError(f"Field number must be 0-255, got {number}")
    if not 1 <= size <= 255:
        raise SchemaError(f"Field {number}: size must be 1-255 bytes, got {size}")


@dataclass(frozen=True)
class Definition:
    """A message definition bound to a local slot.

    Attributes:
        local_slot: Local message number (0-15)
        global_id: Global message number
        fields: Standard fields, in wire order
        dev_fields: Developer fields, in wire order
        little_endian: Architecture of the data records
        encoded: The definition record bytes, header byte included
    """

    local_slot: int
    global_id: int
    fields: Tuple[FieldDef, ...]
    dev_fields: Tuple[DevFieldDef, ...] = ()
    little_endian: bool = True
    encoded: bytes = field(default=b"", repr=False)

    @property
    def has_dev_fields(self) -> bool:
        return len(self.dev_fields) > 0

    @property
    def data_size(self) -> int:
        """Size of one data record body in bytes (header byte excluded)."""
        return sum(f.size for f in self.fields) + sum(f.size for f in self.dev_fields)


def define_message(
    local_slot: int,
    global_id: int,
    fields: Iterable[FieldDef],
    dev_fields: Optional[Iterable[DevFieldDef]] = None,
    *,
    little_endian: bool = True,
) -> Definition:
    """Build a definition record for ``local_slot``.

    Field order is preserved exactly; the reader applies the same order
    positionally when decoding data records.

    Args:
        local_slot: Local message number (0-15)
        global_id: Global message number (0-65535)
        fields: Standard fields
        dev_fields: Developer fields (optional)
        little_endian: Architecture flag written into the definition

    Returns:
        Definition carrying the encoded definition record

    Raises:
        SchemaError: If the slot, message number or field counts are out of range

    Example:
        >>> d = define_message(6, 20, [FieldDef(253, BaseType.UINT32), FieldDef(7, BaseType.UINT16)])
        >>> d.encoded.hex()
        '460000140002fd0486070284'
    """
    if not 0 <= local_slot <= MAX_LOCAL_SLOT:
        raise SchemaError(f"Local slot must be 0-{MAX_LOCAL_SLOT}, got {local_slot}")
    if not 0 <= global_id <= 0xFFFF:
        raise SchemaError(f"Global message number must be 0-65535, got {global_id}")

    field_tuple = tuple(fields)
    dev_tuple = tuple(dev_fields or ())
    if len(field_tuple) > 255 or len(dev_tuple) > 255:
        raise SchemaError(
            f"Message {global_id}: at most 255 fields per kind, got "
            f"{len(field_tuple)} standard / {len(dev_tuple)} developer"
        )

    order = "<" if little_endian else ">"
    header = DEFINITION_FLAG | (DEV_DATA_FLAG if dev_tuple else 0) | (local_slot & LOCAL_SLOT_MASK)

    result = bytearray()
    result.append(header)
    result.append(0x00)  # reserved
    result.append(0x00 if little_endian else 0x01)
    result.extend(struct.pack(order + "H", global_id))
    result.append(len(field_tuple))
    for f in field_tuple:
        result.extend((f.number, f.size, f.base_type.type_id))

    if dev_tuple:
        result.append(len(dev_tuple))
        for d in dev_tuple:
            result.extend((d.number, d.size, d.dev_index & 0xFF))

    return Definition(
        local_slot=local_slot,
        global_id=global_id,
        fields=field_tuple,
        dev_fields=dev_tuple,
        little_endian=little_endian,
        encoded=bytes(result),
    )
