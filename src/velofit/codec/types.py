"""FIT base type registry.

Every field in a FIT definition record carries a base type id. This module
holds the fixed catalog of base types as a closed enumeration, together with
one encode and one decode function per kind of type, resolved once through
a lookup table.

Each base type has an "invalid" value: the bit pattern written in place of a
field that has no value. Decoding compares raw bytes against that pattern,
so the float32 sentinel (0xFFFFFFFF, a NaN) is detected bit-exactly.
"""

from __future__ import annotations

import enum
import math
import struct
from typing import Any, Callable, Dict, Tuple

from ..exceptions import SchemaError


class BaseType(enum.Enum):
    """FIT base types.

    Member values are ``(type_id, size, invalid, struct_code)``. The struct
    code is the signed or unsigned element format; strings and byte blobs
    have none.

    Example:
        >>> BaseType.UINT16.type_id, BaseType.UINT16.size, hex(BaseType.UINT16.invalid)
        (132, 2, '0xffff')
    """

    ENUM = (0x00, 1, 0xFF, "B")
    SINT8 = (0x01, 1, 0x7F, "b")
    UINT8 = (0x02, 1, 0xFF, "B")
    STRING = (0x07, 1, 0x00, "")
    UINT8Z = (0x0A, 1, 0x00, "B")
    BYTE = (0x0D, 1, 0x00, "")
    SINT16 = (0x83, 2, 0x7FFF, "h")
    UINT16 = (0x84, 2, 0xFFFF, "H")
    SINT32 = (0x85, 4, 0x7FFFFFFF, "i")
    UINT32 = (0x86, 4, 0xFFFFFFFF, "I")
    FLOAT32 = (0x88, 4, 0xFFFFFFFF, "f")
    UINT16Z = (0x8B, 2, 0x0000, "H")
    UINT32Z = (0x8C, 4, 0x00000000, "I")

    def __init__(self, type_id: int, size: int, invalid: int, struct_code: str) -> None:
        self.type_id = type_id
        self.size = size
        self.invalid = invalid
        self.struct_code = struct_code

    @property
    def type_name(self) -> str:
        """Lower-case FIT name of the type (``"uint16"``, ``"string"``...)."""
        return self.name.lower()

    def sentinel_bytes(self, size: int | None = None, little_endian: bool = True) -> bytes:
        """Return the invalid pattern for a field of ``size`` bytes.

        Multi-element fields repeat the element pattern.
        """
        element = self.invalid.to_bytes(self.size, "little" if little_endian else "big")
        count = max(1, (size or self.size) // self.size)
        return element * count

    def encode(self, value: Any, size: int | None = None, little_endian: bool = True) -> bytes:
        """Encode ``value`` into exactly ``size`` bytes (sentinel when None)."""
        width = size or self.size
        if isinstance(value, float) and not math.isfinite(value) and self is not BaseType.FLOAT32:
            value = None
        if value is None:
            return _fit(self.sentinel_bytes(width, little_endian), width)
        encoder, _ = _CODECS[self]
        return _fit(encoder(self, value, width, little_endian), width)

    def decode(self, raw: bytes, little_endian: bool = True) -> Any:
        """Decode raw field bytes, returning None for the sentinel pattern."""
        if raw == self.sentinel_bytes(len(raw), little_endian):
            return None
        _, decoder = _CODECS[self]
        return decoder(self, raw, little_endian)


def _fit(data: bytes, width: int) -> bytes:
    if len(data) >= width:
        return data[:width]
    return data + b"\x00" * (width - len(data))


def _byte_order(little_endian: bool) -> str:
    return "<" if little_endian else ">"


def _encode_int(base: BaseType, value: Any, width: int, little_endian: bool) -> bytes:
    if isinstance(value, (list, tuple)):
        return b"".join(_encode_int(base, item, base.size, little_endian) for item in value)
    mask = (1 << (8 * base.size)) - 1
    unsigned = base.struct_code.upper()
    return struct.pack(_byte_order(little_endian) + unsigned, int(round(value)) & mask)


def _decode_int(base: BaseType, raw: bytes, little_endian: bool) -> Any:
    count = len(raw) // base.size
    if count == 0:
        # Declared narrower than the base type; keep the raw bytes
        return bytes(raw)
    if count == 1:
        return struct.unpack(_byte_order(little_endian) + base.struct_code, raw[: base.size])[0]
    values = []
    for i in range(count):
        element = raw[i * base.size : (i + 1) * base.size]
        values.append(base.decode(element, little_endian))
    return values


def _encode_float(base: BaseType, value: Any, width: int, little_endian: bool) -> bytes:
    return struct.pack(_byte_order(little_endian) + "f", float(value))


def _decode_float(base: BaseType, raw: bytes, little_endian: bool) -> Any:
    count = len(raw) // base.size
    if count == 0:
        return bytes(raw)
    if count == 1:
        return struct.unpack(_byte_order(little_endian) + "f", raw[: base.size])[0]
    return [
        base.decode(raw[i * base.size : (i + 1) * base.size], little_endian) for i in range(count)
    ]


def _encode_string(base: BaseType, value: Any, width: int, little_endian: bool) -> bytes:
    # Truncate on a character boundary, leaving room for the terminator
    encoded = str(value).encode("utf-8")[: width - 1]
    encoded = encoded.decode("utf-8", errors="ignore").encode("utf-8")
    return encoded + b"\x00"


def _decode_string(base: BaseType, raw: bytes, little_endian: bool) -> Any:
    return raw.split(b"\x00", 1)[0].decode("utf-8", errors="replace")


def _encode_bytes(base: BaseType, value: Any, width: int, little_endian: bool) -> bytes:
    if isinstance(value, int):
        return bytes([value & 0xFF])
    return bytes(value)


def _decode_bytes(base: BaseType, raw: bytes, little_endian: bool) -> Any:
    if len(raw) == 1:
        return raw[0]
    return bytes(raw)


_Encoder = Callable[[BaseType, Any, int, bool], bytes]
_Decoder = Callable[[BaseType, bytes, bool], Any]

_CODECS: Dict[BaseType, Tuple[_Encoder, _Decoder]] = {}
for _base in BaseType:
    if _base is BaseType.STRING:
        _CODECS[_base] = (_encode_string, _decode_string)
    elif _base is BaseType.BYTE:
        _CODECS[_base] = (_encode_bytes, _decode_bytes)
    elif _base is BaseType.FLOAT32:
        _CODECS[_base] = (_encode_float, _decode_float)
    else:
        _CODECS[_base] = (_encode_int, _decode_int)

_BY_NAME: Dict[str, BaseType] = {base.type_name: base for base in BaseType}
_BY_ID: Dict[int, BaseType] = {base.type_id: base for base in BaseType}


def type_of(key: str | int | BaseType) -> BaseType:
    """Look up a base type by FIT name or by base type id.

    Unknown ids resolve to ``BaseType.BYTE`` so that foreign files decode as
    raw bytes instead of failing.

    Args:
        key: Type name (``"uint16"``), base type id (``0x84``) or a BaseType

    Returns:
        The matching BaseType

    Raises:
        SchemaError: If ``key`` is a name that is not in the catalog
    """
    if isinstance(key, BaseType):
        return key
    if isinstance(key, str):
        try:
            return _BY_NAME[key.lower()]
        except KeyError as err:
            raise SchemaError(f"Unknown base type name: {key!r}") from err
    return _BY_ID.get(key, BaseType.BYTE)
