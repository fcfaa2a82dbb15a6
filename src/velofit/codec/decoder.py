"""Streaming FIT record decoder.

This module provides RecordStream, a single forward pass over the record
region of a FIT file. It keeps the table of local slot definitions and the
table of developer field descriptions for the duration of one pass, and
yields every data record as a DataMessage with its fields decoded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, NamedTuple, Optional, Set, Tuple

from loguru import logger

from ..config import DEFAULT_CONFIG, CodecConfig
from ..exceptions import DecodeError, TruncatedStreamError
from ..framing.header import unframe_file
from .bytestream import ByteReader
from .messages import FieldDescriptionField, MesgNum
from .schema import DEFINITION_FLAG, DEV_DATA_FLAG, LOCAL_SLOT_MASK, DevFieldKey
from .types import BaseType, type_of

COMPRESSED_HEADER_FLAG = 0x80


class _WireField(NamedTuple):
    number: int
    size: int
    base_type: BaseType


class _WireDevField(NamedTuple):
    number: int
    size: int
    dev_index: int


class _WireDefinition(NamedTuple):
    global_id: int
    little_endian: bool
    fields: Tuple[_WireField, ...]
    dev_fields: Tuple[_WireDevField, ...]


@dataclass(frozen=True)
class DevFieldDescription:
    """A developer field description seen in the stream.

    Attributes:
        key: Developer data index and field number being described
        name: Field name
        base_type: Base type used to decode the field's bytes
        native_mesg: Global message the field decorates, if declared
        units: Units string, if declared
    """

    key: DevFieldKey
    name: str
    base_type: BaseType
    native_mesg: Optional[int] = None
    units: Optional[str] = None


@dataclass
class DataMessage:
    """One decoded data record.

    Attributes:
        global_id: Global message number
        local_slot: Local slot the record referenced
        offset: Byte offset of the record header in the file
        values: Field number -> decoded value (None for invalid)
        dev_values: DevFieldKey -> decoded value; raw bytes when the field
            has no description
        dev_names: DevFieldKey -> field name, for described developer fields
    """

    global_id: int
    local_slot: int
    offset: int
    values: Dict[int, Any] = field(default_factory=dict)
    dev_values: Dict[DevFieldKey, Any] = field(default_factory=dict)
    dev_names: Dict[DevFieldKey, str] = field(default_factory=dict)

    def dev_values_by_name(self) -> Dict[str, Any]:
        """Developer values keyed by their described field name."""
        return {name: self.dev_values[key] for key, name in self.dev_names.items()}


class RecordStream:
    """Single-use iterator over the data records of a FIT file.

    The header and CRCs are validated on construction. Iterating reads the
    records front to back; definition records update the slot table and are
    not yielded. A data record referencing an undefined slot, or a record
    running past the end of the data, raises TruncatedStreamError: the shape
    of such a record is unknown, so nothing after it can be read.

    Example:
        >>> stream = RecordStream(data)
        >>> for message in stream:
        ...     if message.global_id == MesgNum.RECORD:
        ...         print(message.values[7])
    """

    def __init__(self, data: bytes, config: CodecConfig = DEFAULT_CONFIG) -> None:
        """Validate framing and prepare a pass over ``data``.

        Args:
            data: Complete FIT file bytes
            config: Codec configuration (checksum verification)

        Raises:
            FramingError: If the header is invalid or a CRC check fails
        """
        self._data = bytes(data)
        self.header, self.complete = unframe_file(
            self._data, verify_checksum=config.verify_checksum
        )
        self._definitions: Dict[int, _WireDefinition] = {}
        self._descriptions: Dict[DevFieldKey, DevFieldDescription] = {}
        self._undescribed: Set[DevFieldKey] = set()
        self._started = False

    @property
    def descriptions(self) -> Dict[DevFieldKey, DevFieldDescription]:
        """Developer field descriptions seen so far."""
        return dict(self._descriptions)

    def __iter__(self) -> Iterator[DataMessage]:
        if self._started:
            raise DecodeError("RecordStream can only be iterated once")
        self._started = True
        return self._messages()

    def _messages(self) -> Iterator[DataMessage]:
        end = self.header.records_end
        reader = ByteReader(self._data, start=self.header.header_size, limit=end)

        while reader.position() < end:
            offset = reader.position()
            try:
                record_header = reader.read_uint8()
                slot = record_header & LOCAL_SLOT_MASK

                if record_header & COMPRESSED_HEADER_FLAG:
                    raise TruncatedStreamError(
                        f"Compressed timestamp header at offset {offset} is not supported",
                        offset=offset,
                    )

                if record_header & DEFINITION_FLAG:
                    has_dev = bool(record_header & DEV_DATA_FLAG)
                    self._definitions[slot] = self._read_definition(reader, has_dev)
                    continue

                definition = self._definitions.get(slot)
                if definition is None:
                    raise TruncatedStreamError(
                        f"Data record at offset {offset} references undefined local slot {slot}",
                        offset=offset,
                    )

                message = self._read_data(reader, definition, slot, offset)
            except IndexError as e:
                raise TruncatedStreamError(
                    f"Record at offset {offset} runs past the end of the data: {e}",
                    offset=offset,
                ) from e

            if message.global_id == MesgNum.FIELD_DESCRIPTION:
                self._register_description(message)

            yield message

    def _read_definition(self, reader: ByteReader, has_dev: bool) -> _WireDefinition:
        reader.read_uint8()  # reserved
        little_endian = reader.read_uint8() == 0
        global_id = reader.read_uint16(little_endian)

        fields = []
        for _ in range(reader.read_uint8()):
            number = reader.read_uint8()
            size = reader.read_uint8()
            fields.append(_WireField(number, size, type_of(reader.read_uint8())))

        dev_fields = []
        if has_dev:
            for _ in range(reader.read_uint8()):
                number = reader.read_uint8()
                size = reader.read_uint8()
                dev_fields.append(_WireDevField(number, size, reader.read_uint8()))

        return _WireDefinition(global_id, little_endian, tuple(fields), tuple(dev_fields))

    def _read_data(
        self, reader: ByteReader, definition: _WireDefinition, slot: int, offset: int
    ) -> DataMessage:
        little_endian = definition.little_endian
        message = DataMessage(global_id=definition.global_id, local_slot=slot, offset=offset)

        for f in definition.fields:
            raw = reader.read_bytes(f.size)
            message.values[f.number] = f.base_type.decode(raw, little_endian)

        for d in definition.dev_fields:
            raw = reader.read_bytes(d.size)
            key = DevFieldKey(d.dev_index, d.number)
            description = self._descriptions.get(key)
            if description is None:
                if key not in self._undescribed:
                    self._undescribed.add(key)
                    logger.warning(
                        f"Developer field {key.dev_index}:{key.number} has no description; "
                        "keeping raw bytes"
                    )
                message.dev_values[key] = raw
                continue
            message.dev_values[key] = description.base_type.decode(raw, little_endian)
            message.dev_names[key] = description.name

        return message

    def _register_description(self, message: DataMessage) -> None:
        values = message.values
        key = DevFieldKey(
            values.get(FieldDescriptionField.DEVELOPER_DATA_INDEX) or 0,
            values.get(FieldDescriptionField.FIELD_DEFINITION_NUMBER) or 0,
        )
        type_id = values.get(FieldDescriptionField.FIT_BASE_TYPE_ID)
        base_type = type_of(type_id) if isinstance(type_id, int) else BaseType.BYTE

        self._descriptions[key] = DevFieldDescription(
            key=key,
            name=values.get(FieldDescriptionField.FIELD_NAME) or "",
            base_type=base_type,
            native_mesg=values.get(FieldDescriptionField.NATIVE_MESG_NUM),
            units=values.get(FieldDescriptionField.UNITS),
        )
