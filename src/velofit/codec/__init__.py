"""FIT record codec for velofit.

This module provides the base type registry, message definitions, the data
record encoder and the streaming record decoder.
"""

from __future__ import annotations

from .decoder import DataMessage, DevFieldDescription, RecordStream
from .encoder import encode_record
from .schema import Definition, DevFieldDef, DevFieldKey, FieldDef, define_message
from .types import BaseType, type_of

__all__ = [
    "BaseType",
    "type_of",
    "FieldDef",
    "DevFieldDef",
    "DevFieldKey",
    "Definition",
    "define_message",
    "encode_record",
    "RecordStream",
    "DataMessage",
    "DevFieldDescription",
]
