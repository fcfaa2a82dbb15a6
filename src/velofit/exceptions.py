"""Exception hierarchy for velofit.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from VelofitError for easy catching of any velofit-specific error.
"""

from __future__ import annotations

from typing import Any


class VelofitError(Exception):
    """Base exception for all velofit errors."""

    pass


class SchemaError(VelofitError):
    """Raised when a message definition is invalid.

    Examples:
        - Local slot outside 0-15
        - Field size outside 1-255 bytes
        - Unknown base type name
    """

    pass


class EncodeError(VelofitError):
    """Raised when the inputs handed to the file builder cannot be interpreted.

    Examples:
        - Workout plan dictionary that does not validate
        - Sample entry that is not a mapping or Sample model
    """

    pass


class DecodeError(VelofitError):
    """Raised when decoding activity data fails.

    Examples:
        - Compressed timestamp record headers (not supported)
        - Definition record cut short
    """

    pass


class TruncatedStreamError(DecodeError):
    """Raised when the record stream cannot be read to its end.

    This happens when a data record references a local slot that was never
    defined, or when a record runs past the end of the record region. The
    decoder cannot know the shape of such a record, so it stops.

    Attributes:
        partial: Whatever was decoded before the stop (a DecodedActivity when
            raised from parse_fit_file, otherwise None)
        offset: Byte offset of the record that could not be read
    """

    def __init__(self, message: str, *, offset: int, partial: Any = None) -> None:
        super().__init__(message)
        self.offset = offset
        self.partial = partial


class FramingError(VelofitError):
    """Raised when file framing is invalid.

    Examples:
        - Header too short or wrong magic tag
        - Header CRC mismatch
        - Trailing file CRC mismatch
    """

    pass
