"""velofit: FIT activity codec for indoor cycling

Encodes recorded indoor cycling sessions (power, heart rate and cadence
samples, pauses and the structured workout that was ridden) into Garmin FIT
activity files, and decodes them back. The workout plan is embedded in the
file as developer fields so that files written by velofit decode losslessly;
files from other writers fall back to the FIT workout steps.

Key Features:
- Pydantic models for workout plans, samples and decoded activities
- FIT base types, definitions and CRC-16 with no native dependencies
- Streaming record decoder with developer field support
- Partial decoding of truncated files

Quick Start:
    >>> from datetime import datetime, timezone
    >>> from velofit import encode, decode
    >>>
    >>> data = encode(
    ...     workout_plan={"workoutTitle": "Sweet Spot", "rawSegments": [[10, 88, 94]]},
    ...     samples=[{"t": 0, "power": 220, "hr": 130, "cadence": 90}],
    ...     ftp=250,
    ...     started_at=datetime(2024, 3, 1, 18, 0, tzinfo=timezone.utc),
    ... )
    >>> activity = decode(data)
    >>> activity.workout_plan.workout_title
    'Sweet Spot'
"""

from __future__ import annotations

from .activity import build_fit_file, compute_aggregates, parse_fit_file
from .codec import BaseType, DevFieldKey, RecordStream, define_message, encode_record, type_of
from .config import DEFAULT_CONFIG, CodecConfig
from .exceptions import (
    DecodeError,
    EncodeError,
    FramingError,
    SchemaError,
    TruncatedStreamError,
    VelofitError,
)
from .models import (
    ActivityMeta,
    DecodedActivity,
    PauseEvent,
    Sample,
    Segment,
    TextEvent,
    TimerEventType,
    WorkoutPlan,
)
from .utils import crc16, crc16_bytes, from_fit_timestamp, to_fit_timestamp, verify_crc16

__version__ = "0.1.0"

encode = build_fit_file
decode = parse_fit_file

__all__ = [
    # Core API
    "encode",
    "decode",
    "build_fit_file",
    "parse_fit_file",
    "compute_aggregates",
    # Models
    "WorkoutPlan",
    "Segment",
    "TextEvent",
    "Sample",
    "PauseEvent",
    "TimerEventType",
    "ActivityMeta",
    "DecodedActivity",
    # Configuration
    "CodecConfig",
    "DEFAULT_CONFIG",
    # Low-level codec
    "BaseType",
    "type_of",
    "DevFieldKey",
    "define_message",
    "encode_record",
    "RecordStream",
    # Exceptions
    "VelofitError",
    "SchemaError",
    "EncodeError",
    "DecodeError",
    "TruncatedStreamError",
    "FramingError",
    # CRC and timestamps
    "crc16",
    "crc16_bytes",
    "verify_crc16",
    "to_fit_timestamp",
    "from_fit_timestamp",
    # Version
    "__version__",
]
