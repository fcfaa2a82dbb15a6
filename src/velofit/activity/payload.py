"""Embedded workout-plan payload.

The FIT workout message has no room for a full workout plan, so the plan is
serialized to compact JSON, NUL-terminated and split into fixed-size chunks.
Each chunk becomes one developer field on the workout message; readers
concatenate the chunks in field-name order, strip the trailing zero bytes
and parse the JSON.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Mapping, Optional

from loguru import logger
from pydantic import ValidationError

from ..codec.messages import PAYLOAD_FIELD_PREFIX
from ..models.workout import WorkoutPlan

_CHUNK_NAME = re.compile(rf"^{PAYLOAD_FIELD_PREFIX}(\d+)$")


def serialize_plan(plan: WorkoutPlan) -> bytes:
    """Serialize a plan to compact UTF-8 JSON (no terminator)."""
    return plan.to_json().encode("utf-8")


def chunk_payload(payload: bytes, chunk_size: int) -> List[bytes]:
    """Split a serialized payload into chunks.

    A NUL terminator is appended first, so a payload of exactly
    ``chunk_size`` bytes spans two chunks. The last chunk may be shorter.

    Example:
        >>> [len(c) for c in chunk_payload(b"x" * 200, 200)]
        [200, 1]
    """
    terminated = payload + b"\x00"
    return [terminated[i : i + chunk_size] for i in range(0, len(terminated), chunk_size)]


def chunk_index(field_name: str) -> Optional[int]:
    """Return the chunk index encoded in a payload field name, or None."""
    match = _CHUNK_NAME.match(field_name or "")
    return int(match.group(1)) if match else None


def join_payload(chunks: Mapping[int, Any] | Iterable[Any]) -> bytes:
    """Concatenate chunks (a mapping is ordered by index) and strip trailing NULs.

    Chunks decoded as None (all zero) are skipped; a single-byte chunk may
    arrive as an int.
    """
    if isinstance(chunks, Mapping):
        ordered = [chunks[i] for i in sorted(chunks)]
    else:
        ordered = list(chunks)

    merged = bytearray()
    for chunk in ordered:
        if chunk is None:
            continue
        merged.extend(bytes([chunk & 0xFF]) if isinstance(chunk, int) else bytes(chunk))
    return bytes(merged).rstrip(b"\x00")


def parse_payload(payload: bytes) -> Optional[WorkoutPlan]:
    """Parse a reassembled payload; None when empty or unparsable."""
    if not payload:
        return None
    try:
        return WorkoutPlan.model_validate_json(payload)
    except ValidationError as e:
        logger.warning(f"Embedded workout payload could not be parsed: {e.error_count()} error(s)")
        return None
