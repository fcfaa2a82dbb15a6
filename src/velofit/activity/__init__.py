"""Activity-level encoding and decoding.

This module provides the file builder and reader that map a recorded session
to and from a FIT activity file.
"""

from __future__ import annotations

from .aggregates import Aggregates, compute_aggregates
from .builder import build_fit_file, timer_events
from .payload import chunk_payload, join_payload, parse_payload, serialize_plan
from .reader import parse_fit_file

__all__ = [
    "build_fit_file",
    "parse_fit_file",
    "timer_events",
    "Aggregates",
    "compute_aggregates",
    "serialize_plan",
    "chunk_payload",
    "join_payload",
    "parse_payload",
]
