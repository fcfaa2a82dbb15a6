"""Utility functions for velofit.

This module provides the FIT CRC checksum and timestamp conversion.
"""

from __future__ import annotations

from .crc import crc16, crc16_bytes, verify_crc16
from .timestamps import FIT_EPOCH, from_fit_timestamp, to_fit_timestamp

__all__ = [
    # CRC functions
    "crc16",
    "crc16_bytes",
    "verify_crc16",
    # Timestamps
    "FIT_EPOCH",
    "to_fit_timestamp",
    "from_fit_timestamp",
]
