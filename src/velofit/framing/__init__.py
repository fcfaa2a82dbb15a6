"""FIT file framing for velofit.

This module provides the FIT header and the trailing-CRC frame around the
record region.
"""

from __future__ import annotations

from .header import FileHeader, build_header, frame_file, parse_header, unframe_file

__all__ = [
    "FileHeader",
    "build_header",
    "parse_header",
    "frame_file",
    "unframe_file",
]
