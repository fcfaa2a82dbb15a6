"""Configuration for the activity codec.

This module provides the configuration dataclass holding the identity the
writer stamps into each file and the knobs of the reader.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CodecConfig:
    """Configuration for FIT encoding and decoding.

    Attributes:
        manufacturer: FIT manufacturer id written to file_id/device_info
            (default 255, "development")
        product: Product id (default 1)
        product_name: Product name written to file_id/device_info (max 19 bytes)
        application_id: Application id of the developer data namespace
            (max 16 bytes, NUL-padded)
        application_version: Application version of the developer namespace
        dev_data_index: Developer data index used for every developer field
        chunk_size: Bytes of embedded workout payload per developer field (1-255)
        protocol_version: Header protocol version byte (0x20 = 2.0)
        profile_version: Header profile version
        verify_checksum: Check header and file CRCs when decoding

    Examples:
        ```python
        from velofit import CodecConfig, decode

        # Read a file whose CRC is known to be wrong
        activity = decode(data, config=CodecConfig(verify_checksum=False))
        ```
    """

    manufacturer: int = 255
    product: int = 1
    product_name: str = "VeloDrive"
    application_id: str = "VeloDrive"
    application_version: int = 1
    dev_data_index: int = 0
    chunk_size: int = 200

    protocol_version: int = 0x20
    profile_version: int = 0x0100

    verify_checksum: bool = True

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not 0 <= self.manufacturer <= 0xFFFE:
            raise ValueError(f"manufacturer must be 0-65534, got {self.manufacturer}")

        if not 0 <= self.product <= 0xFFFE:
            raise ValueError(f"product must be 0-65534, got {self.product}")

        if len(self.application_id.encode("utf-8")) > 16:
            raise ValueError(f"application_id must fit in 16 bytes, got {self.application_id!r}")

        if not 0 <= self.dev_data_index <= 0xFE:
            raise ValueError(f"dev_data_index must be 0-254, got {self.dev_data_index}")

        if not 1 <= self.chunk_size <= 255:
            raise ValueError(f"chunk_size must be 1-255, got {self.chunk_size}")

        if not 0 <= self.protocol_version <= 0xFF:
            raise ValueError(f"protocol_version must be 0-255, got {self.protocol_version}")

        if not 0 <= self.profile_version <= 0xFFFF:
            raise ValueError(f"profile_version must be 0-65535, got {self.profile_version}")


DEFAULT_CONFIG = CodecConfig()
