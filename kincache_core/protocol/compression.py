"""KinCache Compression - Value Compression Codec.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import gzip
import json
import logging
import zlib
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

logger = logging.getLogger(__name__)


class CompressionType(Enum):
    """Compression types."""

    NONE = auto()
    GZIP = auto()
    ZLIB = auto()


@dataclass
class CompressedValue:
    """Result of a successful compression.

    Attributes:
        data: Compressed bytes
        original_size: Serialized size before compression
    """

    data: bytes
    original_size: int

    @property
    def compressed_size(self) -> int:
        """Get compressed size."""
        return len(self.data)

    @property
    def ratio(self) -> float:
        """Get compressed/original size ratio."""
        return self.compressed_size / self.original_size if self.original_size else 1.0


class DecompressionError(Exception):
    """Compressed payload could not be restored."""


class CompressionCodec:
    """Compresses cache values that serialize past a size threshold.

    Values are encoded as strict JSON, then compressed. Compression is
    advisory: a value that cannot be encoded, that JSON would not give back
    unchanged (tuples, non-string dict keys), or whose compressed form is
    not smaller, is left as is.

    Example:
        codec = CompressionCodec(threshold=1024)
        packed = codec.compress(big_value)
        if packed is not None:
            assert codec.decompress(packed.data) == big_value
    """

    def __init__(
        self,
        threshold: int = 1024,
        compression: CompressionType = CompressionType.ZLIB,
        level: int = 6,
    ):
        """Initialize codec.

        Args:
            threshold: Serialized size above which values are compressed
            compression: Compression type
            level: Compression level
        """
        self.threshold = threshold
        self.compression = compression
        self.level = level

    @property
    def enabled(self) -> bool:
        """Whether compression is active at all."""
        return self.compression != CompressionType.NONE

    def should_compress(self, size: int) -> bool:
        """Check if a value of ``size`` bytes qualifies."""
        return self.enabled and size > self.threshold

    def compress(self, value: Any) -> Optional[CompressedValue]:
        """Compress a value.

        Args:
            value: Value to compress

        Returns:
            CompressedValue, or None when the value stays uncompressed
        """
        try:
            text = json.dumps(value, separators=(",", ":"))
            if json.loads(text) != value:
                logger.debug("Value does not survive a JSON round trip, skipping compression")
                return None
            raw = text.encode("utf-8")
            if self.compression == CompressionType.GZIP:
                data = gzip.compress(raw, compresslevel=self.level)
            else:
                data = zlib.compress(raw, self.level)
        except (TypeError, ValueError, zlib.error) as e:
            logger.warning(f"Compression failed, storing value uncompressed: {e}")
            return None

        if len(data) >= len(raw):
            logger.debug(f"Compression saved nothing on {len(raw)} bytes, skipping")
            return None

        return CompressedValue(data=data, original_size=len(raw))

    def decompress(self, data: bytes) -> Any:
        """Restore a compressed value.

        Args:
            data: Compressed bytes

        Returns:
            Original value

        Raises:
            DecompressionError: If the payload is corrupt
        """
        try:
            if self.compression == CompressionType.GZIP:
                raw = gzip.decompress(data)
            else:
                raw = zlib.decompress(data)
            return json.loads(raw.decode("utf-8"))
        except (TypeError, ValueError, OSError, EOFError, zlib.error) as e:
            raise DecompressionError(str(e)) from e


__all__ = [
    "CompressionCodec",
    "CompressionType",
    "CompressedValue",
    "DecompressionError",
]
