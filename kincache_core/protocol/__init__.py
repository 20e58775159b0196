"""Protocol module - Wire serialization and value compression."""

from kincache_core.protocol.serializer import (
    Serializer,
    JSONSerializer,
    MsgPackSerializer,
    get_serializer,
    measure_size,
)
from kincache_core.protocol.compression import (
    CompressionCodec,
    CompressionType,
    CompressedValue,
    DecompressionError,
)

__all__ = [
    "Serializer",
    "JSONSerializer",
    "MsgPackSerializer",
    "get_serializer",
    "measure_size",
    "CompressionCodec",
    "CompressionType",
    "CompressedValue",
    "DecompressionError",
]
