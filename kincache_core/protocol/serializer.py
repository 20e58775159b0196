"""KinCache Serializer - Wire Serialization for Snapshots and Replication.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import base64
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

import msgpack

logger = logging.getLogger(__name__)

_BYTES_TAG = "__bytes__"


class Serializer(ABC):
    """Abstract serializer for snapshots and cluster messages.

    Implementations must round-trip ``bytes`` values, since compressed
    entries carry their payload as bytes.
    """

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Get format name."""
        pass

    @abstractmethod
    def serialize(self, value: Any) -> bytes:
        """Serialize value to bytes.

        Args:
            value: Value to serialize

        Returns:
            Serialized bytes
        """
        pass

    @abstractmethod
    def deserialize(self, data: bytes) -> Any:
        """Deserialize bytes to value.

        Args:
            data: Serialized bytes

        Returns:
            Deserialized value
        """
        pass


class MsgPackSerializer(Serializer):
    """MessagePack serializer.

    Compact binary format with native bytes support. The default wire
    format.
    """

    @property
    def format_name(self) -> str:
        return "msgpack"

    def serialize(self, value: Any) -> bytes:
        return msgpack.packb(value, use_bin_type=True)

    def deserialize(self, data: bytes) -> Any:
        return msgpack.unpackb(data, raw=False, strict_map_key=False)


def _encode_bytes(value: Any) -> Dict[str, str]:
    if isinstance(value, (bytes, bytearray)):
        return {_BYTES_TAG: base64.b64encode(bytes(value)).decode("ascii")}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode_bytes(obj: Dict[str, Any]) -> Any:
    if len(obj) == 1 and _BYTES_TAG in obj:
        return base64.b64decode(obj[_BYTES_TAG])
    return obj


class JSONSerializer(Serializer):
    """JSON serializer.

    Human-readable and interoperable. Bytes travel as base64 inside a
    tagged object.
    """

    @property
    def format_name(self) -> str:
        return "json"

    def serialize(self, value: Any) -> bytes:
        return json.dumps(value, default=_encode_bytes).encode("utf-8")

    def deserialize(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"), object_hook=_decode_bytes)


_SERIALIZERS = {
    "msgpack": MsgPackSerializer,
    "json": JSONSerializer,
}


def get_serializer(format_name: str = "msgpack") -> Serializer:
    """Get serializer by format.

    Args:
        format_name: Format name

    Returns:
        Serializer instance

    Raises:
        KeyError: If format not found
    """
    if format_name not in _SERIALIZERS:
        raise KeyError(f"Unknown serializer format: {format_name}")
    return _SERIALIZERS[format_name]()


def measure_size(value: Any) -> int:
    """Measure the JSON-encoded size of a value in bytes.

    Values JSON cannot encode are measured through ``str``; bytes count
    as their raw length. Returns 0 if even that fails.
    """
    if isinstance(value, (bytes, bytearray)):
        return len(value)
    try:
        return len(json.dumps(value, separators=(",", ":"), default=str).encode("utf-8"))
    except (TypeError, ValueError) as e:
        logger.debug(f"Could not measure value size: {e}")
        return 0


__all__ = [
    "Serializer",
    "JSONSerializer",
    "MsgPackSerializer",
    "get_serializer",
    "measure_size",
]
