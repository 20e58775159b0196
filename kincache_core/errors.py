"""KinCache Errors - Exception Hierarchy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Optional


class CacheError(Exception):
    """Base class for cache errors."""


class CacheClosedError(CacheError):
    """Raised when a cache is used after destroy()."""

    def __init__(self, name: str):
        super().__init__(f"Cache {name!r} has been destroyed")
        self.name = name


class StorageError(CacheError):
    """Durable storage medium failure."""


class StorageQuotaExceeded(StorageError):
    """Durable storage medium is full."""

    def __init__(
        self,
        key: str,
        required: Optional[int] = None,
        quota: Optional[int] = None,
    ):
        if required is None or quota is None:
            message = f"Storage is full while storing {key!r}"
        else:
            message = f"Storing {key!r} needs {required} bytes, quota is {quota} bytes"
        super().__init__(message)
        self.key = key
        self.required = required
        self.quota = quota


__all__ = [
    "CacheError",
    "CacheClosedError",
    "StorageError",
    "StorageQuotaExceeded",
]
