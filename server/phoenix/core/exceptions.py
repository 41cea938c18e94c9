"""Phoenix data-access exception hierarchy.

A lookup that matches nothing is not an error: singular accessors return
``None``. Everything here aborts the calling operation.
"""

from typing import Any, Optional


class PhoenixError(Exception):
    """Base exception for all data-access failures."""

    def __init__(self, operation: str, identifier: Any = None, message: Optional[str] = None):
        self.operation = operation
        self.identifier = identifier
        detail = f"{operation}({identifier})" if identifier is not None else operation
        super().__init__(f"[{detail}] {message}" if message else f"[{detail}]")


class StoreUnavailable(PhoenixError):
    """The relational store could not be reached or the query failed."""


class CacheWriteFailed(PhoenixError):
    """A write-through to the cache did not succeed."""

    def __init__(self, operation: str, identifier: Any = None, key: Optional[str] = None):
        self.key = key
        super().__init__(operation, identifier, f"Failed to write cache key {key!r}")


class RemoteFetchFailed(PhoenixError):
    """The legacy remote API returned garbage, an error payload, or nothing."""
