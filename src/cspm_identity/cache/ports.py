"""IKeyValueStore - Protocol for the scoped local cache."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IKeyValueStore(Protocol):
    """
    Client-scoped key-value storage for JSON values.

    Holds the identity list and the current session under fixed, well-known
    keys. Survives restarts of the same client but is not shared between
    devices. Implementations raise ``CacheError`` when the store fails.
    """

    async def get(self, key: str) -> Any | None:
        """Return the decoded JSON value for *key*, or None if missing."""
        ...

    async def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under *key*."""
        ...

    async def delete(self, key: str) -> None:
        """Delete *key*. Missing keys are ignored."""
        ...
