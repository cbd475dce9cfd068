"""IIdentityBackend - Protocol for the durable identity store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..domain import Identity


@runtime_checkable
class IIdentityBackend(Protocol):
    """Durable identity store consumed by the repository.

    Implementations raise ``BackendUnavailableError`` on transport or
    server failures. Timeouts are the adapter's responsibility.
    """

    async def is_ready(self) -> bool:
        """Readiness probe: reachable and initialized."""
        ...

    async def fetch_all(self) -> list[Identity]:
        """Return every identity record."""
        ...

    async def upsert(self, identity: Identity) -> None:
        """Idempotent insert-or-update keyed by (normalized) email."""
        ...

    async def remove(self, email: str) -> None:
        """Delete the identity with *email*. Missing records are ignored."""
        ...
