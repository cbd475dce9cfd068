"""IIdentityRepository - one contract over the two persistence strategies."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..domain import Identity
    from ..results import RepositoryResult


class RepositoryMode(str, Enum):
    """Which store is of record for the lifetime of the process.

    REMOTE: durable backend reachable and initialized.
    LOCAL: fallback cache only.
    """

    REMOTE = "REMOTE"
    LOCAL = "LOCAL"


@runtime_checkable
class IIdentityRepository(Protocol):
    """
    Identity repository owning the in-memory identity list.

    Callers get read-only snapshots; every mutation goes through
    ``upsert``, ``update`` or ``remove``. Operations never raise: failures
    come back as ``RepositoryResult.failed`` and leave the snapshot
    untouched. Writes are applied in submission order.
    """

    @property
    def mode(self) -> RepositoryMode: ...

    def snapshot(self) -> tuple[Identity, ...]:
        """Last known identity list (no I/O)."""
        ...

    async def load_all(self) -> RepositoryResult:
        """Read every identity from the store of record."""
        ...

    async def upsert(self, identity: Identity) -> RepositoryResult:
        """Insert or update by normalized email."""
        ...

    async def update(
        self, email: str, change: Callable[[Identity], Identity | None]
    ) -> RepositoryResult:
        """Apply *change* to the stored record, read under the write lock.

        The result carries the record as stored, or ``identity=None`` when
        no record matches *email*. When *change* returns None nothing is
        written and the result carries the record as found.
        """
        ...

    async def remove(self, email: str) -> RepositoryResult:
        """Remove by email; removing a missing identity succeeds."""
        ...
