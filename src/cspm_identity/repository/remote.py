"""Remote strategy: the durable backend is the store of record."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..exceptions import CacheError, InfrastructureError
from ..results import RepositoryResult
from .base import SnapshotRepository, drop_identity, find_record, merge_identity
from .ports import IIdentityRepository, RepositoryMode

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..backend import IIdentityBackend
    from ..cache import IKeyValueStore
    from ..domain import Identity

logger = logging.getLogger("cspm_identity.repository")


class RemoteIdentityRepository(SnapshotRepository, IIdentityRepository):
    """Repository backed by the durable identity store.

    After every successful read or write, the resulting identity list is
    mirrored into the local cache. The mirror only serves session
    continuity: it is never read back in this mode, and a failed mirror
    write does not fail the operation.
    """

    def __init__(
        self,
        backend: IIdentityBackend,
        mirror: IKeyValueStore,
        users_key: str = "CSPM_USERS_DB",
    ) -> None:
        super().__init__(mirror, users_key)
        self._backend = backend

    @property
    def mode(self) -> RepositoryMode:
        return RepositoryMode.REMOTE

    async def load_all(self) -> RepositoryResult:
        try:
            identities = tuple(await self._backend.fetch_all())
        except InfrastructureError as e:
            logger.warning("Identity backend read failed: %s", e)
            return RepositoryResult.failed(str(e))
        self._identities = identities
        await self._mirror(identities)
        return RepositoryResult.success(identities)

    async def upsert(self, identity: Identity) -> RepositoryResult:
        async with self._write_lock:
            merged, stored = merge_identity(self._identities, identity)
            try:
                await self._backend.upsert(stored)
            except InfrastructureError as e:
                logger.warning(
                    "Identity backend upsert failed for %s: %s", identity.email, e
                )
                return RepositoryResult.failed(str(e))
            self._identities = merged
            await self._mirror(merged)
            return RepositoryResult.success(merged, stored)

    async def update(
        self, email: str, change: Callable[[Identity], Identity | None]
    ) -> RepositoryResult:
        async with self._write_lock:
            try:
                current = tuple(await self._backend.fetch_all())
            except InfrastructureError as e:
                logger.warning("Identity backend read failed for %s: %s", email, e)
                return RepositoryResult.failed(str(e))
            existing = find_record(current, email)
            changed = None if existing is None else change(existing)
            if changed is None:
                self._identities = current
                return RepositoryResult.success(current, existing)
            merged, stored = merge_identity(current, changed)
            try:
                await self._backend.upsert(stored)
            except InfrastructureError as e:
                logger.warning("Identity backend update failed for %s: %s", email, e)
                return RepositoryResult.failed(str(e))
            self._identities = merged
            await self._mirror(merged)
            return RepositoryResult.success(merged, stored)

    async def remove(self, email: str) -> RepositoryResult:
        async with self._write_lock:
            try:
                await self._backend.remove(email)
            except InfrastructureError as e:
                logger.warning("Identity backend remove failed for %s: %s", email, e)
                return RepositoryResult.failed(str(e))
            remaining = drop_identity(self._identities, email)
            self._identities = remaining
            await self._mirror(remaining)
            return RepositoryResult.success(remaining)

    async def _mirror(self, identities: tuple[Identity, ...]) -> None:
        try:
            await self._write_cache(identities)
        except CacheError as e:
            logger.warning("Identity mirror write failed: %s", e)
