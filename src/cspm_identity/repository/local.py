"""Local strategy: the scoped cache is the store of record."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..exceptions import CacheError
from ..results import RepositoryResult
from .base import SnapshotRepository, drop_identity, find_record, merge_identity
from .ports import IIdentityRepository, RepositoryMode

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..cache import IKeyValueStore
    from ..domain import Identity

logger = logging.getLogger("cspm_identity.repository")


class LocalIdentityRepository(SnapshotRepository, IIdentityRepository):
    """Repository used when the durable backend is unavailable at start-up.

    Never talks to the backend. Each write re-reads the cached list so the
    cache, not the snapshot, decides what an upsert merges into.
    """

    def __init__(
        self, cache: IKeyValueStore, users_key: str = "CSPM_USERS_DB"
    ) -> None:
        super().__init__(cache, users_key)

    @property
    def mode(self) -> RepositoryMode:
        return RepositoryMode.LOCAL

    async def load_all(self) -> RepositoryResult:
        try:
            identities = await self._read_cache()
        except CacheError as e:
            logger.warning("Local identity cache unreadable: %s", e)
            return RepositoryResult.failed(str(e))
        self._identities = identities
        return RepositoryResult.success(identities)

    async def upsert(self, identity: Identity) -> RepositoryResult:
        async with self._write_lock:
            try:
                current = await self._read_cache()
                merged, stored = merge_identity(current, identity)
                await self._write_cache(merged)
            except CacheError as e:
                logger.warning("Local upsert failed for %s: %s", identity.email, e)
                return RepositoryResult.failed(str(e))
            self._identities = merged
            return RepositoryResult.success(merged, stored)

    async def update(
        self, email: str, change: Callable[[Identity], Identity | None]
    ) -> RepositoryResult:
        async with self._write_lock:
            try:
                current = await self._read_cache()
                existing = find_record(current, email)
                changed = None if existing is None else change(existing)
                if changed is None:
                    self._identities = current
                    return RepositoryResult.success(current, existing)
                merged, stored = merge_identity(current, changed)
                await self._write_cache(merged)
            except CacheError as e:
                logger.warning("Local update failed for %s: %s", email, e)
                return RepositoryResult.failed(str(e))
            self._identities = merged
            return RepositoryResult.success(merged, stored)

    async def remove(self, email: str) -> RepositoryResult:
        async with self._write_lock:
            try:
                current = await self._read_cache()
                remaining = drop_identity(current, email)
                if len(remaining) != len(current):
                    await self._write_cache(remaining)
            except CacheError as e:
                logger.warning("Local remove failed for %s: %s", email, e)
                return RepositoryResult.failed(str(e))
            self._identities = remaining
            return RepositoryResult.success(remaining)
