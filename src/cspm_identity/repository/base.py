"""Shared snapshot bookkeeping for the repository strategies."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from ..domain import Identity, normalize_email
from ..exceptions import CacheError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..cache import IKeyValueStore

logger = logging.getLogger("cspm_identity.repository")


def find_record(identities: Iterable[Identity], email: str) -> Identity | None:
    key = normalize_email(email)
    return next((i for i in identities if normalize_email(i.email) == key), None)


def merge_identity(
    identities: Iterable[Identity], identity: Identity
) -> tuple[tuple[Identity, ...], Identity]:
    """Apply an upsert to a list, keyed by normalized email.

    An existing record keeps its ``id`` and ``is_primary_admin``. A new
    record may only claim ``is_primary_admin`` when no other identity
    holds it.

    Returns:
        The new list and the record as stored.
    """
    current = tuple(identities)
    existing = find_record(current, identity.email)

    if existing is not None:
        stored = identity.model_copy(
            update={"id": existing.id, "is_primary_admin": existing.is_primary_admin}
        )
        merged = tuple(stored if i is existing else i for i in current)
        return merged, stored

    if identity.is_primary_admin and any(i.is_primary_admin for i in current):
        logger.warning(
            "Refusing second primary administrator for %s", identity.email
        )
        identity = identity.model_copy(update={"is_primary_admin": False})
    return (*current, identity), identity


def drop_identity(
    identities: Iterable[Identity], email: str
) -> tuple[Identity, ...]:
    key = normalize_email(email)
    return tuple(i for i in identities if normalize_email(i.email) != key)


def decode_identities(payload: Any) -> tuple[Identity, ...]:
    """Decode the cached wire list.

    Raises:
        CacheError: If the payload is not a list of identity records.
    """
    if payload is None:
        return ()
    if not isinstance(payload, list):
        raise CacheError("Cached identity list is not a list")
    try:
        return tuple(Identity.from_wire(item) for item in payload)
    except ValidationError as e:
        raise CacheError(f"Cached identity list is corrupt: {e}") from e


def encode_identities(identities: Iterable[Identity]) -> list[dict[str, Any]]:
    return [identity.to_wire() for identity in identities]


class SnapshotRepository:
    """Owns the identity snapshot and the write lock.

    ``asyncio.Lock`` wakes waiters in FIFO order, so queued writes are
    applied in the order they were submitted.
    """

    def __init__(self, cache: IKeyValueStore, users_key: str) -> None:
        self._cache = cache
        self._users_key = users_key
        self._identities: tuple[Identity, ...] = ()
        self._write_lock = asyncio.Lock()

    def snapshot(self) -> tuple[Identity, ...]:
        return self._identities

    async def _read_cache(self) -> tuple[Identity, ...]:
        return decode_identities(await self._cache.get(self._users_key))

    async def _write_cache(self, identities: Iterable[Identity]) -> None:
        await self._cache.set(self._users_key, encode_identities(identities))