"""Repository mode selection.

The mode is decided exactly once, by ``probe``, and the matching strategy
is built and injected. Nothing downstream branches on the mode.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .local import LocalIdentityRepository
from .ports import IIdentityRepository, RepositoryMode
from .remote import RemoteIdentityRepository

if TYPE_CHECKING:
    from ..backend import IIdentityBackend
    from ..cache import IKeyValueStore

logger = logging.getLogger("cspm_identity.repository")


async def probe(backend: IIdentityBackend | None) -> RepositoryMode:
    """Probe the durable backend once.

    Any failure (network, not yet initialized, no backend configured)
    resolves to LOCAL.
    """
    if backend is None:
        return RepositoryMode.LOCAL
    try:
        ready = await backend.is_ready()
    except Exception as e:  # noqa: BLE001
        logger.warning("Identity backend probe failed, using local cache: %s", e)
        return RepositoryMode.LOCAL
    if not ready:
        logger.warning("Identity backend not initialized, using local cache")
        return RepositoryMode.LOCAL
    return RepositoryMode.REMOTE


def build_repository(
    mode: RepositoryMode,
    *,
    backend: IIdentityBackend | None,
    cache: IKeyValueStore,
    users_key: str = "CSPM_USERS_DB",
) -> IIdentityRepository:
    """Build the strategy for *mode*.

    Raises:
        ValueError: If REMOTE is requested without a backend.
    """
    if mode is RepositoryMode.REMOTE:
        if backend is None:
            raise ValueError("REMOTE mode requires an identity backend")
        return RemoteIdentityRepository(backend, cache, users_key)
    return LocalIdentityRepository(cache, users_key)


async def open_repository(
    *,
    backend: IIdentityBackend | None,
    cache: IKeyValueStore,
    users_key: str = "CSPM_USERS_DB",
) -> IIdentityRepository:
    """Probe, then build the repository for the resulting mode."""
    mode = await probe(backend)
    logger.info("Identity repository mode: %s", mode.value)
    return build_repository(mode, backend=backend, cache=cache, users_key=users_key)
