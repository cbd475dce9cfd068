"""Session manager: issues, persists, restores and tears down sessions.

The session lives in the scoped cache under its own key, independent of
the identity list. There is no expiry; a session lasts until logout or
until the cache entry is cleared.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .domain import Identity, Session, utc_now
from .exceptions import CacheError

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from .cache import IKeyValueStore

logger = logging.getLogger("cspm_identity.session")


class SessionManager:
    """Owns the single authenticated session of a client context.

    Example:
        ```python
        sessions = SessionManager(InMemoryKeyValueStore())

        session = await sessions.open(identity)
        ...
        restored = await sessions.restore()  # on the next start
        await sessions.close()               # logout
        ```
    """

    def __init__(
        self,
        cache: IKeyValueStore,
        key: str = "CSPM_AUTH_STATE",
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._cache = cache
        self._key = key
        self._clock = clock
        self._current: Session | None = None

    @property
    def current(self) -> Session | None:
        return self._current

    async def open(self, identity: Identity) -> Session:
        """Create and persist a session for *identity*.

        Raises:
            CacheError: If the session cannot be persisted.
        """
        session = Session(identity=identity, authenticated_at=self._clock())
        await self._cache.set(self._key, session.to_wire())
        self._current = session
        logger.info("Session opened for %s", identity.email)
        return session

    async def close(self) -> None:
        """Clear the session (logout).

        Raises:
            CacheError: If the stored session cannot be removed.
        """
        self._current = None
        await self._cache.delete(self._key)
        logger.info("Session closed")

    async def restore(self) -> Session | None:
        """Resume a previously persisted session, if any.

        Unreadable, unauthenticated or malformed entries count as no session.
        """
        try:
            payload = await self._cache.get(self._key)
        except CacheError as e:
            logger.warning("Stored session unreadable: %s", e)
            return None
        session = self._decode(payload)
        self._current = session
        return session

    async def refresh(self, identity: Identity) -> Session | None:
        """Rewrite the stored identity when the signed-in identity was edited.

        Returns the updated session, or None when *identity* is not the one
        signed in.

        Raises:
            CacheError: If the session cannot be persisted.
        """
        current = self._current
        if current is None or current.identity.id != identity.id:
            return None
        session = current.model_copy(update={"identity": identity})
        await self._cache.set(self._key, session.to_wire())
        self._current = session
        return session

    def _decode(self, payload: Any) -> Session | None:
        if not isinstance(payload, dict) or payload.get("authenticated") is not True:
            return None
        identity_data = payload.get("identity")
        if not isinstance(identity_data, dict):
            return None
        try:
            identity = Identity.from_wire(identity_data)
            authenticated_at = payload.get("authenticatedAt")
            if authenticated_at is None:
                return Session(identity=identity)
            return Session(identity=identity, authenticated_at=authenticated_at)
        except ValidationError as e:
            logger.warning("Stored session malformed: %s", e)
            return None


__all__: list[str] = ["SessionManager"]
