"""Composition root for the identity core.

``AuthContext`` owns the engine, the repository (mode decided once at
creation), the session manager and the QR renderer, and hands them to
the login flow and the administration service. There are no module-level
singletons; applications keep one context per client.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .administration import IdentityAdministration
from .config import IdentityConfig
from .exceptions import CacheError
from .flow import FlowMessages, LoginFlow
from .mfa import TotpEngine
from .repository import open_repository
from .session import SessionManager

if TYPE_CHECKING:
    from collections.abc import Callable

    from .backend import IIdentityBackend
    from .cache import IKeyValueStore
    from .domain import Identity, Session
    from .mfa import IQrRenderer
    from .repository import IIdentityRepository, RepositoryMode

logger = logging.getLogger("cspm_identity.context")


class AuthContext:
    """Explicit authentication context.

    Example:
        ```python
        context = await AuthContext.create(
            config=IdentityConfig(),
            backend=HttpIdentityBackend("http://localhost:3001/api"),
            cache=JsonFileKeyValueStore("~/.cspm/cache.json"),
        )

        if context.current_session is None:
            flow = context.new_login_flow()
            await flow.submit_address("admin@co.test")
        ```
    """

    def __init__(
        self,
        *,
        config: IdentityConfig,
        engine: TotpEngine,
        repository: IIdentityRepository,
        sessions: SessionManager,
        qr_renderer: IQrRenderer | None = None,
        messages: FlowMessages | None = None,
    ) -> None:
        self.config = config
        self.engine = engine
        self.repository = repository
        self.sessions = sessions
        self.qr_renderer = qr_renderer
        self.messages = messages or FlowMessages()

    @classmethod
    async def create(
        cls,
        *,
        config: IdentityConfig | None = None,
        backend: IIdentityBackend | None,
        cache: IKeyValueStore,
        qr_renderer: IQrRenderer | None = None,
        messages: FlowMessages | None = None,
        clock: Callable[[], float] | None = None,
    ) -> AuthContext:
        """Probe the backend, build the repository and restore any session."""
        config = config or IdentityConfig()
        repository = await open_repository(
            backend=backend, cache=cache, users_key=config.users_key
        )
        loaded = await repository.load_all()
        if not loaded.ok:
            logger.warning("Initial identity load failed: %s", loaded.error)

        sessions = SessionManager(cache, config.session_key)
        restored = await sessions.restore()
        if restored is not None:
            logger.info("Session restored for %s", restored.identity.email)

        return cls(
            config=config,
            engine=TotpEngine.from_config(config, clock=clock),
            repository=repository,
            sessions=sessions,
            qr_renderer=qr_renderer,
            messages=messages,
        )

    @property
    def mode(self) -> RepositoryMode:
        return self.repository.mode

    @property
    def current_session(self) -> Session | None:
        return self.sessions.current

    @property
    def current_user(self) -> Identity | None:
        session = self.sessions.current
        return session.identity if session is not None else None

    def new_login_flow(self) -> LoginFlow:
        return LoginFlow(
            engine=self.engine,
            repository=self.repository,
            sessions=self.sessions,
            qr_renderer=self.qr_renderer,
            messages=self.messages,
        )

    def administration(self) -> IdentityAdministration:
        return IdentityAdministration(self.repository, self.sessions)

    async def logout(self) -> bool:
        """Close the current session. Returns False if the cache failed."""
        try:
            await self.sessions.close()
        except CacheError as e:
            logger.warning("Logout could not clear the stored session: %s", e)
            return False
        return True


__all__: list[str] = ["AuthContext"]
