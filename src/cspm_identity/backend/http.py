"""HTTP adapter for the platform's identity API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..domain import Identity, normalize_email
from ..exceptions import BackendUnavailableError
from .ports import IIdentityBackend

if TYPE_CHECKING:
    from ..config import IdentityConfig

logger = logging.getLogger(__name__)


class HttpIdentityBackend(IIdentityBackend):
    """
    Identity backend speaking the platform REST API.

    Endpoints (relative to ``base_url``):
        GET    /status          -> {"isSetup": bool, ...}
        GET    /users           -> [identity, ...]
        POST   /users           -> upsert keyed by email
        DELETE /users/{email}   -> remove (a JSON 404 counts as removed)

    A fresh ``httpx.AsyncClient`` is opened per call; pass ``transport`` to
    route requests elsewhere (e.g. ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        user_agent: str = "cspm-identity/0.1.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        config: IdentityConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> HttpIdentityBackend:
        return cls(
            config.backend_url, timeout=config.backend_timeout, transport=transport
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            logger.error(
                "Identity backend HTTP error: %s %s -> %s",
                method,
                path,
                e.response.status_code,
            )
            raise BackendUnavailableError(
                f"{method} {path} failed with HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error("Identity backend unreachable: %s %s: %s", method, path, e)
            raise BackendUnavailableError(f"{method} {path} failed: {e}") from e

    async def is_ready(self) -> bool:
        response = await self._request("GET", "/status")
        try:
            payload = response.json()
        except ValueError as e:
            raise BackendUnavailableError("Malformed status payload") from e
        return isinstance(payload, dict) and bool(payload.get("isSetup"))

    async def fetch_all(self) -> list[Identity]:
        response = await self._request("GET", "/users")
        try:
            payload = response.json()
            if not isinstance(payload, list):
                raise BackendUnavailableError("Malformed users payload: not a list")
            return [Identity.from_wire(item) for item in payload]
        except (ValueError, ValidationError) as e:
            raise BackendUnavailableError(f"Malformed users payload: {e}") from e

    async def upsert(self, identity: Identity) -> None:
        await self._request("POST", "/users", json=identity.to_wire())

    async def remove(self, email: str) -> None:
        path = f"/users/{quote(normalize_email(email), safe='@')}"
        try:
            async with self._client() as client:
                response = await client.delete(path)
        except httpx.HTTPError as e:
            logger.error("Identity backend unreachable: DELETE %s: %s", path, e)
            raise BackendUnavailableError(f"DELETE {path} failed: {e}") from e
        if response.status_code == 404 and _is_json_object(response):
            return
        if response.is_error:
            raise BackendUnavailableError(
                f"DELETE {path} failed with HTTP {response.status_code}"
            )


def _is_json_object(response: httpx.Response) -> bool:
    """A missing record answers with a JSON error body; a missing route does not."""
    try:
        return isinstance(response.json(), dict)
    except ValueError:
        return False
