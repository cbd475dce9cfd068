"""In-memory identity backend for development and testing.

WARNING: This implementation is NOT suitable for production use.
Records live in a local dictionary and vanish with the process.
"""

from __future__ import annotations

from ..domain import Identity, normalize_email
from ..exceptions import BackendUnavailableError
from .ports import IIdentityBackend


class InMemoryIdentityBackend(IIdentityBackend):
    """Dict-backed durable store with the same upsert rules as the real API.

    An upsert for an existing email keeps the stored ``id`` and
    ``is_primary_admin`` and replaces the remaining fields.

    Set ``ready`` to False to simulate an uninitialized backend, or
    ``available`` to False to make every call raise.
    """

    def __init__(
        self,
        identities: list[Identity] | None = None,
        *,
        ready: bool = True,
        available: bool = True,
    ) -> None:
        self._records: dict[str, Identity] = {}
        self.ready = ready
        self.available = available
        self.calls: list[str] = []
        for identity in identities or []:
            self._records[normalize_email(identity.email)] = identity

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if not self.available:
            raise BackendUnavailableError(f"{operation}: backend unavailable")

    async def is_ready(self) -> bool:
        self._check("is_ready")
        return self.ready

    async def fetch_all(self) -> list[Identity]:
        self._check("fetch_all")
        return list(self._records.values())

    async def upsert(self, identity: Identity) -> None:
        self._check("upsert")
        key = normalize_email(identity.email)
        existing = self._records.get(key)
        if existing is not None:
            identity = identity.model_copy(
                update={
                    "id": existing.id,
                    "is_primary_admin": existing.is_primary_admin,
                }
            )
        self._records[key] = identity

    async def remove(self, email: str) -> None:
        self._check("remove")
        self._records.pop(normalize_email(email), None)

    # ── Test helpers ─────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._records)

    def get(self, email: str) -> Identity | None:
        return self._records.get(normalize_email(email))
