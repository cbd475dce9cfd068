"""Typed outcomes returned across the authentication boundary."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .domain import Identity


@dataclass(frozen=True)
class RepositoryResult:
    """Outcome of a repository read or write.

    Attributes:
        ok: Whether the operation reached the store of record.
        identities: Identity list after the operation (empty on failure).
        identity: The record written by ``upsert``, as stored.
        error: Failure description when ``ok`` is False.
    """

    ok: bool
    identities: tuple[Identity, ...] = ()
    identity: Identity | None = None
    error: str | None = None

    @classmethod
    def success(
        cls,
        identities: tuple[Identity, ...],
        identity: Identity | None = None,
    ) -> RepositoryResult:
        return cls(ok=True, identities=identities, identity=identity)

    @classmethod
    def failed(cls, error: str) -> RepositoryResult:
        return cls(ok=False, error=error)


@dataclass(frozen=True)
class AdministrationResult:
    """Outcome of an administrator-initiated identity change."""

    ok: bool
    identity: Identity | None = None
    error: str | None = None

    @classmethod
    def success(cls, identity: Identity | None = None) -> AdministrationResult:
        return cls(ok=True, identity=identity)

    @classmethod
    def failed(cls, error: str) -> AdministrationResult:
        return cls(ok=False, error=error)


__all__: list[str] = ["AdministrationResult", "RepositoryResult"]
