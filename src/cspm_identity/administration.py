"""Administrator-initiated identity management.

Pre-provisions identities (they classify as KNOWN_NO_MFA until the user
enrolls), edits them, resets enrollment and removes them. Every operation
returns an ``AdministrationResult``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .classifier import find_identity
from .domain import Identity, IdentityStatus, Role, validate_email_address
from .exceptions import (
    CacheError,
    DuplicateIdentityError,
    IdentityError,
    IdentityNotFoundError,
    InvalidEmailError,
    PrimaryAdminProtectedError,
)
from .results import AdministrationResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from .repository import IIdentityRepository
    from .session import SessionManager

logger = logging.getLogger("cspm_identity.administration")

STORE_UNAVAILABLE = "Identity store unavailable"


class IdentityAdministration:
    """Identity CRUD on top of the repository.

    The primary administrator can be renamed but never demoted, deactivated
    or removed.
    """

    def __init__(
        self,
        repository: IIdentityRepository,
        sessions: SessionManager | None = None,
    ) -> None:
        self._repository = repository
        self._sessions = sessions

    async def add_identity(
        self,
        email: str,
        display_name: str = "",
        role: Role = Role.VIEWER,
    ) -> AdministrationResult:
        """Pre-provision an identity without a TOTP secret."""
        try:
            normalized = validate_email_address(email)
        except InvalidEmailError as e:
            return AdministrationResult.failed(str(e))

        loaded = await self._repository.load_all()
        if not loaded.ok:
            return AdministrationResult.failed(loaded.error or STORE_UNAVAILABLE)
        if find_identity(normalized, loaded.identities) is not None:
            return AdministrationResult.failed(
                str(DuplicateIdentityError(f"{normalized} is already registered"))
            )

        identity = Identity(
            email=normalized,
            display_name=display_name or normalized.split("@", 1)[0],
            role=role,
        )
        written = await self._repository.upsert(identity)
        if not written.ok:
            return AdministrationResult.failed(written.error or "Write failed")
        logger.info("Identity %s added with role %s", normalized, role.value)
        return AdministrationResult.success(written.identity)

    async def update_identity(
        self,
        email: str,
        *,
        display_name: str | None = None,
        role: Role | None = None,
        status: IdentityStatus | None = None,
    ) -> AdministrationResult:
        """Edit name, role or status of an existing identity."""
        try:
            existing = await self._require(email)
            changes: dict[str, object] = {}
            if display_name is not None:
                changes["display_name"] = display_name
            if role is not None:
                if existing.is_primary_admin and role is not Role.ADMIN:
                    raise PrimaryAdminProtectedError(
                        "The primary administrator must keep the Admin role"
                    )
                changes["role"] = role
            if status is not None:
                if existing.is_primary_admin and status is not IdentityStatus.ACTIVE:
                    raise PrimaryAdminProtectedError(
                        "The primary administrator cannot be deactivated"
                    )
                changes["status"] = status
        except IdentityError as e:
            return AdministrationResult.failed(str(e))

        return await self._write(
            existing.email, lambda current: current.model_copy(update=changes)
        )

    async def reset_enrollment(self, email: str) -> AdministrationResult:
        """Clear the TOTP secret so the next login goes through enrollment."""
        try:
            existing = await self._require(email)
        except IdentityError as e:
            return AdministrationResult.failed(str(e))
        result = await self._write(
            existing.email,
            lambda current: current.model_copy(update={"totp_secret": None}),
        )
        if result.ok:
            logger.info("TOTP enrollment reset for %s", existing.email)
        return result

    async def remove_identity(self, email: str) -> AdministrationResult:
        """Remove an identity. Removing an unknown email succeeds."""
        loaded = await self._repository.load_all()
        if not loaded.ok:
            return AdministrationResult.failed(loaded.error or STORE_UNAVAILABLE)
        existing = find_identity(email, loaded.identities)
        if existing is not None and existing.is_primary_admin:
            error = PrimaryAdminProtectedError(
                "The primary administrator cannot be removed"
            )
            return AdministrationResult.failed(str(error))

        removed = await self._repository.remove(email)
        if not removed.ok:
            return AdministrationResult.failed(removed.error or "Remove failed")
        if existing is not None:
            logger.info("Identity %s removed", existing.email)
        return AdministrationResult.success(existing)

    async def _require(self, email: str) -> Identity:
        loaded = await self._repository.load_all()
        if not loaded.ok:
            raise IdentityError(loaded.error or STORE_UNAVAILABLE)
        existing = find_identity(email, loaded.identities)
        if existing is None:
            raise IdentityNotFoundError(email)
        return existing

    async def _write(
        self, email: str, change: Callable[[Identity], Identity]
    ) -> AdministrationResult:
        written = await self._repository.update(email, change)
        if not written.ok:
            return AdministrationResult.failed(written.error or "Write failed")
        stored = written.identity
        if stored is None:
            return AdministrationResult.failed(str(IdentityNotFoundError(email)))
        if self._sessions is not None:
            try:
                await self._sessions.refresh(stored)
            except CacheError as e:
                logger.warning("Signed-in session not refreshed: %s", e)
        return AdministrationResult.success(stored)


__all__: list[str] = ["IdentityAdministration"]
