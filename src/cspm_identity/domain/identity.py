"""Identity value object and the helpers that keep its email key canonical."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from ..exceptions import InvalidEmailError
from .value_object import ValueObject


class Role(str, Enum):
    """Platform roles. Only used as data here; no enforcement."""

    ADMIN = "Admin"
    AUDITOR = "Auditor"
    VIEWER = "Viewer"


class IdentityStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


def normalize_email(email: str) -> str:
    """Return the canonical (stripped, lower-cased) form of an email."""
    return email.strip().lower()


def validate_email_address(email: str) -> str:
    """Check an email address and return its normalized form.

    The check is deliberately small: one ``@`` with a non-empty local part
    and a dotted-or-plain domain, no whitespace inside.

    Raises:
        InvalidEmailError: If the address is malformed.
    """
    normalized = normalize_email(email)
    local, sep, domain = normalized.partition("@")
    if (
        not sep
        or not local
        or not domain
        or "@" in domain
        or any(ch.isspace() for ch in normalized)
    ):
        raise InvalidEmailError(f"Invalid email address: {email!r}")
    return normalized


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Identity(ValueObject):
    """Canonical user record.

    Field aliases give the wire form exchanged with the durable backend and
    the local cache (``name``, ``mfaSecret``, ``isSuperAdmin``,
    ``last_login``).

    Attributes:
        id: Opaque identifier, assigned at creation and never changed.
        email: Unique key, stored normalized.
        display_name: Human-readable name.
        role: Admin, Auditor or Viewer.
        status: Active or Inactive.
        totp_secret: Base32 shared secret. Its presence is the only
            "MFA enrolled" signal.
        is_primary_admin: True only for the first identity ever enrolled.
        last_login_at: Time of the last successful login.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: str
    display_name: str = Field(default="", alias="name")
    role: Role = Role.VIEWER
    status: IdentityStatus = IdentityStatus.ACTIVE
    totp_secret: str | None = Field(default=None, alias="mfaSecret")
    is_primary_admin: bool = Field(default=False, alias="isSuperAdmin")
    last_login_at: datetime | None = Field(default=None, alias="last_login")

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("totp_secret", "last_login_at", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def has_mfa(self) -> bool:
        return self.totp_secret is not None

    @classmethod
    def bootstrap(cls, email: str, secret: str, *, at: datetime) -> Identity:
        """Create the first identity of an empty system (primary admin)."""
        normalized = normalize_email(email)
        return cls(
            email=normalized,
            display_name=normalized.split("@", 1)[0],
            role=Role.ADMIN,
            status=IdentityStatus.ACTIVE,
            totp_secret=secret,
            is_primary_admin=True,
            last_login_at=at,
        )

    def enrolled(self, secret: str, *, at: datetime) -> Identity:
        """Return a copy with a new shared secret and a fresh login time."""
        return self.model_copy(update={"totp_secret": secret, "last_login_at": at})

    def logged_in(self, *, at: datetime) -> Identity:
        return self.model_copy(update={"last_login_at": at})

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the JSON wire form (aliased keys)."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> Identity:
        return cls.model_validate(data)


__all__: list[str] = [
    "Identity",
    "IdentityStatus",
    "Role",
    "normalize_email",
    "utc_now",
    "validate_email_address",
]
