"""Domain primitives: identities, sessions, value objects."""

from __future__ import annotations

from .identity import (
    Identity,
    IdentityStatus,
    Role,
    normalize_email,
    utc_now,
    validate_email_address,
)
from .auth_session import Session
from .value_object import ValueObject

__all__: list[str] = [
    "Identity",
    "IdentityStatus",
    "Role",
    "Session",
    "ValueObject",
    "normalize_email",
    "utc_now",
    "validate_email_address",
]
