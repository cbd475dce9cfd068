"""Email status classification.

Decides which branch of the login flow an address takes, from a snapshot of
the current identities. Pure: no I/O and no mutation.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from .domain import normalize_email

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .domain import Identity


class EmailStatus(str, Enum):
    """Enrollment state of an email address.

    SYSTEM_INIT: no identities exist; the next enrollment bootstraps the system.
    UNKNOWN: not registered; access denied (no self-service signup).
    KNOWN_NO_MFA: pre-provisioned by an administrator; must enroll.
    KNOWN_WITH_MFA: enrolled; must verify a code.
    """

    SYSTEM_INIT = "SYSTEM_INIT"
    UNKNOWN = "UNKNOWN"
    KNOWN_NO_MFA = "KNOWN_NO_MFA"
    KNOWN_WITH_MFA = "KNOWN_WITH_MFA"


def find_identity(email: str, identities: Iterable[Identity]) -> Identity | None:
    """Case-insensitive lookup by email."""
    key = normalize_email(email)
    for identity in identities:
        if normalize_email(identity.email) == key:
            return identity
    return None


def classify(email: str, identities: Sequence[Identity]) -> EmailStatus:
    if not identities:
        return EmailStatus.SYSTEM_INIT

    identity = find_identity(email, identities)
    if identity is None:
        return EmailStatus.UNKNOWN
    if identity.has_mfa:
        return EmailStatus.KNOWN_WITH_MFA
    return EmailStatus.KNOWN_NO_MFA


__all__: list[str] = ["EmailStatus", "classify", "find_identity"]
