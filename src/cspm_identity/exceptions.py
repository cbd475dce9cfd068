"""Identity-related exceptions.

Adapters and domain helpers raise these; the repository and the login flow
turn them into typed outcomes so nothing escapes to the caller of the
authentication boundary.
"""

from __future__ import annotations

# ═══════════════════════════════════════════════════════════════
# BASE
# ═══════════════════════════════════════════════════════════════


class CspmIdentityError(Exception):
    """Root exception for the whole cspm-identity package."""


class IdentityError(CspmIdentityError):
    """Base class for identity domain errors."""


class InvalidEmailError(IdentityError):
    """Raised when an email address fails the input check."""


class DuplicateIdentityError(IdentityError):
    """Raised when an email is already taken (case-insensitively)."""


class IdentityNotFoundError(IdentityError):
    """Raised when no identity matches the given email."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Identity with email={email!r} not found")


class PrimaryAdminProtectedError(IdentityError):
    """Raised when an edit would remove or demote the primary administrator."""


# ═══════════════════════════════════════════════════════════════
# MFA ERRORS
# ═══════════════════════════════════════════════════════════════


class MfaError(IdentityError):
    """Base class for MFA-related errors."""


class SecretGenerationError(MfaError):
    """Raised when a TOTP secret cannot be generated from a secure source.

    Fatal for the enrollment attempt; a predictable secret is never
    substituted.
    """


class QrRenderError(MfaError):
    """Raised by QR renderers when a provisioning image cannot be produced."""


# ═══════════════════════════════════════════════════════════════
# FLOW ERRORS
# ═══════════════════════════════════════════════════════════════


class InvalidTransitionError(CspmIdentityError):
    """Raised when an event is applied to a state that cannot accept it."""

    def __init__(self, state: object, event: object) -> None:
        self.state = state
        self.event = event
        super().__init__(
            f"{type(event).__name__} is not valid in {type(state).__name__}"
        )


# ═══════════════════════════════════════════════════════════════
# INFRASTRUCTURE ERRORS
# ═══════════════════════════════════════════════════════════════


class InfrastructureError(CspmIdentityError):
    """Base class for errors raised by backend and cache adapters."""


class BackendUnavailableError(InfrastructureError):
    """Raised when the durable identity backend cannot be reached or fails."""


class CacheError(InfrastructureError):
    """Raised when the scoped key-value cache cannot be read or written."""


__all__: list[str] = [
    "CspmIdentityError",
    "IdentityError",
    "InvalidEmailError",
    "DuplicateIdentityError",
    "IdentityNotFoundError",
    "PrimaryAdminProtectedError",
    "MfaError",
    "SecretGenerationError",
    "QrRenderError",
    "InvalidTransitionError",
    "InfrastructureError",
    "BackendUnavailableError",
    "CacheError",
]
