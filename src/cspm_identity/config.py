"""Configuration for the identity core."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class IdentityConfig:
    """Identity core configuration.

    Attributes:
        issuer: Issuer shown in authenticator apps and used in provisioning URIs.
        digits: Number of digits in a TOTP code.
        interval: TOTP time step in seconds.
        valid_window: Accepted steps either side of the current one.
        users_key: Cache key holding the identity list.
        session_key: Cache key holding the authenticated session.
        backend_url: Base URL of the durable identity backend API.
        backend_timeout: Request timeout for the backend, in seconds.
    """

    issuer: str = "CSPM-NG"
    digits: int = 6
    interval: int = 30
    valid_window: int = 1
    users_key: str = "CSPM_USERS_DB"
    session_key: str = "CSPM_AUTH_STATE"
    backend_url: str = "http://localhost:3001/api"
    backend_timeout: float = 10.0


__all__: list[str] = ["IdentityConfig"]
