"""Session value object: proof that an identity authenticated."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from .identity import Identity, utc_now
from .value_object import ValueObject


class Session(ValueObject):
    """Ephemeral authenticated session.

    Attributes:
        identity: The identity that authenticated.
        authenticated_at: When the successful ENROLL or VERIFY happened.
    """

    identity: Identity
    authenticated_at: datetime = Field(default_factory=utc_now, alias="authenticatedAt")

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the stored form ``{authenticated, identity, ...}``."""
        return {
            "authenticated": True,
            "identity": self.identity.to_wire(),
            "authenticatedAt": self.authenticated_at.isoformat(),
        }


__all__: list[str] = ["Session"]
