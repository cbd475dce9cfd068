"""MFA ports (protocols) and setup data."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class TotpSetup:
    """TOTP enrollment data handed to the user before verification.

    The secret lives only in this object (and the flow state holding it)
    until the user proves possession with a valid code.

    Attributes:
        secret: Base32-encoded TOTP secret.
        provisioning_uri: otpauth:// URI for QR code generation.
        manual_key: Human-readable key for manual entry.
    """

    secret: str
    provisioning_uri: str
    manual_key: str


@runtime_checkable
class IQrRenderer(Protocol):
    """Protocol for QR provisioning image rendering.

    The identity core never draws QR codes itself. Applications plug in a
    renderer; if it fails the raw secret is still shown for manual entry.
    """

    async def render(self, uri: str) -> bytes:
        """Render an otpauth:// URI as a displayable image.

        Args:
            uri: Provisioning URI.

        Returns:
            Encoded image bytes (PNG, SVG, ...).

        Raises:
            QrRenderError: If the image cannot be produced.
        """
        ...


__all__: list[str] = ["IQrRenderer", "TotpSetup"]
