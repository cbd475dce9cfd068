"""TOTP (Time-based One-Time Password) engine.

Works with any RFC 6238 authenticator app using the defaults
(HMAC-SHA1, 6 digits, 30 second period):
- Google Authenticator
- Microsoft Authenticator
- Authy
- 1Password
- FreeOTP

Uses pyotp library internally.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING
from urllib.parse import quote

import pyotp

from ..exceptions import SecretGenerationError
from .ports import TotpSetup

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..config import IdentityConfig

logger = logging.getLogger("cspm_identity.mfa")

# 32 base32 characters carry 160 bits, the RFC 4226 recommended length.
SECRET_LENGTH = 32

# Characters left unescaped in issuer and account labels besides the
# always-safe ``A-Za-z0-9_.-~`` set.
_LABEL_SAFE = "@+"


class TotpEngine:
    """Secret generation, provisioning URIs and code validation.

    Example:
        ```python
        engine = TotpEngine(issuer="CSPM-NG")

        setup = engine.prepare_enrollment("admin@co.test")
        print(f"Scan this QR: {setup.provisioning_uri}")
        print(f"Or enter manually: {setup.manual_key}")

        if engine.validate(setup.secret, "123456"):
            print("Valid!")
        ```
    """

    def __init__(
        self,
        *,
        issuer: str = "CSPM-NG",
        digits: int = 6,
        interval: int = 30,
        valid_window: int = 1,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            issuer: Application name shown in authenticator apps.
            digits: Number of digits in a code (default 6).
            interval: Time step in seconds (default 30).
            valid_window: Accept codes ±N steps for clock drift (default 1).
            clock: Returns the current UNIX time; ``time.time`` by default.
        """
        self.issuer = issuer
        self.digits = digits
        self.interval = interval
        self.valid_window = valid_window
        self._clock = clock or time.time

    @classmethod
    def from_config(
        cls, config: IdentityConfig, *, clock: Callable[[], float] | None = None
    ) -> TotpEngine:
        return cls(
            issuer=config.issuer,
            digits=config.digits,
            interval=config.interval,
            valid_window=config.valid_window,
            clock=clock,
        )

    def generate_secret(self) -> str:
        """Generate a new random base32 secret from the OS CSPRNG.

        Raises:
            SecretGenerationError: If secure randomness is unavailable.
        """
        try:
            secret = pyotp.random_base32(length=SECRET_LENGTH)
        except (OSError, NotImplementedError, ValueError) as e:
            raise SecretGenerationError(
                "Secure random source unavailable; TOTP secret not generated"
            ) from e
        if len(secret) < SECRET_LENGTH:
            raise SecretGenerationError("Generated TOTP secret is too short")
        return secret

    def build_provisioning_uri(
        self, issuer: str, account_label: str, secret: str
    ) -> str:
        """Build ``otpauth://totp/{issuer}:{label}?secret={secret}&issuer={issuer}``.

        SHA1, 6 digits and 30 seconds are the otpauth defaults, so they are
        not spelled out in the query string.
        """
        issuer_part = quote(issuer, safe=_LABEL_SAFE)
        label_part = quote(account_label, safe=_LABEL_SAFE)
        return (
            f"otpauth://totp/{issuer_part}:{label_part}"
            f"?secret={secret}&issuer={issuer_part}"
        )

    def prepare_enrollment(self, account_label: str) -> TotpSetup:
        """Generate a pending secret plus everything needed to display it.

        Nothing is stored; the caller keeps the setup until it is verified.

        Raises:
            SecretGenerationError: If secure randomness is unavailable.
        """
        secret = self.generate_secret()
        return TotpSetup(
            secret=secret,
            provisioning_uri=self.build_provisioning_uri(
                self.issuer, account_label, secret
            ),
            manual_key=self._format_secret(secret),
        )

    def validate(
        self, secret: str, submitted_code: str, window: int | None = None
    ) -> bool:
        """Check a code against the current step and ``window`` steps either side.

        Candidates are compared in constant time. Malformed codes or secrets
        yield False rather than an error.

        Args:
            secret: Base32 shared secret.
            submitted_code: Code typed by the user.
            window: Drift window in steps; the engine default when None.

        Returns:
            True if any candidate matches.
        """
        code = submitted_code.strip()
        if len(code) != self.digits or not (code.isascii() and code.isdigit()):
            return False
        valid_window = self.valid_window if window is None else window
        try:
            return bool(
                self._totp(secret).verify(
                    code, for_time=self._now(), valid_window=valid_window
                )
            )
        except ValueError:
            # binascii.Error for secrets that are not valid base32
            logger.warning("TOTP validation attempted with an undecodable secret")
            return False

    def current_code(self, secret: str) -> str:
        """Code for the current time step (previews and tests)."""
        return str(self._totp(secret).at(self._now()))

    def _totp(self, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(secret, digits=self.digits, interval=self.interval)

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc)

    def _format_secret(self, secret: str) -> str:
        """Format secret for manual entry (groups of 4)."""
        secret = secret.rstrip("=")
        return " ".join(secret[i : i + 4] for i in range(0, len(secret), 4))


__all__: list[str] = ["SECRET_LENGTH", "TotpEngine"]
