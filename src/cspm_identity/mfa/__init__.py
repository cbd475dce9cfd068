"""MFA module: TOTP engine and QR renderer port.

Supports TOTP authenticator apps (Google Authenticator, Microsoft
Authenticator, Authy, etc.).
"""

from .ports import IQrRenderer, TotpSetup
from .totp import SECRET_LENGTH, TotpEngine

__all__: list[str] = [
    "IQrRenderer",
    "SECRET_LENGTH",
    "TotpEngine",
    "TotpSetup",
]
