"""Login flow states and events.

States form a closed tagged union: ``AddressStep``, ``EnrollStep``,
``VerifyStep`` and ``AuthenticatedStep``. Events carry outcomes that were
already resolved (classification, validation, I/O) so the transition
function itself stays pure.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Union

if TYPE_CHECKING:
    from ..domain import Session
    from ..mfa import TotpSetup


class FlowStep(str, Enum):
    ADDRESS = "ADDRESS"
    ENROLL = "ENROLL"
    VERIFY = "VERIFY"
    AUTHENTICATED = "AUTHENTICATED"


# ── States ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class AddressStep:
    """Initial state: waiting for an email address."""

    step: ClassVar[FlowStep] = FlowStep.ADDRESS

    email: str = ""
    error: str | None = None


@dataclass(frozen=True)
class EnrollStep:
    """Showing a pending secret (QR and manual key), waiting for a code.

    Attributes:
        email: Normalized address being enrolled.
        setup: Pending secret and its provisioning data; not persisted.
        bootstrap: Whether the address classified as SYSTEM_INIT.
        qr_image: Rendered QR image, or None when rendering failed.
        qr_error: Why the QR image is missing, if it is.
        error: Retryable error from the last submission.
    """

    step: ClassVar[FlowStep] = FlowStep.ENROLL

    email: str
    setup: TotpSetup
    bootstrap: bool = False
    qr_image: bytes | None = None
    qr_error: str | None = None
    error: str | None = None

    @property
    def pending_secret(self) -> str:
        return self.setup.secret


@dataclass(frozen=True)
class VerifyStep:
    """Enrolled identity: waiting for a code from the authenticator."""

    step: ClassVar[FlowStep] = FlowStep.VERIFY

    email: str
    error: str | None = None


@dataclass(frozen=True)
class AuthenticatedStep:
    """Terminal success."""

    step: ClassVar[FlowStep] = FlowStep.AUTHENTICATED

    session: Session
    error: None = None


FlowState = Union[AddressStep, EnrollStep, VerifyStep, AuthenticatedStep]


# ── Events ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class AddressInvalid:
    email: str
    message: str


@dataclass(frozen=True)
class AccessDenied:
    email: str
    message: str


@dataclass(frozen=True)
class EnrollmentStarted:
    email: str
    setup: TotpSetup
    bootstrap: bool
    qr_image: bytes | None = None
    qr_error: str | None = None


@dataclass(frozen=True)
class VerificationRequested:
    email: str


@dataclass(frozen=True)
class CodeRejected:
    message: str


@dataclass(frozen=True)
class CodeAccepted:
    session: Session


@dataclass(frozen=True)
class OperationFailed:
    """An I/O boundary or precondition failed; stay put and show *message*."""

    message: str


@dataclass(frozen=True)
class BackRequested:
    pass


@dataclass(frozen=True)
class Reset:
    pass


FlowEvent = Union[
    AddressInvalid,
    AccessDenied,
    EnrollmentStarted,
    VerificationRequested,
    CodeRejected,
    CodeAccepted,
    OperationFailed,
    BackRequested,
    Reset,
]


__all__: list[str] = [
    "AccessDenied",
    "AddressInvalid",
    "AddressStep",
    "AuthenticatedStep",
    "BackRequested",
    "CodeAccepted",
    "CodeRejected",
    "EnrollStep",
    "EnrollmentStarted",
    "FlowEvent",
    "FlowState",
    "FlowStep",
    "OperationFailed",
    "Reset",
    "VerificationRequested",
    "VerifyStep",
]
