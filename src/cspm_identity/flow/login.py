"""Login flow orchestrator.

Drives the ADDRESS -> ENROLL / VERIFY steps: awaits the repository, the
TOTP engine and the QR renderer, turns every outcome into a flow event and
applies it through :func:`transition`. No exception escapes; failures are
states with ``error`` set.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..classifier import EmailStatus, classify, find_identity
from ..domain import Identity, utc_now, validate_email_address
from ..exceptions import CacheError, InvalidEmailError, SecretGenerationError
from .states import (
    AccessDenied,
    AddressInvalid,
    AddressStep,
    AuthenticatedStep,
    BackRequested,
    CodeAccepted,
    CodeRejected,
    EnrollmentStarted,
    EnrollStep,
    FlowState,
    OperationFailed,
    Reset,
    VerificationRequested,
    VerifyStep,
)
from .transitions import transition

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from datetime import datetime

    from ..mfa import IQrRenderer, TotpEngine
    from ..repository import IIdentityRepository
    from ..session import SessionManager

logger = logging.getLogger("cspm_identity.flow")


@dataclass(frozen=True)
class FlowMessages:
    """User-facing messages. Denials never say why an address is unknown."""

    invalid_email: str = "Please enter a valid email."
    access_denied: str = (
        "Access Denied. This user does not exist in the system. "
        "Please contact an Administrator."
    )
    enroll_code_invalid: str = "Invalid code. Ensure you scanned the QR correctly."
    verify_code_invalid: str = "Invalid Authentication Code. Please try again."
    store_unavailable: str = "The identity store is unavailable. Please try again."
    secret_unavailable: str = (
        "A secure enrollment secret could not be generated. Please try again."
    )
    qr_unavailable: str = "QR code unavailable. Enter the key manually."
    session_unavailable: str = "Your session could not be started. Please try again."
    busy: str = "An authentication attempt is already in progress."
    address_first: str = "Enter your email address first."
    back_first: str = "Go back to change the email address."


class LoginFlow:
    """One login attempt context (one form, one user).

    Not reentrant: while a submission is awaiting I/O, further submissions
    are rejected with ``FlowMessages.busy`` on the current state.

    Example:
        ```python
        flow = LoginFlow(engine=engine, repository=repo, sessions=sessions)

        state = await flow.submit_address("admin@co.test")
        if isinstance(state, EnrollStep):
            show_qr(state.qr_image, state.setup.manual_key)
        state = await flow.submit_code("123456")
        if isinstance(state, AuthenticatedStep):
            current_user = state.session.identity
        ```
    """

    def __init__(
        self,
        *,
        engine: TotpEngine,
        repository: IIdentityRepository,
        sessions: SessionManager,
        qr_renderer: IQrRenderer | None = None,
        messages: FlowMessages | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._engine = engine
        self._repository = repository
        self._sessions = sessions
        self._qr_renderer = qr_renderer
        self.messages = messages or FlowMessages()
        self._clock = clock
        self._state: FlowState = AddressStep()
        self._busy = False

    @property
    def state(self) -> FlowState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._busy

    # ── Public events ────────────────────────────────────────────

    async def submit_address(self, email: str) -> FlowState:
        """Classify *email* and move to ENROLL or VERIFY (or stay with an error)."""
        if self._busy:
            return self._rejected_busy()
        async with self._in_flight():
            self._state = await self._handle_address(email)
        return self._state

    async def submit_code(self, code: str) -> FlowState:
        """Validate a 6-digit code in ENROLL or VERIFY."""
        if self._busy:
            return self._rejected_busy()
        async with self._in_flight():
            self._state = await self._handle_code(code)
        return self._state

    def back(self) -> FlowState:
        """Return to ADDRESS from VERIFY (or ENROLL, dropping the pending secret)."""
        if self._busy:
            return self._rejected_busy()
        if isinstance(self._state, (EnrollStep, VerifyStep)):
            self._state = transition(self._state, BackRequested())
        return self._state

    def reset(self) -> FlowState:
        """Start over from an empty ADDRESS step (e.g. after logout)."""
        if self._busy:
            return self._rejected_busy()
        self._state = transition(self._state, Reset())
        return self._state

    # ── Handlers ─────────────────────────────────────────────────

    async def _handle_address(self, email: str) -> FlowState:
        state = self._state
        if isinstance(state, AuthenticatedStep):
            return state
        if not isinstance(state, AddressStep):
            return transition(state, OperationFailed(self.messages.back_first))

        try:
            normalized = validate_email_address(email)
        except InvalidEmailError:
            return transition(state, AddressInvalid(email, self.messages.invalid_email))

        loaded = await self._repository.load_all()
        if not loaded.ok:
            return transition(state, OperationFailed(self.messages.store_unavailable))

        status = classify(normalized, loaded.identities)
        if status is EmailStatus.UNKNOWN:
            logger.info("Access denied for unregistered address")
            return transition(
                state, AccessDenied(normalized, self.messages.access_denied)
            )
        if status is EmailStatus.KNOWN_WITH_MFA:
            return transition(state, VerificationRequested(normalized))

        try:
            setup = self._engine.prepare_enrollment(normalized)
        except SecretGenerationError as e:
            logger.error("Enrollment aborted for %s: %s", normalized, e)
            return transition(
                state, OperationFailed(self.messages.secret_unavailable)
            )

        qr_image, qr_error = await self._render_qr(setup.provisioning_uri)
        return transition(
            state,
            EnrollmentStarted(
                email=normalized,
                setup=setup,
                bootstrap=status is EmailStatus.SYSTEM_INIT,
                qr_image=qr_image,
                qr_error=qr_error,
            ),
        )

    async def _handle_code(self, code: str) -> FlowState:
        state = self._state
        if isinstance(state, EnrollStep):
            return await self._complete_enrollment(state, code)
        if isinstance(state, VerifyStep):
            return await self._verify(state, code)
        if isinstance(state, AddressStep):
            return transition(state, OperationFailed(self.messages.address_first))
        return state

    async def _complete_enrollment(self, state: EnrollStep, code: str) -> FlowState:
        if not self._engine.validate(state.pending_secret, code):
            logger.info("Enrollment code rejected for %s", state.email)
            return transition(state, CodeRejected(self.messages.enroll_code_invalid))

        loaded = await self._repository.load_all()
        if not loaded.ok:
            return transition(state, OperationFailed(self.messages.store_unavailable))

        now = self._clock()
        if not loaded.identities:
            identity = Identity.bootstrap(state.email, state.pending_secret, at=now)
            written = await self._repository.upsert(identity)
        else:
            written = await self._repository.update(
                state.email,
                lambda current: current.enrolled(state.pending_secret, at=now),
            )
        if not written.ok:
            return transition(state, OperationFailed(self.messages.store_unavailable))
        stored = written.identity
        if stored is None:
            # bootstrapped by another enrollment, or removed, since classification
            return transition(
                state, AccessDenied(state.email, self.messages.access_denied)
            )

        if not loaded.identities:
            logger.info("System bootstrapped; primary administrator %s", stored.email)
        else:
            logger.info("TOTP enrollment completed for %s", stored.email)
        return await self._open_session(state, stored)

    async def _verify(self, state: VerifyStep, code: str) -> FlowState:
        loaded = await self._repository.load_all()
        if not loaded.ok:
            return transition(state, OperationFailed(self.messages.store_unavailable))

        identity = find_identity(state.email, loaded.identities)
        if identity is None or identity.totp_secret is None:
            return transition(
                state, AccessDenied(state.email, self.messages.access_denied)
            )

        if not self._engine.validate(identity.totp_secret, code):
            logger.info("Verification code rejected for %s", state.email)
            return transition(state, CodeRejected(self.messages.verify_code_invalid))

        now = self._clock()
        secret = identity.totp_secret
        written = await self._repository.update(
            state.email,
            lambda current: (
                current.logged_in(at=now) if current.totp_secret == secret else None
            ),
        )
        if not written.ok:
            return transition(state, OperationFailed(self.messages.store_unavailable))
        stored = written.identity
        if stored is None or stored.totp_secret != secret:
            logger.info("Enrollment of %s changed during verification", state.email)
            return transition(
                state, AccessDenied(state.email, self.messages.access_denied)
            )
        logger.info("Login verified for %s", state.email)
        return await self._open_session(state, stored)

    async def _open_session(
        self, state: EnrollStep | VerifyStep, identity: Identity
    ) -> FlowState:
        try:
            session = await self._sessions.open(identity)
        except CacheError as e:
            logger.warning("Session persistence failed for %s: %s", identity.email, e)
            return transition(
                state, OperationFailed(self.messages.session_unavailable)
            )
        return transition(state, CodeAccepted(session))

    async def _render_qr(self, uri: str) -> tuple[bytes | None, str | None]:
        if self._qr_renderer is None:
            return None, None
        try:
            return await self._qr_renderer.render(uri), None
        except Exception as e:  # noqa: BLE001
            logger.warning("QR rendering failed, falling back to manual key: %s", e)
            return None, self.messages.qr_unavailable

    # ── Re-entrancy guard ────────────────────────────────────────

    @asynccontextmanager
    async def _in_flight(self) -> AsyncIterator[None]:
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def _rejected_busy(self) -> FlowState:
        state = self._state
        if isinstance(state, AuthenticatedStep):
            return state
        return transition(state, OperationFailed(self.messages.busy))


__all__: list[str] = ["FlowMessages", "LoginFlow"]
