"""Pure transition function of the login flow."""

from __future__ import annotations

from dataclasses import replace

from ..exceptions import InvalidTransitionError
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
    FlowEvent,
    FlowState,
    OperationFailed,
    Reset,
    VerificationRequested,
    VerifyStep,
)


def transition(state: FlowState, event: FlowEvent) -> FlowState:
    """Return the state that follows *state* on *event*.

    ADDRESS -> ENROLL | VERIFY | ADDRESS (with error)
    ENROLL  -> AUTHENTICATED | ENROLL (with error, pending secret kept) | ADDRESS
    VERIFY  -> AUTHENTICATED | VERIFY (with error) | ADDRESS
    any     -> ADDRESS on Reset

    Raises:
        InvalidTransitionError: If *event* cannot happen in *state*.
    """
    if isinstance(event, Reset):
        return AddressStep()

    if isinstance(state, AddressStep):
        return _from_address(state, event)
    if isinstance(state, EnrollStep):
        return _from_enroll(state, event)
    if isinstance(state, VerifyStep):
        return _from_verify(state, event)
    raise InvalidTransitionError(state, event)


def _from_address(state: AddressStep, event: FlowEvent) -> FlowState:
    if isinstance(event, (AddressInvalid, AccessDenied)):
        return AddressStep(email=event.email, error=event.message)
    if isinstance(event, OperationFailed):
        return replace(state, error=event.message)
    if isinstance(event, EnrollmentStarted):
        return EnrollStep(
            email=event.email,
            setup=event.setup,
            bootstrap=event.bootstrap,
            qr_image=event.qr_image,
            qr_error=event.qr_error,
        )
    if isinstance(event, VerificationRequested):
        return VerifyStep(email=event.email)
    raise InvalidTransitionError(state, event)


def _from_enroll(state: EnrollStep, event: FlowEvent) -> FlowState:
    if isinstance(event, (CodeRejected, OperationFailed)):
        return replace(state, error=event.message)
    if isinstance(event, CodeAccepted):
        return AuthenticatedStep(session=event.session)
    if isinstance(event, AccessDenied):
        return AddressStep(email=event.email, error=event.message)
    if isinstance(event, BackRequested):
        return AddressStep(email=state.email)
    raise InvalidTransitionError(state, event)


def _from_verify(state: VerifyStep, event: FlowEvent) -> FlowState:
    if isinstance(event, (CodeRejected, OperationFailed)):
        return replace(state, error=event.message)
    if isinstance(event, CodeAccepted):
        return AuthenticatedStep(session=event.session)
    if isinstance(event, AccessDenied):
        return AddressStep(email=event.email, error=event.message)
    if isinstance(event, BackRequested):
        return AddressStep(email=state.email)
    raise InvalidTransitionError(state, event)


__all__: list[str] = ["transition"]
