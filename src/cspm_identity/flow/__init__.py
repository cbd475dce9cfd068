"""Enrollment/login state machine."""

from .login import FlowMessages, LoginFlow
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
    FlowStep,
    OperationFailed,
    Reset,
    VerificationRequested,
    VerifyStep,
)
from .transitions import transition

__all__: list[str] = [
    # States
    "AddressStep",
    "AuthenticatedStep",
    "EnrollStep",
    "FlowState",
    "FlowStep",
    "VerifyStep",
    # Events
    "AccessDenied",
    "AddressInvalid",
    "BackRequested",
    "CodeAccepted",
    "CodeRejected",
    "EnrollmentStarted",
    "FlowEvent",
    "OperationFailed",
    "Reset",
    "VerificationRequested",
    # Machine
    "FlowMessages",
    "LoginFlow",
    "transition",
]
