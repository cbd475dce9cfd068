"""CSPM Identity

TOTP enrollment, login and identity bootstrap for the CSPM-NG platform.

Classifies an email into an enrollment state, provisions and validates
TOTP secrets, makes the first enrolled identity the primary administrator,
and keeps identities in a durable backend with a local cache fallback.

Usage:
    ```python
    from cspm_identity import (
        AuthContext,
        HttpIdentityBackend,
        JsonFileKeyValueStore,
        AuthenticatedStep,
    )

    context = await AuthContext.create(
        backend=HttpIdentityBackend("http://localhost:3001/api"),
        cache=JsonFileKeyValueStore("cache.json"),
    )
    flow = context.new_login_flow()
    await flow.submit_address("admin@co.test")
    state = await flow.submit_code("123456")
    if isinstance(state, AuthenticatedStep):
        print(state.session.identity.role)
    ```

Submodules:
    - `mfa`: TOTP engine and QR renderer port
    - `flow`: login state machine
    - `repository`: dual-mode identity repository
    - `backend`: durable store adapters (HTTP, in-memory)
    - `cache`: scoped key-value cache adapters (memory, JSON file, Redis)
"""

from __future__ import annotations

from .administration import IdentityAdministration
from .backend import HttpIdentityBackend, IIdentityBackend, InMemoryIdentityBackend
from .cache import IKeyValueStore, InMemoryKeyValueStore, JsonFileKeyValueStore
from .classifier import EmailStatus, classify, find_identity
from .config import IdentityConfig
from .context import AuthContext
from .domain import (
    Identity,
    IdentityStatus,
    Role,
    Session,
    normalize_email,
    validate_email_address,
)
from .exceptions import (
    BackendUnavailableError,
    CacheError,
    CspmIdentityError,
    DuplicateIdentityError,
    IdentityError,
    IdentityNotFoundError,
    InfrastructureError,
    InvalidEmailError,
    InvalidTransitionError,
    MfaError,
    PrimaryAdminProtectedError,
    QrRenderError,
    SecretGenerationError,
)
from .flow import (
    AddressStep,
    AuthenticatedStep,
    EnrollStep,
    FlowMessages,
    FlowState,
    FlowStep,
    LoginFlow,
    VerifyStep,
    transition,
)
from .mfa import IQrRenderer, TotpEngine, TotpSetup
from .repository import (
    IIdentityRepository,
    LocalIdentityRepository,
    RemoteIdentityRepository,
    RepositoryMode,
    build_repository,
    open_repository,
    probe,
)
from .results import AdministrationResult, RepositoryResult
from .session import SessionManager

__all__: list[str] = [
    # Context
    "AuthContext",
    "IdentityConfig",
    # Domain
    "Identity",
    "IdentityStatus",
    "Role",
    "Session",
    "normalize_email",
    "validate_email_address",
    # Classifier
    "EmailStatus",
    "classify",
    "find_identity",
    # MFA
    "IQrRenderer",
    "TotpEngine",
    "TotpSetup",
    # Flow
    "AddressStep",
    "AuthenticatedStep",
    "EnrollStep",
    "FlowMessages",
    "FlowState",
    "FlowStep",
    "LoginFlow",
    "VerifyStep",
    "transition",
    # Repository
    "IIdentityRepository",
    "LocalIdentityRepository",
    "RemoteIdentityRepository",
    "RepositoryMode",
    "build_repository",
    "open_repository",
    "probe",
    "RepositoryResult",
    # Adapters
    "HttpIdentityBackend",
    "IIdentityBackend",
    "InMemoryIdentityBackend",
    "IKeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    # Sessions & administration
    "SessionManager",
    "IdentityAdministration",
    "AdministrationResult",
    # Exceptions
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
