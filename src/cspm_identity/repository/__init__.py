"""Identity repository: one contract, two strategies (remote, local)."""

from .factory import build_repository, open_repository, probe
from .local import LocalIdentityRepository
from .ports import IIdentityRepository, RepositoryMode
from .remote import RemoteIdentityRepository

__all__: list[str] = [
    "IIdentityRepository",
    "LocalIdentityRepository",
    "RemoteIdentityRepository",
    "RepositoryMode",
    "build_repository",
    "open_repository",
    "probe",
]
