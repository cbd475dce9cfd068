"""Durable identity backend: port and adapters."""

from .http import HttpIdentityBackend
from .memory import InMemoryIdentityBackend
from .ports import IIdentityBackend

__all__: list[str] = [
    "HttpIdentityBackend",
    "IIdentityBackend",
    "InMemoryIdentityBackend",
]
