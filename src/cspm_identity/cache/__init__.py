"""Scoped local cache: port and adapters.

``RedisKeyValueStore`` needs the ``redis`` extra and is imported from
``cspm_identity.cache.redis`` directly.
"""

from .file import JsonFileKeyValueStore
from .memory import InMemoryKeyValueStore
from .ports import IKeyValueStore

__all__: list[str] = [
    "IKeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
]
