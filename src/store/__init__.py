from __future__ import annotations

from .base import BaseStore, RemoteFailure
from .memory import InMemoryStore
from .registry import create_store
from .rest import RestStore
from .settings import StoreSettings

__all__ = [
    "BaseStore",
    "InMemoryStore",
    "RemoteFailure",
    "RestStore",
    "StoreSettings",
    "create_store",
]
