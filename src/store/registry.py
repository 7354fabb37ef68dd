from __future__ import annotations

from pathlib import Path

from .base import BaseStore
from .memory import InMemoryStore
from .rest import RestStore
from .settings import StoreSettings


def create_store(
    *,
    store_file: Path | None = None,
    config_path: Path | None = None,
    settings: StoreSettings | None = None,
) -> BaseStore:
    """In-memory store for a JSON snapshot, otherwise the REST store.

    A store file that does not exist yet starts empty.

    REST settings come from `settings`, then `config_path`, then the environment.
    """

    if store_file is not None:
        if not Path(store_file).exists():
            return InMemoryStore()
        return InMemoryStore.from_json_file(store_file)
    if settings is None:
        settings = StoreSettings.from_json_file(config_path) if config_path else StoreSettings.from_env()
    return RestStore(settings)
