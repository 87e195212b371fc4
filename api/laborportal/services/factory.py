from functools import lru_cache

from laborportal.core.config import get_settings
from laborportal.services.local_store import LocalStore
from laborportal.services.repository import PostgresStore
from laborportal.services.store import JsonFileKeyValueStore, KeyValueStore, MemoryKeyValueStore, Store


@lru_cache
def get_store() -> Store:
    settings = get_settings()
    kv: KeyValueStore = (
        JsonFileKeyValueStore(settings.local_store_path) if settings.local_store_path else MemoryKeyValueStore()
    )
    if settings.storage_backend == "postgres":
        return PostgresStore(
            database_url=settings.database_url,
            min_pool_size=settings.database_pool_min_size,
            max_pool_size=settings.database_pool_max_size,
            session_kv=kv,
        )
    return LocalStore(kv)
