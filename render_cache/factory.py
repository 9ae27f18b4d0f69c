from typing import Optional

from loguru import logger

from .config import CacheSettings, SUPPORTED_BACKENDS
from .store import Store, MemoryStore, set_default_store


def create_store(settings: CacheSettings) -> Store:
    """Factory function to create a cache store from settings

    Args:
        settings: Cache settings; ``backend`` selects one of:
            - "memory": in-process MemoryStore (default)
            - "redis": RedisStore built from ``settings.redis``
            - "mysql": MySQLStore built from ``settings.mysql``

    Returns:
        Store instance for the configured backend
    """
    backend = settings.backend

    if backend == "memory":
        return MemoryStore()
    elif backend == "redis":
        from .redis_store import RedisStore
        return RedisStore(settings.redis)
    elif backend == "mysql":
        from .mysql_store import MySQLStore
        return MySQLStore(settings.mysql)
    else:
        raise ValueError(
            f"Unknown cache backend: {backend}. "
            f"Supported backends: {', '.join(SUPPORTED_BACKENDS)}"
        )


def configure(settings: Optional[CacheSettings] = None) -> Store:
    """Apply settings process-wide: logging, the default store and fail-open for serializers"""
    from .config_loader import setup_logging
    from .serializer import json_cache

    settings = settings or CacheSettings()
    setup_logging(settings.log_level)

    store = create_store(settings)
    set_default_store(store)
    json_cache.fail_open = settings.fail_open
    logger.info(f"Render cache configured with {settings.backend} backend (fail_open={settings.fail_open})")
    return store
