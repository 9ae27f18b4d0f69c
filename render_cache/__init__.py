"""
Render Cache

A cache-aside layer for rendered object output. Cacheable types configure a
key prefix, an optional store and store options; rendering goes through a
store's get-or-compute ``fetch`` keyed by the object's ``cache_key()``.
"""

from .cacheable import Cacheable, CacheableList, CacheKeyProvider
from .config import CacheConfig, CacheSettings, RedisConfig, MySQLConfig
from .decorator import RenderCacheDecorator, create_cache_decorator
from .exceptions import CacheError, ConfigurationError, StoreUnavailableError
from .factory import configure, create_store
from .key_generator import CacheKeyGenerator, compose_cache_key, create_cache_key_generator
from .store import Store, MemoryStore, StoreStats, get_default_store, set_default_store

__version__ = "1.0.0"
__all__ = [
    "Cacheable",
    "CacheableList",
    "CacheKeyProvider",
    "CacheConfig",
    "CacheSettings",
    "RedisConfig",
    "MySQLConfig",
    "RenderCacheDecorator",
    "create_cache_decorator",
    "CacheError",
    "ConfigurationError",
    "StoreUnavailableError",
    "configure",
    "create_store",
    "CacheKeyGenerator",
    "compose_cache_key",
    "create_cache_key_generator",
    "Store",
    "MemoryStore",
    "StoreStats",
    "get_default_store",
    "set_default_store",
]
