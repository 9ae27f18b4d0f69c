"""
Store contract, in-memory reference store and the process-wide default store
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Any, Mapping, Optional

from loguru import logger


@dataclass
class StoreStats:
    """Hit/miss/write counters kept by a store"""
    hits: int = 0
    misses: int = 0
    writes: int = 0

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0
        self.writes = 0


def expire_in_milliseconds(options: Mapping[str, Any]) -> Optional[int]:
    """Read ``expire_in`` (seconds, int or float) from store options as whole milliseconds

    Returns:
        None when no expiration is requested
    """
    expire_in = options.get("expire_in")
    if expire_in is None:
        return None
    if isinstance(expire_in, bool) or not isinstance(expire_in, (int, float)):
        raise ValueError(f"expire_in must be a number of seconds, got {expire_in!r}")

    milliseconds = math.ceil(expire_in * 1000)
    if milliseconds <= 0:
        raise ValueError(f"expire_in must be positive, got {expire_in!r}")
    return milliseconds


class Store(ABC):
    """Get-or-compute contract every cache store implements.

    Implementations must return the stored value on a hit without calling
    ``compute``. On a miss ``compute`` is called exactly once and its result is
    written under ``key`` before being returned. Anything raised by ``compute``
    propagates unchanged and nothing is written.
    """

    @abstractmethod
    def fetch(self, key: str, options: Mapping[str, Any], compute: Callable[[], str]) -> str:
        """Return the value stored under key, computing and storing it on a miss.

        Args:
            key: Full cache key
            options: Store options, e.g. ``expire_in`` (TTL in seconds)
            compute: Zero-argument callable producing the value on a miss

        Returns:
            The cached or freshly computed value
        """


class MemoryStore(Store):
    """Keeps rendered output in a dict.

    No TTL, no size bound and no locking: this store is not thread safe and
    is meant for tests and single-threaded use. ``expire_in`` and any other
    options are accepted and ignored.
    """

    def __init__(self):
        self._store: Dict[str, str] = {}
        self.stats = StoreStats()

    def fetch(self, key: str, options: Mapping[str, Any], compute: Callable[[], str]) -> str:
        if key in self._store:
            self.stats.hits += 1
            logger.debug(f"MemoryStore HIT key={key}")
            return self._store[key]

        self.stats.misses += 1
        value = compute()
        self._store[key] = value
        self.stats.writes += 1
        logger.debug(f"MemoryStore STORE key={key} size={len(value)}")
        return value

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str) -> Optional[str]:
        """Read a stored value without computing anything"""
        return self._store.get(key)

    def clear(self) -> None:
        self._store.clear()


_default_store: Store = MemoryStore()


def get_default_store() -> Store:
    """Return the process-wide default store"""
    return _default_store


def set_default_store(store: Store) -> Store:
    """Replace the process-wide default store.

    Only fetches started after this call see the new store.

    Returns:
        The previous default store
    """
    global _default_store
    if not callable(getattr(store, "fetch", None)):
        raise TypeError(f"Cache store must implement fetch(), got {type(store).__name__}")
    previous = _default_store
    _default_store = store
    logger.info(f"Default cache store set to {type(store).__name__}")
    return previous
