"""
Redis storage for rendered output cache
"""

import threading
from typing import Any, Callable, Mapping, Optional

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from tenacity import Retrying, stop_after_attempt, wait_exponential, retry_if_exception_type
from loguru import logger

from .config import RedisConfig
from .exceptions import StoreUnavailableError
from .store import Store, StoreStats, expire_in_milliseconds


TRANSIENT_ERRORS = (RedisConnectionError, RedisTimeoutError)


class RedisStore(Store):
    """Redis-backed cache store.

    ``fetch`` issues a GET and returns any stored value as-is. On a miss the
    value is computed and written with a SET, adding ``EX`` (whole seconds) or
    ``PX`` (fractional ``expire_in``) so that Redis expires the key on its own.

    GET and SET are separate round trips: two processes missing the same key
    at once will both compute and the last SET wins.

    Example:

        set_default_store(RedisStore(RedisConfig(url="redis://cache:6379/0")))
    """

    def __init__(self, config: Optional[RedisConfig] = None, client: Optional[redis.Redis] = None):
        self.config = config or RedisConfig()
        if client is None:
            client = redis.Redis.from_url(
                self.config.url,
                socket_timeout=self.config.socket_timeout,
                socket_connect_timeout=self.config.socket_connect_timeout,
                decode_responses=True,
            )
            logger.info(f"RedisStore: connecting to {self._safe_url()}")
        self._redis = client
        self._stats_lock = threading.Lock()
        self.stats = StoreStats()

    def fetch(self, key: str, options: Mapping[str, Any], compute: Callable[[], str]) -> str:
        ttl_ms = expire_in_milliseconds(options)

        value = self._call("get", key)
        if value is not None:
            with self._stats_lock:
                self.stats.hits += 1
            logger.debug(f"RedisStore HIT key={key}")
            return value

        with self._stats_lock:
            self.stats.misses += 1

        value = compute()

        self._call("set", key, value, **self._expiry_args(ttl_ms))
        with self._stats_lock:
            self.stats.writes += 1
        logger.debug(f"RedisStore STORE key={key} size={len(value)} ttl_ms={ttl_ms}")
        return value

    @staticmethod
    def _expiry_args(ttl_ms):
        """SET expiry arguments: EX for whole seconds, PX otherwise"""
        if ttl_ms is None:
            return {}
        if ttl_ms % 1000 == 0:
            return {"ex": ttl_ms // 1000}
        return {"px": ttl_ms}

    def _call(self, command: str, *args, **kwargs):
        """Run a Redis command, retrying transient connection errors"""
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(max(1, self.config.retry_attempts)),
                wait=wait_exponential(multiplier=0.1, max=2),
                retry=retry_if_exception_type(TRANSIENT_ERRORS),
                before_sleep=self._log_retry,
                reraise=True,
            ):
                with attempt:
                    return getattr(self._redis, command)(*args, **kwargs)
        except TRANSIENT_ERRORS as e:
            raise StoreUnavailableError(f"Redis {command.upper()} failed: {e}") from e

    def _log_retry(self, retry_state):
        exception = retry_state.outcome.exception()
        if exception:
            logger.warning(
                f"Retrying RedisStore command due to error: {str(exception)}. "
                f"Attempt {retry_state.attempt_number}/{self.config.retry_attempts}"
            )

    def _safe_url(self) -> str:
        """Connection URL without credentials, for logging"""
        url = self.config.url or ""
        if "@" in url:
            scheme, _, rest = url.partition("://")
            return f"{scheme}://***@{rest.split('@', 1)[1]}"
        return url
