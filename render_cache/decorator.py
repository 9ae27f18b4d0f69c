"""
RenderCacheDecorator - Cache-aside wrapper around a render function
"""

import functools
from typing import Any, Callable, Dict, Optional

from loguru import logger

from .cacheable import Cacheable
from .config import CacheConfig, CacheSettings
from .exceptions import StoreUnavailableError
from .key_generator import compose_cache_key
from .store import Store, get_default_store


class RenderCacheDecorator:
    """Decides per render call whether to go through a cache store.

    Objects that are not ``Cacheable``, or whose type has caching disabled,
    are rendered directly. Otherwise the full key is composed from the type's
    prefix and the object's ``cache_key()`` and the store is asked to fetch it,
    with the render step as the compute callback.

    The store is resolved per call: the type's store override, then the store
    given here, then the process-wide default store.
    """

    def __init__(self, store: Optional[Store] = None, fail_open: bool = False):
        self.store = store
        self.fail_open = fail_open

    def __call__(self, func: Callable[..., str]) -> Callable[..., str]:
        """Decorate a render function whose first argument is the renderable"""

        @functools.wraps(func)
        def wrapper(renderable, *args, **kwargs):
            return self.render(renderable, lambda: func(renderable, *args, **kwargs))

        return wrapper

    def render(self, renderable: Any, compute: Callable[[], str]) -> str:
        """Render through the cache when the renderable's type has caching enabled"""
        config = self.resolve_config(renderable)
        if config is None or not config.enabled:
            return compute()

        store = config.store
        if store is None:
            store = self.store if self.store is not None else get_default_store()
        key = compose_cache_key(config.key_prefix, renderable.cache_key())

        if not self.fail_open:
            return store.fetch(key, config.extra_options, compute)
        return self._fetch_fail_open(store, key, config.extra_options, compute)

    def resolve_config(self, renderable: Any) -> Optional[CacheConfig]:
        """Return the CacheConfig that applies to renderable, or None if it is not cacheable"""
        if not isinstance(renderable, Cacheable):
            return None
        return renderable.cache_config_owner().get_cache_options()

    def _fetch_fail_open(self, store: Store, key: str, options: Dict[str, Any],
                         compute: Callable[[], str]) -> str:
        """Fetch from store, rendering directly if the store is unavailable"""
        computed = []

        def compute_once() -> str:
            value = compute()
            computed.append(value)
            return value

        try:
            return store.fetch(key, options, compute_once)
        except StoreUnavailableError as e:
            logger.warning(f"RenderCache: store unavailable for key {key}, rendering without cache: {e}")
            if computed:
                return computed[0]
            return compute()


def create_cache_decorator(settings: Optional[Dict[str, Any]] = None) -> RenderCacheDecorator:
    """Factory function to create a cache decorator from a settings dict"""
    from .factory import create_store

    if settings is None:
        return RenderCacheDecorator()

    cache_settings = CacheSettings.from_dict(settings)
    return RenderCacheDecorator(
        store=create_store(cache_settings),
        fail_open=cache_settings.fail_open,
    )
