"""
Per-type cache configuration for renderable objects.

Any class deriving from ``Cacheable`` can opt into caching:

    class PersonSerializer(Serializer):
        def data(self):
            return {"id": self.object.id, "name": self.object.name}

        def cache_key(self):
            return f"{self.object.id}:{int(self.object.updated_at.timestamp())}"

    PersonSerializer.configure_cache(key="person", expire_in=3600)

Only ``key`` and ``store`` are understood by the caching layer. Every other
option is forwarded untouched to the store's ``fetch``.

Configuration lives on the class itself and is not inherited: a subclass of a
cached type starts with caching disabled. Configure types at startup; the
registry has no locking.
"""

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Protocol, Sequence, Type, runtime_checkable

from loguru import logger

from .config import CacheConfig
from .exceptions import ConfigurationError
from .key_generator import collection_cache_key


_CONFIG_ATTR = "_render_cache_config"


@runtime_checkable
class CacheKeyProvider(Protocol):
    """Anything that can name its current renderable state"""

    def cache_key(self) -> str:
        ...


class Cacheable:
    """Base class adding per-type cache configuration"""

    @classmethod
    def get_cache_options(cls) -> CacheConfig:
        """Return this type's CacheConfig, creating a disabled one on first access"""
        config = cls.__dict__.get(_CONFIG_ATTR)
        if config is None:
            config = CacheConfig()
            setattr(cls, _CONFIG_ATTR, config)
        return config

    @classmethod
    def configure_cache(cls, **options: Any) -> CacheConfig:
        """Enable caching for this type and merge options into its config.

        Args:
            key: Prefix for this type's cache keys
            store: Store used instead of the default store
            **options: Forwarded to the store (e.g. ``expire_in``)

        Returns:
            The updated CacheConfig
        """
        if cls.cache_key is Cacheable.cache_key:
            raise ConfigurationError(
                f"{cls.__name__} must implement cache_key() before caching can be enabled"
            )

        config = cls.get_cache_options()
        config.enabled = True
        config.update(options)
        logger.debug(f"Caching enabled for {cls.__name__}: prefix={config.key_prefix} options={config.extra_options}")
        return config

    @classmethod
    @contextmanager
    def caching_disabled(cls) -> Iterator[None]:
        """Disable caching for this type inside the with-block.

        Mutates type-wide state, so concurrent renders of the same type see
        caching disabled too.
        """
        config = cls.get_cache_options()
        enabled = config.enabled
        config.enabled = False
        try:
            yield
        finally:
            config.enabled = enabled

    @classmethod
    def without_caching(cls, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Call fn with caching disabled for this type and return its result"""
        with cls.caching_disabled():
            return fn(*args, **kwargs)

    def cache_config_owner(self) -> Type["Cacheable"]:
        """Type whose CacheConfig applies when rendering this object"""
        return type(self)

    def cache_key(self) -> str:
        """Deterministic key for the object's current renderable content"""
        raise ConfigurationError(f"{type(self).__name__} does not implement cache_key()")


class CacheableList(Cacheable):
    """A homogeneous collection rendered as one unit.

    Caching follows the item type's configuration; the list's key is made from
    the items' own keys.
    """

    def __init__(self, items: Sequence[Any], item_type: Type[Cacheable]):
        self.items = list(items)
        self.item_type = item_type

    def cache_config_owner(self) -> Type[Cacheable]:
        return self.item_type

    def cache_key(self) -> str:
        return collection_cache_key(item.cache_key() for item in self.items)
