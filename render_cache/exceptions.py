"""Cache-related exceptions."""


class CacheError(Exception):
    """Base exception for render cache errors."""

    pass


class StoreUnavailableError(CacheError):
    """Raised when a store backend cannot be reached or times out."""

    pass


class ConfigurationError(CacheError):
    """Raised when a type is made cacheable without a usable cache key."""

    pass
