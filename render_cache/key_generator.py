"""
Cache key composition and content digests
"""

import hashlib
import json
from typing import Any, Dict, Iterable, Optional


KEY_SEPARATOR = "/"


def compose_cache_key(prefix: Optional[str], object_key: str) -> str:
    """Join the configured prefix and the object's own key, skipping a missing prefix"""
    return KEY_SEPARATOR.join(part for part in (prefix, object_key) if part is not None)


class CacheKeyGenerator:
    """Generate stable digests from a mapping of parameters.

    Useful for types whose natural cache key is their content rather than an
    identity plus a revision marker.
    """

    def __init__(self, hash_algorithm: str = "blake2b", hash_digest_size: int = 16):
        self.hash_algorithm = hash_algorithm
        self.hash_digest_size = hash_digest_size

    def generate_key(self, params: Dict[str, Any]) -> str:
        """Generate a digest from parameters, ignoring None values"""
        filtered = {k: v for k, v in params.items() if v is not None}

        encoded_body = json.dumps(
            filtered, separators=(",", ":"), sort_keys=True, ensure_ascii=False, default=str
        ).encode()

        hasher = self._create_hasher()
        hasher.update(encoded_body)
        return hasher.hexdigest()

    def _create_hasher(self):
        """Create hasher based on configuration"""
        algorithm = self.hash_algorithm.lower()

        if algorithm == 'blake2b':
            return hashlib.blake2b(digest_size=self.hash_digest_size, usedforsecurity=False)
        elif algorithm == 'sha256':
            return hashlib.sha256()
        elif algorithm == 'sha1':
            return hashlib.sha1(usedforsecurity=False)
        elif algorithm == 'md5':
            return hashlib.md5(usedforsecurity=False)
        else:
            raise ValueError(f"Unsupported hash algorithm: {self.hash_algorithm}")


def create_cache_key_generator(hash_algorithm: str = "blake2b", hash_digest_size: int = 16) -> CacheKeyGenerator:
    """Factory function to create cache key generator"""
    return CacheKeyGenerator(hash_algorithm=hash_algorithm, hash_digest_size=hash_digest_size)


COLLECTION_MARKER = "list"


def collection_cache_key(item_keys: Iterable[str]) -> str:
    """Object key for a collection: marker, item count and a digest of the ordered item keys.

    Never equal to a single item key, and distinct key sequences get distinct keys.
    """
    item_keys = list(item_keys)
    digest = CacheKeyGenerator().generate_key({"items": item_keys})
    return f"{COLLECTION_MARKER}:{len(item_keys)}:{digest}"
