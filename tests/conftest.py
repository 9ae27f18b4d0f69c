from dataclasses import dataclass
from datetime import datetime, timezone

import pytest

from render_cache.serializer import Serializer
from render_cache.store import MemoryStore, set_default_store


@dataclass
class Person:
    id: int
    name: str
    updated_at: datetime


class BaseSerializer(Serializer):
    def data(self):
        return {"id": self.object.id, "name": self.object.name}


class CacheableSerializer(BaseSerializer):
    def cache_key(self):
        return "%s:%s" % (self.object.id, int(self.object.updated_at.timestamp()))


class CountingRender:
    """Render step that counts how often it actually runs"""

    def __init__(self, value="rendered"):
        self.value = value
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.value


T0 = datetime(2016, 11, 21, 2, 0, 0, tzinfo=timezone.utc)  # epoch 1479693600
T1 = datetime(2016, 11, 21, 2, 5, 0, tzinfo=timezone.utc)


@pytest.fixture
def memory_store():
    """Fresh default store for every test"""
    store = MemoryStore()
    previous = set_default_store(store)
    yield store
    set_default_store(previous)


@pytest.fixture
def person():
    return Person(1, "Jane Doe", T0)


@pytest.fixture
def cacheable_serializer():
    """CacheableSerializer with caching enabled and options reset after the test"""
    config = CacheableSerializer.get_cache_options()
    saved = (config.enabled, config.key_prefix, config.store, dict(config.extra_options))
    CacheableSerializer.configure_cache()
    yield CacheableSerializer
    config.enabled, config.key_prefix, config.store, config.extra_options = saved
