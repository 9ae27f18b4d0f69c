import pytest

from render_cache.config import CacheConfig, CacheSettings, MySQLConfig, RedisConfig
from render_cache.config_loader import ConfigLoader
from render_cache.factory import configure, create_store
from render_cache.redis_store import RedisStore
from render_cache.serializer import json_cache
from render_cache.store import MemoryStore, get_default_store


class TestCacheConfig:

    def test_defaults(self):
        config = CacheConfig()
        assert config.enabled is False
        assert config.key_prefix is None
        assert config.store is None
        assert config.extra_options == {}

    def test_update_splits_reserved_options(self):
        config = CacheConfig()
        config.update({"key": "person", "expire_in": 10, "race_condition_ttl": 2})
        assert config.key_prefix == "person"
        assert config.extra_options == {"expire_in": 10, "race_condition_ttl": 2}


class TestCacheSettings:

    def test_from_dict(self):
        settings = CacheSettings.from_dict({
            "backend": "Redis",
            "fail_open": True,
            "log_level": "DEBUG",
            "redis": {"url": "redis://cache:6379/1", "retry_attempts": 5},
        })
        assert settings.backend == "redis"
        assert settings.fail_open is True
        assert settings.log_level == "DEBUG"
        assert settings.redis.url == "redis://cache:6379/1"
        assert settings.redis.retry_attempts == 5

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown cache backend"):
            CacheSettings.from_dict({"backend": "memcached"})

    def test_redis_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "redis://from-env:6379/3")
        assert RedisConfig().url == "redis://from-env:6379/3"
        assert RedisConfig(url="REDIS_URL").url == "redis://from-env:6379/3"

    def test_mysql_from_environment(self, monkeypatch):
        monkeypatch.setenv("MYSQL_HOST", "db.internal")
        monkeypatch.setenv("MYSQL_PORT", "3307")
        monkeypatch.setenv("MYSQL_USER", "renderer")
        monkeypatch.setenv("MYSQL_PASSWORD", "pw")
        config = MySQLConfig(host="MYSQL_HOST", port="MYSQL_PORT")
        assert config.host == "db.internal"
        assert config.port == 3307
        assert config.user == "renderer"
        assert config.password == "pw"


class TestConfigLoader:

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader(tmp_path / "missing.yaml")

    def test_missing_cache_section(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("other: {}\n")
        with pytest.raises(ValueError, match="cache"):
            ConfigLoader(path).load()

    def test_load_resolves_env_vars(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CACHE_REDIS_URL", "redis://resolved:6379/0")
        path = tmp_path / "config.yaml"
        path.write_text(
            "cache:\n"
            "  backend: redis\n"
            "  fail_open: true\n"
            "  redis:\n"
            "    url: cache_redis_url\n"
            "    socket_timeout: 1.5\n"
        )

        settings = ConfigLoader(path).load()

        assert settings.backend == "redis"
        assert settings.fail_open is True
        assert settings.redis.url == "redis://resolved:6379/0"
        assert settings.redis.socket_timeout == 1.5

    def test_empty_cache_section_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("cache:\n")
        settings = ConfigLoader(path).load()
        assert settings.backend == "memory"


class TestFactory:

    def test_memory_backend(self):
        assert isinstance(create_store(CacheSettings()), MemoryStore)

    def test_redis_backend(self):
        store = create_store(CacheSettings(backend="redis", redis=RedisConfig(url="redis://localhost:6379/0")))
        assert isinstance(store, RedisStore)

    def test_mysql_backend(self, monkeypatch):
        created = []

        class FakeMySQLStore:
            def __init__(self, config):
                created.append(config)

        monkeypatch.setattr("render_cache.mysql_store.MySQLStore", FakeMySQLStore)
        settings = CacheSettings(backend="mysql")

        store = create_store(settings)

        assert isinstance(store, FakeMySQLStore)
        assert created == [settings.mysql]

    def test_backend_changed_after_validation(self):
        settings = CacheSettings()
        settings.backend = "memcached"

        with pytest.raises(ValueError, match="memory, redis, mysql"):
            create_store(settings)

    def test_configure_installs_default_store(self, memory_store, monkeypatch):
        levels = []
        monkeypatch.setattr("render_cache.config_loader.setup_logging", levels.append)

        monkeypatch.setattr(json_cache, "fail_open", False)

        store = configure(CacheSettings(log_level="DEBUG", fail_open=True))

        assert get_default_store() is store
        assert store is not memory_store
        assert levels == ["DEBUG"]
        assert json_cache.fail_open is True
