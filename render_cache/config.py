"""
Cache configuration for rendered output caching
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, TYPE_CHECKING
import os

if TYPE_CHECKING:
    from .store import Store


# Options consumed by the caching layer itself; everything else is forwarded to the store
RESERVED_OPTIONS = ("key", "store")

SUPPORTED_BACKENDS = ("memory", "redis", "mysql")


@dataclass
class CacheConfig:
    """Per-type cache configuration"""
    enabled: bool = False
    key_prefix: Optional[str] = None
    store: Optional["Store"] = None
    extra_options: Dict[str, Any] = field(default_factory=dict)

    def update(self, options: Dict[str, Any]) -> None:
        """Merge configuration options, splitting out the ones the cache layer understands"""
        options = dict(options)
        if "key" in options:
            self.key_prefix = options.pop("key")
        if "store" in options:
            self.store = options.pop("store")
        self.extra_options.update(options)


@dataclass
class RedisConfig:
    """Redis connection configuration for the cache store"""
    url: Optional[str] = None
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    retry_attempts: int = 3

    def __post_init__(self):
        # Get from environment variables if not provided or if value is env var name
        if self.url is None or self.url == "REDIS_URL":
            self.url = os.getenv('REDIS_URL', 'redis://localhost:6379/0')


@dataclass
class MySQLConfig:
    """MySQL database configuration for the cache store"""
    host: str = "localhost"
    port: int = 3306
    user: Optional[str] = None
    password: Optional[str] = None
    database: str = "render_cache"
    table_name: str = "render_cache"
    charset: str = "utf8mb4"
    autocommit: bool = True
    connect_timeout: int = 10

    def __post_init__(self):
        if self.host is None or self.host == "MYSQL_HOST":
            self.host = os.getenv('MYSQL_HOST', 'localhost')
        if self.port is None or str(self.port) == "MYSQL_PORT":
            self.port = os.getenv('MYSQL_PORT', '3306')
        self.port = int(self.port)
        if self.user is None or self.user == "MYSQL_USER":
            self.user = os.getenv('MYSQL_USER', 'root')
        if self.password is None or self.password == "MYSQL_PASSWORD":
            self.password = os.getenv('MYSQL_PASSWORD', '')


@dataclass
class CacheSettings:
    """Process-wide cache settings"""
    backend: str = "memory"
    fail_open: bool = False
    redis: RedisConfig = field(default_factory=RedisConfig)
    mysql: MySQLConfig = field(default_factory=MySQLConfig)
    log_level: str = "INFO"

    def __post_init__(self):
        self.backend = self.backend.lower()
        if self.backend not in SUPPORTED_BACKENDS:
            raise ValueError(
                f"Unknown cache backend: {self.backend}. "
                f"Supported backends: {', '.join(SUPPORTED_BACKENDS)}"
            )

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'CacheSettings':
        """Create CacheSettings from dictionary"""
        redis_config = RedisConfig(**(config_dict.get('redis') or {}))
        mysql_config = MySQLConfig(**(config_dict.get('mysql') or {}))

        return cls(
            backend=config_dict.get('backend', 'memory'),
            fail_open=config_dict.get('fail_open', False),
            redis=redis_config,
            mysql=mysql_config,
            log_level=config_dict.get('log_level', 'INFO'),
        )
