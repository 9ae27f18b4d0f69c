"""
MySQL storage for rendered output cache
"""

import threading
from typing import Any, Callable, Mapping, Optional

import pymysql
from loguru import logger

from .config import MySQLConfig
from .exceptions import StoreUnavailableError
from .store import Store, StoreStats, expire_in_milliseconds


CONNECTION_ERRORS = (pymysql.err.OperationalError, pymysql.err.InterfaceError)


class MySQLStore(Store):
    """MySQL storage backend for rendered output.

    Expiration is evaluated by the database: rows carry an ``expires_at``
    computed from ``expire_in`` at write time and expired rows read as misses.
    Stale rows are overwritten on the next miss; nothing sweeps them.

    Connections are kept per thread and pinged before use.
    """

    def __init__(self, config: Optional[MySQLConfig] = None,
                 connect: Optional[Callable[[], Any]] = None):
        self.config = config or MySQLConfig()
        self._connect = connect or self._create_connection
        self._local = threading.local()
        self._stats_lock = threading.Lock()
        self._reconnects = 0
        self.stats = StoreStats()

        self._initialize_table()

    def _create_connection(self):
        """Create a new MySQL connection"""
        return pymysql.connect(
            host=self.config.host,
            port=self.config.port,
            user=self.config.user,
            password=self.config.password,
            database=self.config.database,
            autocommit=self.config.autocommit,
            charset=self.config.charset,
            connect_timeout=self.config.connect_timeout,
        )

    def _initialize_table(self):
        """Ensure the cache table exists"""
        logger.info(
            f"MySQLStore: connecting host={self.config.host} port={self.config.port} db={self.config.database}"
        )
        try:
            conn = self._get_connection()
            with conn.cursor() as cur:
                cur.execute(self._get_table_sql())
        except CONNECTION_ERRORS as e:
            raise StoreUnavailableError(f"MySQL cache table setup failed: {e}") from e
        logger.debug(f"MySQLStore: ensured {self.config.table_name} table exists")

    def _get_table_sql(self) -> str:
        """Generate table creation SQL"""
        return (
            f"CREATE TABLE IF NOT EXISTS {self.config.table_name} ("
            "  cache_key VARCHAR(255) PRIMARY KEY,"
            "  value LONGTEXT NOT NULL,"
            "  created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,"
            "  expires_at TIMESTAMP(3) NULL,"
            "  INDEX (expires_at)"
            f") ENGINE=InnoDB DEFAULT CHARSET={self.config.charset};"
        )

    def _get_connection(self):
        """Get this thread's connection, reconnecting if the server dropped it"""
        conn = getattr(self._local, "conn", None)
        if conn is None:
            conn = self._connect()
            self._local.conn = conn
            return conn

        try:
            conn.ping(reconnect=True)
        except CONNECTION_ERRORS:
            conn = self._connect()
            self._local.conn = conn
            with self._stats_lock:
                self._reconnects += 1
        return conn

    def fetch(self, key: str, options: Mapping[str, Any], compute: Callable[[], str]) -> str:
        ttl_ms = expire_in_milliseconds(options)

        value = self._select(key)
        if value is not None:
            with self._stats_lock:
                self.stats.hits += 1
            logger.debug(f"MySQLStore HIT key={key}")
            return value

        with self._stats_lock:
            self.stats.misses += 1

        value = compute()

        self._upsert(key, value, ttl_ms)
        with self._stats_lock:
            self.stats.writes += 1
        logger.debug(f"MySQLStore STORE key={key} size={len(value)} ttl_ms={ttl_ms}")
        return value

    def _select(self, key: str) -> Optional[str]:
        try:
            conn = self._get_connection()
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT value FROM {self.config.table_name}"
                    " WHERE cache_key=%s AND (expires_at IS NULL OR expires_at > NOW(3))",
                    (key,),
                )
                row = cur.fetchone()
        except CONNECTION_ERRORS as e:
            raise StoreUnavailableError(f"MySQL cache read failed for key={key}: {e}") from e
        return row[0] if row else None

    def _upsert(self, key: str, value: str, ttl_ms: Optional[int]) -> None:
        if ttl_ms is not None:
            sql = (
                f"INSERT INTO {self.config.table_name} (cache_key, value, expires_at)"
                " VALUES (%s, %s, NOW(3) + INTERVAL %s MICROSECOND)"
                " ON DUPLICATE KEY UPDATE value=VALUES(value), expires_at=VALUES(expires_at)"
            )
            params = (key, value, ttl_ms * 1000)
        else:
            sql = (
                f"INSERT INTO {self.config.table_name} (cache_key, value, expires_at)"
                " VALUES (%s, %s, NULL)"
                " ON DUPLICATE KEY UPDATE value=VALUES(value), expires_at=NULL"
            )
            params = (key, value)

        try:
            conn = self._get_connection()
            with conn.cursor() as cur:
                cur.execute(sql, params)
            if not self.config.autocommit:
                conn.commit()
        except CONNECTION_ERRORS as e:
            raise StoreUnavailableError(f"MySQL cache write failed for key={key}: {e}") from e

    def close(self) -> None:
        """Close this thread's connection and log a summary"""
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            conn.close()
            self._local.conn = None
        with self._stats_lock:
            logger.info(
                f"MySQLStore summary: hits={self.stats.hits} misses={self.stats.misses} "
                f"writes={self.stats.writes} reconnects={self._reconnects}"
            )
