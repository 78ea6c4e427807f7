from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

import mysql.connector
from mysql.connector import pooling

from ..core.constants import DEFAULT_POOL_SIZE


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = DEFAULT_POOL_SIZE
    time_zone: Optional[str] = None

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "timesheet_db")),
            pool_size=int(db_config.get("pool_size", DEFAULT_POOL_SIZE)),
            time_zone=db_config.get("time_zone") or None,
        )

    def connect_kwargs(self, *, with_database: bool = True) -> dict:
        kwargs = {
            "host": self.host,
            "port": int(self.port),
            "user": self.user,
            "password": self.password,
        }
        if with_database:
            kwargs["database"] = self.database
        if self.time_zone:
            kwargs["time_zone"] = self.time_zone
        return kwargs

    def describe(self) -> str:
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


class DatabaseConnection:
    """Connection factory backed by a mysql-connector pool.

    Built once at startup and passed to repositories explicitly. The pool is
    created on first use; ``connect()`` hands out a pooled connection whose
    ``close()`` returns it to the pool.
    """

    def __init__(self, config: DBConfig, *, pool_name: str = "timesheet_api"):
        self._config = config
        self._pool_name = pool_name
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._lock = threading.Lock()

    @property
    def config(self) -> DBConfig:
        return self._config

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        with self._lock:
            if self._pool is None:
                self._pool = pooling.MySQLConnectionPool(
                    pool_name=self._pool_name,
                    pool_size=int(self._config.pool_size),
                    **self._config.connect_kwargs(),
                )
            return self._pool

    def connect(self):
        return self._get_pool().get_connection()

    def ping(self) -> bool:
        """True when the store answers a trivial query."""
        try:
            conn = self.connect()
        except mysql.connector.Error:
            return False
        try:
            cur = conn.cursor()
            try:
                cur.execute("SELECT 1")
                cur.fetchall()
            finally:
                cur.close()
            return True
        except mysql.connector.Error:
            return False
        finally:
            conn.close()
