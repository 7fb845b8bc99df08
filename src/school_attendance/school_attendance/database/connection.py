from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import mysql.connector


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    # Seconds; applied to connect and to every socket read/write.
    timeout: Optional[int] = None

    @classmethod
    def from_dict(cls, db_config: dict, *, timeout: Optional[int] = None) -> "DBConfig":
        raw_timeout = db_config.get("timeout", timeout)
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "school_attendance")),
            timeout=int(raw_timeout) if raw_timeout else None,
        )


class DatabaseConnection:
    """DB connection factory.

    Note: We create short-lived connections per operation, so worker threads
    never share a connection.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    def connect(self, *, with_database: bool = True):
        kwargs = dict(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
        )
        if with_database:
            kwargs["database"] = self._config.database
        if self._config.timeout:
            kwargs["connection_timeout"] = self._config.timeout
            kwargs["read_timeout"] = self._config.timeout
            kwargs["write_timeout"] = self._config.timeout
        return mysql.connector.connect(**kwargs)
