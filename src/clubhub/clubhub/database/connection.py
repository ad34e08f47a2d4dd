from __future__ import annotations

import logging
from dataclasses import dataclass

import mysql.connector

from ..core.exceptions import InternalError

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = 10

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
            connect_timeout=int(db_config.get("connect_timeout", 10)),
        )


class DatabaseConnection:
    """DB connection factory owned by the application container.

    Note: We create short-lived connections per unit of work (safe for simple Flask apps).
    """

    def __init__(self, config: DBConfig):
        self._config = config
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def connect(self):
        if self._closed:
            raise RuntimeError("Database connection factory has been closed")
        try:
            return mysql.connector.connect(
                host=self._config.host,
                port=int(self._config.port),
                user=self._config.user,
                password=self._config.password,
                database=self._config.database,
                connection_timeout=self._config.connect_timeout,
                autocommit=False,
            )
        except mysql.connector.Error as e:
            logger.error("Cannot connect to MySQL at %s:%s: %s", self._config.host, self._config.port, e)
            raise InternalError(
                "Database is unavailable",
                context={"host": self._config.host, "database": self._config.database},
            ) from e

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            logger.info("Database connection factory closed (%s@%s/%s)", self._config.user, self._config.host, self._config.database)
