from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Iterator, Optional

import mysql.connector


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: Outside a transaction every repository call uses its own short-lived
    connection. Inside ``transaction()`` the connection is pinned to the current
    execution context (thread/request) and shared until commit or rollback.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._active: ContextVar[Optional[Any]] = ContextVar(f"timetrack_conn_{id(self)}", default=None)

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
        )

    def current(self):
        """Connection pinned by an open ``transaction()``, if any."""
        return self._active.get()

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        existing = self._active.get()
        if existing is not None:
            # Nested unit of work joins the outer one.
            yield existing
            return

        conn = self.connect()
        token = self._active.set(conn)
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._active.reset(token)
            conn.close()
