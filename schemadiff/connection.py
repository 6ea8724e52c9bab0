"""
connection
==========

Database target model and PyMySQL connection helpers.

The rest of the codebase treats database access as a small surface:

- input: :class:`~schemadiff.connection.DbTarget` + SQL
- output: a list of rows as dictionaries (``DictCursor``)

PyMySQL raises on every failed statement, so callers never have to check for
partial results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import pymysql
import pymysql.cursors

from .errors import ConnectivityError

DEFAULT_PORT = 3306
CONNECT_TIMEOUT_SECONDS = 10


@dataclass(frozen=True)
class DbTarget:
    """Connection settings for one environment.

    Parameters
    ----------
    host:
        Server host name or address.
    user:
        Login user.
    password:
        Login password (may be empty).
    database:
        Database to compare; ``None`` in all-databases mode.
    port:
        TCP port of the server.
    label:
        Human label used in reports (e.g. ``"DEV"`` or ``"PROD"``).
    """

    host: str
    user: str
    password: str
    database: Optional[str]
    port: int = DEFAULT_PORT
    label: str = ""

    def describe(self) -> str:
        """Return a human-readable description for reports (no password)."""
        db = self.database or "*"
        return f"{self.label}: {self.user}@{self.host}:{self.port}/{db}"


def connect(target: DbTarget) -> pymysql.connections.Connection:
    """Open a connection to *target*.

    Rows are returned as dictionaries keyed by column name.

    Raises
    ------
    ConnectivityError
        If the server cannot be reached or rejects the login.
    """
    kwargs: Dict[str, Any] = {
        "host": target.host,
        "user": target.user,
        "password": target.password,
        "port": target.port,
        "charset": "utf8mb4",
        "cursorclass": pymysql.cursors.DictCursor,
        "autocommit": True,
        "connect_timeout": CONNECT_TIMEOUT_SECONDS,
    }
    if target.database:
        kwargs["database"] = target.database
    try:
        return pymysql.connect(**kwargs)
    except pymysql.MySQLError as exc:
        raise ConnectivityError(
            f"cannot connect to {target.label} at {target.host}:{target.port}: {exc}"
        ) from exc


def fetch_all(conn: Any, query: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
    """Run *query* and return every row."""
    with conn.cursor() as cur:
        cur.execute(query, params)
        return list(cur.fetchall())


def fetch_one(conn: Any, query: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
    """Run *query* and return the first row, or ``None`` if there is none."""
    with conn.cursor() as cur:
        cur.execute(query, params)
        return cur.fetchone()
