"""Shared fixtures: an in-memory stand-in for a PyMySQL connection."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence

import pytest

from schemadiff.catalog import CATEGORIES, Q_SHOW_DATABASES, ObjectCategory

SHOW_CREATE_RE = re.compile(r"^SHOW CREATE (\w+) (?:`((?:[^`]|``)*)`\.)?`((?:[^`]|``)*)`$")

# schema -> category -> object name -> raw definition
Catalog = Dict[str, Dict[ObjectCategory, Dict[str, str]]]


class FakeCursor:
    """Answers the catalog and SHOW CREATE queries issued by schemadiff."""

    def __init__(self, conn: "FakeConnection") -> None:
        self.conn = conn
        self._rows: List[Dict[str, Any]] = []

    def __enter__(self) -> "FakeCursor":
        return self

    def __exit__(self, *exc: Any) -> None:
        return None

    def execute(self, query: str, params: Optional[Sequence[Any]] = None) -> None:
        self.conn.executed.append(query)
        self._rows = self.conn.answer(query, params)

    def fetchall(self) -> List[Dict[str, Any]]:
        return list(self._rows)

    def fetchone(self) -> Optional[Dict[str, Any]]:
        return self._rows[0] if self._rows else None


class FakeConnection:
    """Connection double backed by a nested dict catalog."""

    def __init__(self, catalog: Catalog, extra_databases: Sequence[str] = ()) -> None:
        self.catalog = catalog
        self.extra_databases = list(extra_databases)
        self.executed: List[str] = []
        self.closed = False
        self.drop_definition_column = False

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def close(self) -> None:
        self.closed = True

    def answer(self, query: str, params: Optional[Sequence[Any]]) -> List[Dict[str, Any]]:
        if query == Q_SHOW_DATABASES:
            return [{"Database": name} for name in [*self.extra_databases, *self.catalog]]

        for category, spec in CATEGORIES.items():
            if query == spec.query:
                schema = params[0]
                names = self.catalog.get(schema, {}).get(category, {})
                return [{spec.name_column: name} for name in names]

        match = SHOW_CREATE_RE.match(query)
        if match:
            keyword, schema, name = match.groups()
            category = next(c for c, s in CATEGORIES.items() if s.keyword == keyword)
            spec = CATEGORIES[category]
            name = name.replace("``", "`")
            objects = self.catalog.get(schema, {}).get(category, {})
            if name not in objects:
                return []
            row: Dict[str, Any] = {keyword.capitalize(): name}
            if not self.drop_definition_column:
                row[spec.definition_column] = objects[name]
            return [row]

        raise AssertionError(f"unexpected query: {query}")


TABLE_USERS = """CREATE TABLE `users` (
  `id` int NOT NULL AUTO_INCREMENT,
  `email` varchar(255) NOT NULL,
  PRIMARY KEY (`id`)
) ENGINE=InnoDB AUTO_INCREMENT=%d DEFAULT CHARSET=utf8mb4"""

TABLE_ORDERS = """CREATE TABLE `orders` (
  `id` int NOT NULL AUTO_INCREMENT,
  `user_id` int NOT NULL,
  PRIMARY KEY (`id`)
) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4"""

TABLE_PRODUCTS = """CREATE TABLE `products` (
  `id` int NOT NULL,
  `sku` varchar(32) NOT NULL
) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4"""

VIEW_ACTIVE = (
    "CREATE ALGORITHM=UNDEFINED DEFINER=`%s`@`%%` SQL SECURITY DEFINER "
    "VIEW `active_users` AS select `users`.`id` AS `id` from `users`"
)


@pytest.fixture
def make_connection():
    """Factory for :class:`FakeConnection` objects."""

    def _make(catalog: Catalog, extra_databases: Sequence[str] = ()) -> FakeConnection:
        return FakeConnection(catalog, extra_databases)

    return _make


@pytest.fixture
def reference_catalog() -> Catalog:
    """Reference side of the users/orders vs users/products scenario."""
    return {
        "shop": {
            ObjectCategory.TABLE: {
                "users": TABLE_USERS % 17,
                "orders": TABLE_ORDERS,
            },
            ObjectCategory.VIEW: {"active_users": VIEW_ACTIVE % "dev_admin"},
        }
    }


@pytest.fixture
def target_catalog() -> Catalog:
    """Target side of the users/orders vs users/products scenario."""
    return {
        "shop": {
            ObjectCategory.TABLE: {
                "users": TABLE_USERS % 90210,
                "products": TABLE_PRODUCTS,
            },
            ObjectCategory.VIEW: {"active_users": VIEW_ACTIVE % "prod_admin"},
        }
    }
