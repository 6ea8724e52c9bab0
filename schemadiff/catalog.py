"""
catalog
=======

Catalog and introspection queries for MySQL/MariaDB.

This module is responsible for turning one (connection, schema, category)
triple into a :data:`~schemadiff.reconcile.DefinitionMap`:

1. list the object names of the category from ``information_schema``
2. run ``SHOW CREATE <KIND>`` for each name
3. normalize the returned definition

The orchestration layer (:mod:`schemadiff.runner`) drives which categories
and schemas are collected.

Design choices
--------------
- The category table is a constant: four frozen :class:`CategorySpec` rows.
- ``SHOW CREATE`` statements are always schema-qualified when the schema is
  known, so one server connection can serve every database.
- Base tables ending in ``_mv`` / ``_pv`` (materialized/processed views kept
  as tables) are not compared.

Public helpers
--------------
- :func:`filter_names` (include/exclude patterns)
- :func:`collect_definitions`, :func:`list_databases`

"""

from __future__ import annotations

import enum
import fnmatch
import re
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Optional, Sequence

from .connection import fetch_all, fetch_one
from .errors import IntrospectionError
from .normalize import normalize
from .reconcile import DefinitionMap


class ObjectCategory(enum.Enum):
    """Kinds of schema objects that are compared."""

    TABLE = "tables"
    VIEW = "views"
    PROCEDURE = "procedures"
    FUNCTION = "functions"

    @property
    def label(self) -> str:
        """Plural, capitalized name used in reports (``"Tables"``)."""
        return self.value.capitalize()


@dataclass(frozen=True)
class NameFilter:
    """Include/exclude patterns for object or database names."""

    include: Sequence[str] = ()
    exclude: Sequence[str] = ()
    case_sensitive: bool = False


@dataclass(frozen=True)
class CategorySpec:
    """How to list and introspect the objects of one category.

    Attributes
    ----------
    query:
        Catalog query returning one row per object; takes the schema name as
        its only parameter.
    name_column:
        Result column of *query* holding the object name.
    keyword:
        Object keyword used in ``SHOW CREATE <keyword>``.
    definition_column:
        Result column of ``SHOW CREATE`` holding the definition text.
    """

    query: str
    name_column: str
    keyword: str
    definition_column: str

    def statement(self, name: str, schema: Optional[str] = None) -> str:
        """Return the ``SHOW CREATE`` statement for object *name*."""
        obj = quote_identifier(name)
        if schema:
            obj = f"{quote_identifier(schema)}.{obj}"
        return f"SHOW CREATE {self.keyword} {obj}"


# ---- catalog queries ----
Q_LIST_TABLES = """
SELECT TABLE_NAME
FROM information_schema.tables
WHERE table_schema = %s
  AND TABLE_TYPE = 'BASE TABLE'
  AND TABLE_NAME NOT REGEXP '_(mv|pv)$'
ORDER BY TABLE_NAME
""".strip()

Q_LIST_VIEWS = """
SELECT TABLE_NAME
FROM information_schema.views
WHERE table_schema = %s
ORDER BY TABLE_NAME
""".strip()

Q_LIST_PROCEDURES = """
SELECT ROUTINE_NAME
FROM information_schema.routines
WHERE routine_schema = %s
  AND ROUTINE_TYPE = 'PROCEDURE'
ORDER BY ROUTINE_NAME
""".strip()

Q_LIST_FUNCTIONS = """
SELECT ROUTINE_NAME
FROM information_schema.routines
WHERE routine_schema = %s
  AND ROUTINE_TYPE = 'FUNCTION'
ORDER BY ROUTINE_NAME
""".strip()

Q_SHOW_DATABASES = "SHOW DATABASES"

CATEGORIES: Dict[ObjectCategory, CategorySpec] = {
    ObjectCategory.TABLE: CategorySpec(Q_LIST_TABLES, "TABLE_NAME", "TABLE", "Create Table"),
    ObjectCategory.VIEW: CategorySpec(Q_LIST_VIEWS, "TABLE_NAME", "VIEW", "Create View"),
    ObjectCategory.PROCEDURE: CategorySpec(Q_LIST_PROCEDURES, "ROUTINE_NAME", "PROCEDURE", "Create Procedure"),
    ObjectCategory.FUNCTION: CategorySpec(Q_LIST_FUNCTIONS, "ROUTINE_NAME", "FUNCTION", "Create Function"),
}

SYSTEM_SCHEMAS: FrozenSet[str] = frozenset(
    {"mysql", "information_schema", "performance_schema", "sys"}
)


def quote_identifier(name: str) -> str:
    """Backtick-quote a MySQL identifier, doubling embedded backticks."""
    return "`" + name.replace("`", "``") + "`"


# ---- name filter helpers ----
def sql_like_to_fnmatch(pattern: str) -> str:
    """Convert SQL LIKE patterns (% and _) to fnmatch syntax (* and ?)."""
    return pattern.replace("%", "*").replace("_", "?")


def matches_pattern(name: str, pattern: str, case_sensitive: bool = False) -> bool:
    """Return True if name matches pattern (LIKE by default, regex via ``re:``)."""
    if pattern.startswith("re:"):
        flags = 0 if case_sensitive else re.IGNORECASE
        return re.search(pattern[3:], name, flags) is not None
    fm = sql_like_to_fnmatch(pattern)
    if case_sensitive:
        return fnmatch.fnmatchcase(name, fm)
    return fnmatch.fnmatchcase(name.lower(), fm.lower())


def filter_names(names: Sequence[str], name_filter: Optional[NameFilter]) -> List[str]:
    """Filter names using include/exclude patterns, keeping their order.

    Include patterns keep a name if it matches *any* include pattern.
    Exclude patterns drop a name if it matches *any* exclude pattern.
    """
    result = list(names)
    if name_filter is None:
        return result
    cs = name_filter.case_sensitive
    if name_filter.include:
        result = [n for n in result if any(matches_pattern(n, p, cs) for p in name_filter.include)]
    if name_filter.exclude:
        result = [n for n in result if not any(matches_pattern(n, p, cs) for p in name_filter.exclude)]
    return result


# ---- introspection ----
def list_object_names(conn: Any, schema: str, category: ObjectCategory) -> List[str]:
    """List the object names of *category* in *schema*."""
    spec = CATEGORIES[category]
    names: List[str] = []
    for row in fetch_all(conn, spec.query, (schema,)):
        name = row.get(spec.name_column)
        if not isinstance(name, str):
            raise IntrospectionError(
                f"expected column '{spec.name_column}' not found or not a string in {category.value} catalog row"
            )
        names.append(name)
    return names


def fetch_definition(conn: Any, schema: Optional[str], name: str, category: ObjectCategory) -> str:
    """Return the raw (not yet normalized) definition of one object.

    Raises
    ------
    IntrospectionError
        If ``SHOW CREATE`` returns no row or the definition column is missing.
    """
    spec = CATEGORIES[category]
    statement = spec.statement(name, schema)
    row = fetch_one(conn, statement)
    if row is None:
        raise IntrospectionError(f"query returned no row: {statement}")
    definition = row.get(spec.definition_column)
    if not isinstance(definition, str):
        raise IntrospectionError(
            f"expected column '{spec.definition_column}' not found in the result of: {statement}"
        )
    return definition


def collect_definitions(
    conn: Any,
    schema: str,
    category: ObjectCategory,
    name_filter: Optional[NameFilter] = None,
) -> DefinitionMap:
    """Collect the canonical definitions of every object of *category*.

    Parameters
    ----------
    conn:
        Open connection (rows as dictionaries).
    schema:
        Database whose objects are collected.
    category:
        Which object kind to collect.
    name_filter:
        Optional include/exclude patterns applied to object names before
        any ``SHOW CREATE`` is issued.

    Returns
    -------
    dict
        Object name to normalized definition.
    """
    names = filter_names(list_object_names(conn, schema, category), name_filter)
    return {name: normalize(fetch_definition(conn, schema, name, category)) for name in names}


def list_databases(conn: Any) -> List[str]:
    """Return the non-system databases visible on the server, in server order."""
    out: List[str] = []
    for row in fetch_all(conn, Q_SHOW_DATABASES):
        name = row.get("Database")
        if not isinstance(name, str):
            raise IntrospectionError("expected column 'Database' not found in SHOW DATABASES result")
        if name.lower() in SYSTEM_SCHEMAS:
            continue
        out.append(name)
    return out
