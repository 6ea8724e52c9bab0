"""
runner
======

The comparison pipeline shared by both entry points.

For each (reference schema, target schema) pair and each enabled category::

    collect_definitions  ->  reconcile  ->  report_category  ->  print

Both entry points only differ in which schema pairs they feed in:

- :func:`run_single` compares the configured database of each side.
- :func:`run_all` compares every non-system database present on both servers
  and reports databases that exist on one side only.

The return value of both is the overall result: ``True`` when no drift was
found anywhere.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from .catalog import ObjectCategory, collect_definitions, filter_names, list_databases
from .config import Settings
from .connection import DbTarget, connect
from .errors import ConfigError
from .reconcile import reconcile
from .reporting import (
    SummarySection,
    category_diffs_dir,
    generate_summary_md,
    header_lines,
    one_sided_notes,
    report_category,
    section_title,
    warning,
    write_object_diffs,
)

Connector = Callable[[DbTarget], Any]


def compare_category(
    ref_conn: Any,
    tgt_conn: Any,
    ref_schema: str,
    tgt_schema: str,
    category: ObjectCategory,
    settings: Settings,
    sections: Optional[List[SummarySection]] = None,
    database: Optional[str] = None,
) -> bool:
    """Compare one category of one schema pair and print the report.

    When *sections* is given and ``settings.out_dir`` is set, the plain diff
    files are written and a summary section is appended.
    """
    reference = collect_definitions(ref_conn, ref_schema, category, settings.object_filter)
    target = collect_definitions(tgt_conn, tgt_schema, category, settings.object_filter)
    result = reconcile(reference, target)

    out: List[str] = []
    ok = report_category(
        category.label,
        result,
        reference,
        target,
        out,
        reference_label=settings.reference.label,
        target_label=settings.target.label,
        context=settings.context,
        color=settings.color,
    )
    print("\n".join(out))

    if sections is not None and settings.out_dir is not None:
        diffs_dir = category_diffs_dir(settings.out_dir, category.value, database)
        sections.append(
            SummarySection(
                title=section_title(category.label, database),
                files=write_object_diffs(diffs_dir, result, reference, target, settings.context),
                notes=one_sided_notes(result, settings.reference.label, settings.target.label),
            )
        )
    return ok


def compare_database(
    ref_conn: Any,
    tgt_conn: Any,
    ref_schema: str,
    tgt_schema: str,
    settings: Settings,
    sections: Optional[List[SummarySection]] = None,
    database: Optional[str] = None,
) -> bool:
    """Compare every enabled category; keep going after drift is found."""
    ok = True
    for category in settings.options.categories():
        if not compare_category(
            ref_conn, tgt_conn, ref_schema, tgt_schema, category, settings, sections, database
        ):
            ok = False
    return ok


def _open_both(settings: Settings, connector: Connector) -> Tuple[Any, Any]:
    ref_conn = connector(settings.reference)
    try:
        tgt_conn = connector(settings.target)
    except BaseException:
        ref_conn.close()
        raise
    return ref_conn, tgt_conn


def _write_summary(settings: Settings, sections: List[SummarySection], mode: str) -> Optional[Path]:
    if settings.out_dir is None:
        return None
    header = header_lines(
        {
            "Mode": mode,
            "Reference": settings.reference.describe(),
            "Target": settings.target.describe(),
            "Categories": ", ".join(c.label for c in settings.options.categories()),
            "Context": str(settings.context),
        }
    )
    path = generate_summary_md(settings.out_dir, header, sections)
    print(f"Summary: {path}")
    return path


def run_single(settings: Settings, connector: Connector = connect) -> bool:
    """Compare the configured database of each environment.

    Returns
    -------
    bool
        True when every enabled category matches.
    """
    ref_schema = settings.reference.database
    tgt_schema = settings.target.database
    if not ref_schema or not tgt_schema:
        raise ConfigError(
            f"missing database name: set {settings.reference.label} and {settings.target.label} database names"
        )

    sections: List[SummarySection] = []
    ref_conn, tgt_conn = _open_both(settings, connector)
    try:
        ok = compare_database(ref_conn, tgt_conn, ref_schema, tgt_schema, settings, sections)
    finally:
        ref_conn.close()
        tgt_conn.close()

    _write_summary(settings, sections, "single database")
    return ok


def pair_databases(reference: List[str], target: List[str]) -> Tuple[List[str], List[str], List[str]]:
    """Split database names into (shared, reference-only, target-only), sorted."""
    ref_set, tgt_set = set(reference), set(target)
    return (
        sorted(ref_set & tgt_set),
        sorted(ref_set - tgt_set),
        sorted(tgt_set - ref_set),
    )


def run_all(settings: Settings, connector: Connector = connect) -> bool:
    """Compare every database that exists on both servers.

    Databases present on only one side are reported as warnings and count
    as drift.

    Returns
    -------
    bool
        True when no drift was found in any database.
    """
    sections: List[SummarySection] = []
    ok = True
    ref_conn, tgt_conn = _open_both(settings, connector)
    try:
        ref_dbs = filter_names(list_databases(ref_conn), settings.database_filter)
        tgt_dbs = filter_names(list_databases(tgt_conn), settings.database_filter)
        shared, ref_only, tgt_only = pair_databases(ref_dbs, tgt_dbs)

        notes: List[str] = []
        for name in ref_only:
            print(warning(f"Database {name} only exists in {settings.reference.label}", settings.color))
            notes.append(f"database `{name}` only exists in {settings.reference.label}")
            ok = False
        for name in tgt_only:
            print(warning(f"Database {name} only exists in {settings.target.label}", settings.color))
            notes.append(f"database `{name}` only exists in {settings.target.label}")
            ok = False
        if notes:
            sections.append(SummarySection(title="Databases", notes=notes))

        for name in shared:
            print(f"\n=== Database: {name} ===")
            if not compare_database(ref_conn, tgt_conn, name, name, settings, sections, database=name):
                ok = False
    finally:
        ref_conn.close()
        tgt_conn.close()

    _write_summary(settings, sections, "all databases")
    return ok
