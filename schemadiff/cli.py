"""
cli
===

Command-line entry points.

There are no behavioral flags: everything is read from ``.env``, the
environment and the optional ``config.yml`` (see :mod:`schemadiff.config`).

Exit codes
----------
- ``0``: no structural differences found
- ``1``: drift found, or a fatal error (printed to stderr as ``Error: ...``)

Usage::

    schemadiff          # compare DEV_DB_NAME with PROD_DB_NAME
    schemadiff-all      # compare every database both servers share

"""

from __future__ import annotations

import argparse
import sys
from typing import Callable, Sequence

from .config import Settings, load_settings
from .runner import run_all, run_single

EXIT_OK = 0
EXIT_FAILURE = 1


def _run(
    description: str,
    argv: Sequence[str] | None,
    runner: Callable[[Settings], bool],
    require_database: bool,
) -> int:
    parser = argparse.ArgumentParser(description=description)
    _, extra = parser.parse_known_args(argv)
    if extra:
        print(f"Error: unrecognized arguments: {' '.join(extra)}", file=sys.stderr)
        return EXIT_FAILURE

    try:
        settings = load_settings(require_database=require_database)
        ok = runner(settings)
    except Exception as exc:  # any failure is fatal for the run
        message = str(exc).replace("\n", " ") or type(exc).__name__
        print(f"Error: {message}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK if ok else EXIT_FAILURE


def main(argv: Sequence[str] | None = None) -> int:
    """Compare the configured database of the reference and target servers."""
    return _run(
        "Compare table/view/procedure/function definitions of two MySQL databases.",
        argv,
        run_single,
        require_database=True,
    )


def main_all(argv: Sequence[str] | None = None) -> int:
    """Compare every non-system database present on both servers."""
    return _run(
        "Compare table/view/procedure/function definitions of every database on two MySQL servers.",
        argv,
        run_all,
        require_database=False,
    )


if __name__ == "__main__":
    raise SystemExit(main())
