"""
utils
=====

Small, shared utilities used across the codebase.

This module intentionally contains only low-level helpers that are safe to
import from anywhere (no database calls, no third-party imports).

Functions
---------
- :func:`safe_name`:
  Turn a MySQL identifier (object or database name) into a filesystem-safe,
  collision-free filename component.
"""

from __future__ import annotations

import hashlib
import re


def safe_name(value: str) -> str:
    """Return a filesystem-safe version of *value*.

    MySQL identifiers may contain spaces, dots, ``$`` and non-ASCII letters,
    so two distinct names can sanitize to the same text (``a b`` and ``a$b``).
    Whenever sanitizing changes the name, or the name has upper-case letters
    (``Users`` and ``users`` are distinct tables on a case-sensitive server
    but one file on a case-insensitive filesystem), a short hash of the
    original is appended so diff files never overwrite each other.

    Parameters
    ----------
    value:
        The identifier to sanitize.

    Returns
    -------
    str
        *value* itself when it only contains ``[a-z0-9_-]``; otherwise the
        sanitized text (``"unnamed"`` if nothing is left) followed by ``-``
        and eight hex digits.

    Examples
    --------
    >>> safe_name("orders")
    'orders'
    >>> safe_name("order items").startswith("order_items-")
    True
    """
    out = re.sub(r"[^A-Za-z0-9_-]+", "_", value).strip("_") or "unnamed"
    if out == value and value == value.lower():
        return out
    digest = hashlib.sha1(value.encode("utf-8")).hexdigest()[:8]
    return f"{out}-{digest}"
