"""
normalize
=========

Canonicalization of raw ``SHOW CREATE`` output.

Two environments that are structurally identical still disagree on some
environment-specific details of their DDL:

- the current ``AUTO_INCREMENT=<n>`` counter of a table
- the ``DEFINER=`user`@`host``` clause of views and routines

:func:`normalize` strips both so the remaining text can be compared with
plain string equality. Nothing else is touched, including line terminators.
"""

from __future__ import annotations

import re

AUTO_INCREMENT_RE = re.compile(r"AUTO_INCREMENT=\d+\s*", re.IGNORECASE)
DEFINER_RE = re.compile(r"DEFINER=`[^`]+`@`[^`]+`\s*", re.IGNORECASE)

NOISE_PATTERNS = (AUTO_INCREMENT_RE, DEFINER_RE)


def _strip_once(text: str) -> str:
    for pattern in NOISE_PATTERNS:
        text = pattern.sub("", text)
    return text


def normalize(raw: str) -> str:
    """Return the canonical form of a raw object definition.

    Parameters
    ----------
    raw:
        Definition text exactly as returned by the introspection query.

    Returns
    -------
    str
        *raw* with every auto-increment counter assignment and definer clause
        (plus the whitespace that follows them) removed.

    Examples
    --------
    >>> normalize("CREATE TABLE `t` (\\n  `id` int\\n) ENGINE=InnoDB AUTO_INCREMENT=42 DEFAULT CHARSET=utf8mb4")
    'CREATE TABLE `t` (\\n  `id` int\\n) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4'
    """
    text = raw
    # a removal can splice together a new match; repeat until stable
    while True:
        stripped = _strip_once(text)
        if stripped == text:
            return stripped
        text = stripped
