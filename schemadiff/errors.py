"""
errors
======

Exception types raised by the I/O side of the tool.

Structural drift is *not* an error: it is returned as a boolean by the
comparison pipeline. Everything here is fatal for the run and ends up as a
single ``Error: ...`` line on stderr (see :mod:`schemadiff.cli`).
"""

from __future__ import annotations


class SchemaDiffError(Exception):
    """Base class for fatal schemadiff errors."""


class ConfigError(SchemaDiffError):
    """A required setting is missing or invalid."""


class ConnectivityError(SchemaDiffError):
    """A database connection could not be established."""


class IntrospectionError(SchemaDiffError):
    """A catalog or ``SHOW CREATE`` query returned an unusable result."""
