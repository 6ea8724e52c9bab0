"""
schemadiff
==========

Structural drift detection between two MySQL/MariaDB environments.

The modules are intended to be used together via the CLI entry points:

- :func:`schemadiff.cli.main` (one database per environment)
- :func:`schemadiff.cli.main_all` (every database both servers share)

The comparison core is importable on its own:

- :func:`schemadiff.normalize.normalize`
- :func:`schemadiff.reconcile.reconcile`
- :func:`schemadiff.diffing.render`
"""

__version__ = "0.1.0"
