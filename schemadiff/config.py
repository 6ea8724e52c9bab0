"""
config
======

Configuration loading.

Settings come from three layers, later layers winning:

1. a ``.env`` file (loaded into ``os.environ`` with python-dotenv, never
   overriding variables that are already set)
2. an optional YAML file (``config.yml`` by default)
3. environment variables ``<PREFIX>_DB_HOST``, ``<PREFIX>_DB_USER``,
   ``<PREFIX>_DB_PASS``, ``<PREFIX>_DB_NAME`` and ``<PREFIX>_DB_PORT``

Example ``config.yml``::

    context: 3
    out_dir: out

    options:
      tables: true
      views: true
      procedures: true
      functions: false

    object_filter:
      exclude: ["tmp_%", "re:^zz_"]

    database_filter:
      include: ["shop_%"]

    reference:
      label: DEV
      host: dev-db.internal

    target:
      label: PROD
      env_prefix: PROD

Example ``.env``::

    DEV_DB_HOST=127.0.0.1
    DEV_DB_USER=app
    DEV_DB_PASS=secret
    DEV_DB_NAME=shop
    PROD_DB_HOST=10.0.0.5
    PROD_DB_USER=app
    PROD_DB_PASS=secret
    PROD_DB_NAME=shop

"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from .catalog import NameFilter, ObjectCategory
from .connection import DEFAULT_PORT, DbTarget
from .diffing import DEFAULT_CONTEXT
from .errors import ConfigError

CONFIG_PATH_VAR = "SCHEMADIFF_CONFIG"
ENV_FILE_VAR = "SCHEMADIFF_ENV_FILE"
DEFAULT_CONFIG_PATH = "config.yml"
DEFAULT_ENV_FILE = ".env"

SIDES = ("reference", "target")
DEFAULT_LABELS = {"reference": "DEV", "target": "PROD"}

# config field -> environment variable suffix
ENV_FIELDS = {
    "host": "HOST",
    "user": "USER",
    "password": "PASS",
    "database": "NAME",
    "port": "PORT",
}


@dataclass(frozen=True)
class Options:
    """Which object categories are compared."""

    tables: bool = True
    views: bool = True
    procedures: bool = True
    functions: bool = True

    def categories(self) -> List[ObjectCategory]:
        """Enabled categories in report order."""
        enabled = {
            ObjectCategory.TABLE: self.tables,
            ObjectCategory.VIEW: self.views,
            ObjectCategory.PROCEDURE: self.procedures,
            ObjectCategory.FUNCTION: self.functions,
        }
        return [category for category, on in enabled.items() if on]


@dataclass(frozen=True)
class Settings:
    """Everything a comparison run needs."""

    reference: DbTarget
    target: DbTarget
    options: Options
    object_filter: NameFilter
    database_filter: NameFilter
    context: int = DEFAULT_CONTEXT
    color: bool = False
    out_dir: Optional[Path] = None


def load_env(path: Optional[Path] = None) -> None:
    """Load a ``.env`` file into the process environment.

    Without *path*, ``$SCHEMADIFF_ENV_FILE`` or ``.env`` is used; a missing
    default file is skipped.

    Raises
    ------
    ConfigError
        If an explicitly named file does not exist.
    """
    explicit = path is not None or bool(os.environ.get(ENV_FILE_VAR))
    env_path = Path(path or os.environ.get(ENV_FILE_VAR) or DEFAULT_ENV_FILE)
    if not env_path.exists():
        if explicit:
            raise ConfigError(f"env file not found: {env_path}")
        return
    load_dotenv(env_path, override=False)


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the YAML config file.

    Without *path*, ``$SCHEMADIFF_CONFIG`` or ``config.yml`` is used; a
    missing default file yields an empty config.

    Raises
    ------
    ConfigError
        If an explicitly named file does not exist or is not a mapping.
    """
    explicit = path is not None or bool(os.environ.get(CONFIG_PATH_VAR))
    cfg_path = Path(path or os.environ.get(CONFIG_PATH_VAR) or DEFAULT_CONFIG_PATH)
    if not cfg_path.exists():
        if explicit:
            raise ConfigError(f"config file not found: {cfg_path}")
        return {}
    with cfg_path.open("r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ConfigError(f"config file must contain a mapping: {cfg_path}")
    return cfg


def deep_get(d: Dict[str, Any], keys: List[str], default: Any = None) -> Any:
    """Safely get nested dict value with default."""
    cur: Any = d
    for k in keys:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def env_var_name(prefix: str, field: str) -> str:
    """Return the environment variable holding *field* for *prefix*."""
    return f"{prefix.upper()}_DB_{ENV_FIELDS[field]}"


def get_env_var(prefix: str, field: str) -> Optional[str]:
    """Return the environment value of *field*, or None when unset.

    An empty string is returned as is; :func:`build_target` decides whether
    it is acceptable.
    """
    return os.environ.get(env_var_name(prefix, field))


def build_target(cfg: Dict[str, Any], side: str, require_database: bool = True) -> DbTarget:
    """Build the :class:`DbTarget` of one side from config and environment.

    Parameters
    ----------
    cfg:
        Parsed YAML config (may be empty).
    side:
        ``"reference"`` or ``"target"``.
    require_database:
        Whether a database name is mandatory (single-database mode).

    Raises
    ------
    ConfigError
        If a required value is missing or empty (only the password may be
        empty), or the port is not an integer.
    """
    section = cfg.get(side) or {}
    label = str(section.get("label") or DEFAULT_LABELS[side])
    prefix = str(section.get("env_prefix") or label)

    def value(field: str, required: bool) -> Optional[str]:
        cfg_val = section.get(field)
        for found in (get_env_var(prefix, field), None if cfg_val is None else str(cfg_val)):
            # an empty value counts as unset; only the password may be empty
            if found is not None and (found != "" or field == "password"):
                return found
        if required:
            raise ConfigError(
                f"missing {side}.{field}: set {env_var_name(prefix, field)} "
                f"in the environment/.env or '{field}' under '{side}' in the config file"
            )
        return None

    host = value("host", True)
    user = value("user", True)
    password = value("password", True)
    database = value("database", require_database)
    port_raw = value("port", False)
    try:
        port = int(port_raw) if port_raw else DEFAULT_PORT
    except ValueError:
        raise ConfigError(f"invalid {side}.port: {port_raw!r}") from None

    return DbTarget(
        host=host,
        user=user,
        password=password,
        database=database or None,
        port=port,
        label=label,
    )


def read_options(cfg: Dict[str, Any]) -> Options:
    """Read category switches (all enabled by default)."""
    return Options(
        tables=bool(deep_get(cfg, ["options", "tables"], True)),
        views=bool(deep_get(cfg, ["options", "views"], True)),
        procedures=bool(deep_get(cfg, ["options", "procedures"], True)),
        functions=bool(deep_get(cfg, ["options", "functions"], True)),
    )


def read_name_filter(cfg: Dict[str, Any], key: str) -> NameFilter:
    """Read an include/exclude filter section such as ``object_filter``."""
    include = deep_get(cfg, [key, "include"], []) or []
    exclude = deep_get(cfg, [key, "exclude"], []) or []
    if isinstance(include, str):
        include = [include]
    if isinstance(exclude, str):
        exclude = [exclude]
    return NameFilter(
        include=tuple(str(p) for p in include),
        exclude=tuple(str(p) for p in exclude),
        case_sensitive=bool(deep_get(cfg, [key, "case_sensitive"], False)),
    )


def read_context(cfg: Dict[str, Any]) -> int:
    """Read the diff context radius; an absent or empty key means the default."""
    raw = cfg.get("context")
    if raw is None:
        return DEFAULT_CONTEXT
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise ConfigError(f"context must be a non-negative integer, got {raw!r}")
    return raw


def read_color(cfg: Dict[str, Any]) -> bool:
    """Read the color switch; defaults to on for terminals unless ``NO_COLOR`` is set."""
    if "color" in cfg:
        return bool(cfg["color"])
    return sys.stdout.isatty() and "NO_COLOR" not in os.environ


def load_settings(require_database: bool = True, config_path: Optional[Path] = None) -> Settings:
    """Load ``.env`` and YAML config and build the run :class:`Settings`."""
    load_env()
    cfg = load_config(config_path)
    out_dir = cfg.get("out_dir")
    return Settings(
        reference=build_target(cfg, "reference", require_database),
        target=build_target(cfg, "target", require_database),
        options=read_options(cfg),
        object_filter=read_name_filter(cfg, "object_filter"),
        database_filter=read_name_filter(cfg, "database_filter"),
        context=read_context(cfg),
        color=read_color(cfg),
        out_dir=Path(out_dir).resolve() if out_dir else None,
    )
