from __future__ import annotations

# projects/db.py
import logging
import os
import sqlite3
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator

import yaml

logger = logging.getLogger(__name__)

# DB path resolution order:
# 1) env PROJECTS_DB_PATH (highest priority)
# 2) config.yaml test_db_path (when running under tests)
# 3) config.yaml db_path (production default)
# 4) fallback: projects.db in the repository root
_PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "projects.db")
_CONFIG_PATH = os.path.join(_PROJECT_ROOT, "config.yaml")
SCHEMA_PATH = os.path.join(_PROJECT_ROOT, "schema.sql")

_TWO_PLACES = Decimal("0.01")


def _adapt_decimal(value: Decimal) -> str:
    return str(value.quantize(_TWO_PLACES))


def _convert_decimal(raw: bytes) -> Decimal:
    return Decimal(raw.decode("utf-8")).quantize(_TWO_PLACES)


sqlite3.register_adapter(Decimal, _adapt_decimal)
sqlite3.register_converter("DECIMAL", _convert_decimal)


def read_config(path: str | None = None) -> dict:
    cfg_path = path or os.environ.get("PROJECTS_CONFIG") or _CONFIG_PATH
    if not os.path.exists(cfg_path):
        return {}
    with open(cfg_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    out = {}
    for k in ("db_path", "test_db_path", "log_level"):
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    return out


def get_db_path(config_path: str | None = None) -> str:
    env_path = os.environ.get("PROJECTS_DB_PATH")
    cfg = read_config(config_path)
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and cfg_test:
        path = cfg_test
    elif cfg_db:
        path = cfg_db if os.path.isabs(cfg_db) else os.path.join(_PROJECT_ROOT, cfg_db)
    else:
        path = _ROOT_DB

    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


@contextmanager
def get_conn(db_path: str | None = None) -> Iterator[sqlite3.Connection]:
    """
    Open a fresh SQLite connection, closed on every exit path.

    Autocommit mode (isolation_level=None): transactions are opened explicitly
    through :class:`Transaction`. foreign_keys is ON, rows are ``sqlite3.Row``
    and DECIMAL columns come back as ``Decimal`` with two places.
    """
    path = db_path or get_db_path()
    conn = sqlite3.connect(
        path,
        detect_types=sqlite3.PARSE_DECLTYPES,
        check_same_thread=False,
        isolation_level=None,
    )
    try:
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.row_factory = sqlite3.Row
        yield conn
    finally:
        conn.close()


class Transaction:
    """Explicit transaction control on an autocommit connection."""

    def begin(self, conn: sqlite3.Connection) -> None:
        conn.execute("BEGIN")

    def commit(self, conn: sqlite3.Connection) -> None:
        conn.execute("COMMIT")

    def rollback(self, conn: sqlite3.Connection) -> Exception | None:
        """
        Best-effort rollback. Returns the rollback failure instead of raising
        it, so the caller can keep propagating the original error.
        """
        if not conn.in_transaction:
            return None
        try:
            conn.execute("ROLLBACK")
            logger.warning("transaction rolled back")
            return None
        except sqlite3.Error as e:
            logger.error("rollback failed: %s", e)
            return e


def ensure_schema(conn: sqlite3.Connection, schema_path: str = SCHEMA_PATH) -> None:
    with open(schema_path, "r", encoding="utf-8") as f:
        conn.executescript(f.read())
