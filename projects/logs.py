from __future__ import annotations

import datetime as dt
import json
import logging
import sqlite3
import sys
import time
from typing import Optional

from .db import get_conn

logger = logging.getLogger(__name__)

# One row per project write made through the shell or the HTTP API.
DDL = """
CREATE TABLE IF NOT EXISTS operation_log (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  ts TEXT NOT NULL,
  action TEXT NOT NULL,
  entity_type TEXT,
  entity_id TEXT,
  before_json TEXT,
  after_json TEXT,
  payload_json TEXT,
  result TEXT NOT NULL,
  err_msg TEXT,
  latency_ms INTEGER
);
CREATE INDEX IF NOT EXISTS idx_log_action_entity ON operation_log(action, entity_id);
"""

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level_name: str = "INFO") -> None:
    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S", stream=sys.stderr)


def ensure_log_schema():
    with get_conn() as conn:
        conn.executescript(DDL)


def _as_json(obj) -> Optional[str]:
    if obj is None:
        return None
    # Decimal hours and costs are stored as their string form
    return json.dumps(obj, ensure_ascii=False, default=str)


class LogContext:
    """
    Audit entry for one PROJECT_CREATE / PROJECT_UPDATE / PROJECT_DELETE.

    The caller fills in what it knows (payload, before), the service adds the
    project id and the stored result, and the caller writes it once.
    """

    def __init__(self, action: str):
        self.action = action
        self.started = time.perf_counter()
        self.entity_type: Optional[str] = None
        self.entity_id: Optional[str] = None
        self.before = None
        self.after = None
        self.payload = None

    def set_entity(self, etype: str, eid: str):
        self.entity_type = etype
        self.entity_id = eid

    def set_before(self, obj): self.before = obj
    def set_after(self, obj): self.after = obj
    def set_payload(self, obj): self.payload = obj

    def write(self, result: str = "OK", err: Optional[str] = None):
        with get_conn() as conn:
            conn.execute(
                "INSERT INTO operation_log(ts, action, entity_type, entity_id, before_json, after_json,"
                " payload_json, result, err_msg, latency_ms) VALUES(?,?,?,?,?,?,?,?,?,?)",
                (
                    dt.datetime.now(dt.timezone.utc).isoformat(),
                    self.action,
                    self.entity_type,
                    self.entity_id,
                    _as_json(self.before),
                    _as_json(self.after),
                    _as_json(self.payload),
                    result,
                    err,
                    int((time.perf_counter() - self.started) * 1000),
                ),
            )

    def write_failure(self, err: str) -> None:
        """Record an ERROR entry without letting the audit write replace the failure being reported."""
        try:
            self.write("ERROR", err)
        except (sqlite3.Error, OSError):
            logger.exception("could not record %s failure in operation_log", self.action)


def search_logs(action: str | None = None, entity_id: str | None = None, page: int = 1, size: int = 20):
    """Newest first. Returns ``(total, rows)`` for the requested page."""
    where, params = [], []
    if action:
        where.append("action = ?")
        params.append(action)
    if entity_id:
        where.append("entity_id = ?")
        params.append(entity_id)
    wh = " WHERE " + " AND ".join(where) if where else ""
    with get_conn() as conn:
        total = conn.execute(f"SELECT COUNT(1) AS cnt FROM operation_log{wh}", params).fetchone()["cnt"]
        rows = conn.execute(
            f"SELECT * FROM operation_log{wh} ORDER BY id DESC LIMIT ? OFFSET ?",
            [*params, size, (page - 1) * size],
        ).fetchall()
        return total, [dict(r) for r in rows]
