import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "projects_test.db"
    # Point the connection provider at this temp DB
    os.environ["PROJECTS_DB_PATH"] = str(path)
    schema = Path(_PROJECT_ROOT / "schema.sql").read_text(encoding="utf-8")
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(schema)
        conn.commit()
    finally:
        conn.close()
    from projects.logs import ensure_log_schema
    ensure_log_schema()
    return str(path)


@pytest.fixture()
def client(tmp_db_path):
    from projects.api import app
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Clean tables before each test for isolation
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("PROJECTS_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    tables = [
        "project_category",
        "material",
        "step",
        "project",
        "category",
        "operation_log",
    ]
    conn = sqlite3.connect(tmp_db_path)
    try:
        for t in tables:
            conn.execute(f"DELETE FROM {t}")
        conn.commit()
    finally:
        conn.close()
    yield


@pytest.fixture()
def repo(tmp_db_path):
    from projects.repository.project_repo import ProjectRepository
    return ProjectRepository()


class Seeder:
    """Writes child rows directly; the repository itself never inserts them."""

    def __init__(self, conn):
        self.conn = conn

    def material(self, project_id, name, num_required=1, cost="1.00"):
        self.conn.execute(
            "INSERT INTO material(project_id, material_name, num_required, cost) VALUES(?,?,?,?)",
            (project_id, name, num_required, cost),
        )

    def step(self, project_id, text, order):
        self.conn.execute(
            "INSERT INTO step(project_id, step_text, step_order) VALUES(?,?,?)",
            (project_id, text, order),
        )

    def category(self, project_id, name):
        cur = self.conn.execute("INSERT INTO category(category_name) VALUES(?)", (name,))
        self.conn.execute(
            "INSERT INTO project_category(project_id, category_id) VALUES(?,?)",
            (project_id, cur.lastrowid),
        )
        return cur.lastrowid


@pytest.fixture()
def seed(tmp_db_path):
    from projects.db import get_conn
    with get_conn() as conn:
        yield Seeder(conn)
