from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from decimal import Decimal
from sqlite3 import Connection
from typing import Callable, ContextManager, Iterator, Optional

from ..db import Transaction, get_conn
from ..domain.entities import Category, Material, Project, Step
from ..exceptions import DbError
from .binder import ParameterBinder
from .mappers import RowExtractors

logger = logging.getLogger(__name__)

CATEGORY_TABLE = "category"
MATERIAL_TABLE = "material"
PROJECT_TABLE = "project"
PROJECT_CATEGORY_TABLE = "project_category"
STEP_TABLE = "step"


class ProjectRepository:
    """
    Reads and writes the Project aggregate.

    Each public call opens its own connection, runs inside at most one
    transaction on it, and releases it before returning. Failures are rolled
    back and re-raised as DbError; unknown ids on update/delete come back as
    ``False``.
    """

    def __init__(
        self,
        connect: Callable[[], ContextManager[Connection]] = get_conn,
        tx: Optional[Transaction] = None,
        binder: Optional[ParameterBinder] = None,
        extractors: Optional[RowExtractors] = None,
    ):
        self._connect = connect
        self._tx = tx or Transaction()
        self._binder = binder or ParameterBinder()
        self._extract = extractors or RowExtractors()

    # ---------- writes ----------

    def insert_project(self, project: Project) -> Project:
        """Insert the five scalar columns and set the generated id on ``project`` (in place)."""
        sql = (
            f"INSERT INTO {PROJECT_TABLE} "
            "(project_name, estimated_hours, actual_hours, difficulty, notes) "
            "VALUES (?, ?, ?, ?, ?)"
        )
        with self._transaction() as conn:
            params = self._binder.bind(self._scalar_params(project))
            cur = conn.execute(sql, params)
            project_id = cur.lastrowid
            if project_id is None:
                raise sqlite3.DatabaseError("insert returned no generated project_id")

        project.project_id = int(project_id)
        logger.debug("inserted project %s", project.project_id)
        return project

    def modify_project_details(self, project: Project) -> bool:
        """Full replace of the five scalars by primary key. True iff exactly one row matched."""
        sql = (
            f"UPDATE {PROJECT_TABLE} SET "
            "project_name = ?, "
            "estimated_hours = ?, "
            "actual_hours = ?, "
            "difficulty = ?, "
            "notes = ? "
            "WHERE project_id = ?"
        )
        with self._transaction() as conn:
            if project.project_id is None:
                raise ValueError("project_id is required for update")
            params = self._binder.bind(self._scalar_params(project) + [(project.project_id, int)])
            success = conn.execute(sql, params).rowcount == 1
        return success

    def delete_project(self, project_id: int) -> bool:
        sql = f"DELETE FROM {PROJECT_TABLE} WHERE project_id = ?"
        with self._transaction() as conn:
            params = self._binder.bind([(project_id, int)])
            success = conn.execute(sql, params).rowcount == 1
        return success

    # ---------- reads ----------

    def fetch_all_projects(self) -> list[Project]:
        """All projects ordered by name. Child lists are NOT loaded."""
        sql = f"SELECT * FROM {PROJECT_TABLE} ORDER BY project_name COLLATE NOCASE"
        with self._transaction(begin=False) as conn:
            rows = conn.execute(sql).fetchall()
            projects = [self._extract.project(r) for r in rows]
        return projects

    def fetch_project_by_id(self, project_id: int) -> Optional[Project]:
        """
        Project plus materials, steps (by step_order) and categories, read in
        one transaction. Returns None when no row matches; the transaction is
        committed on that path too.
        """
        sql = f"SELECT * FROM {PROJECT_TABLE} WHERE project_id = ?"
        with self._transaction() as conn:
            params = self._binder.bind([(project_id, int)])
            row = conn.execute(sql, params).fetchone()
            project = self._extract.project(row) if row is not None else None

            if project is not None:
                materials = self._fetch_materials(conn, params)
                steps = self._fetch_steps(conn, params)
                categories = self._fetch_categories(conn, params)
                project.materials.extend(materials)
                project.steps.extend(steps)
                project.categories.extend(categories)
        return project

    # ---------- internals ----------

    def _fetch_materials(self, conn: Connection, params: tuple) -> list[Material]:
        sql = f"SELECT * FROM {MATERIAL_TABLE} WHERE project_id = ?"
        return [self._extract.material(r) for r in conn.execute(sql, params).fetchall()]

    def _fetch_steps(self, conn: Connection, params: tuple) -> list[Step]:
        sql = f"SELECT * FROM {STEP_TABLE} WHERE project_id = ? ORDER BY step_order"
        return [self._extract.step(r) for r in conn.execute(sql, params).fetchall()]

    def _fetch_categories(self, conn: Connection, params: tuple) -> list[Category]:
        sql = (
            f"SELECT c.* FROM {CATEGORY_TABLE} c "
            f"JOIN {PROJECT_CATEGORY_TABLE} pc USING (category_id) "
            "WHERE pc.project_id = ?"
        )
        return [self._extract.category(r) for r in conn.execute(sql, params).fetchall()]

    @staticmethod
    def _scalar_params(project: Project) -> list[tuple[object, type]]:
        # Fixed column order: name, estimated hours, actual hours, difficulty, notes
        return [
            (project.project_name, str),
            (project.estimated_hours, Decimal),
            (project.actual_hours, Decimal),
            (project.difficulty, int),
            (project.notes, str),
        ]

    @contextmanager
    def _transaction(self, begin: bool = True) -> Iterator[Connection]:
        """
        idle -> BEGIN -> statements -> COMMIT, or ROLLBACK then DbError.

        With ``begin=False`` no transaction is opened, but one left open by
        a failing statement is still rolled back.
        """
        try:
            with self._connect() as conn:
                if begin:
                    self._tx.begin(conn)
                try:
                    yield conn
                    if begin:
                        self._tx.commit(conn)
                except Exception as e:
                    rollback_error = self._tx.rollback(conn)
                    raise DbError(str(e), rollback_error=rollback_error) from e
        except DbError:
            raise
        except Exception as e:
            # connect / BEGIN failures (sqlite or filesystem), before any statement ran
            raise DbError(str(e)) from e
