from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Optional

from ..domain.entities import Project
from ..exceptions import ProjectNotFoundError
from ..logs import LogContext
from ..repository.project_repo import ProjectRepository

logger = logging.getLogger(__name__)

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5
_TWO_PLACES = Decimal("0.01")


def validate_project(project: Project) -> Project:
    """
    Checks the request-level rules the repository does not enforce and
    normalises hours to two decimal places. Raises ValueError.
    """
    name = (project.project_name or "").strip()
    if not name:
        raise ValueError("project_name must not be empty")
    project.project_name = name

    if project.difficulty is not None and not (MIN_DIFFICULTY <= project.difficulty <= MAX_DIFFICULTY):
        raise ValueError(f"difficulty must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}")

    for attr in ("estimated_hours", "actual_hours"):
        v = getattr(project, attr)
        if v is None:
            continue
        v = Decimal(v).quantize(_TWO_PLACES)
        if v < 0:
            raise ValueError(f"{attr} must not be negative")
        setattr(project, attr, v)

    if project.notes is not None and not project.notes.strip():
        project.notes = None
    return project


# Columns that may be stored as NULL; project_name is required.
NULLABLE_FIELDS = ("estimated_hours", "actual_hours", "difficulty", "notes")


def merge_project(
    current: Project,
    project_name: Optional[str] = None,
    estimated_hours: Optional[Decimal] = None,
    actual_hours: Optional[Decimal] = None,
    difficulty: Optional[int] = None,
    notes: Optional[str] = None,
    clear: Iterable[str] = (),
) -> Project:
    """
    Build the full-row update for ``current``: every None keeps the existing value.

    Fields named in ``clear`` are set to None instead; only NULLABLE_FIELDS
    can be cleared.
    """
    merged = Project(
        project_id=current.project_id,
        project_name=current.project_name if project_name is None else project_name,
        estimated_hours=current.estimated_hours if estimated_hours is None else estimated_hours,
        actual_hours=current.actual_hours if actual_hours is None else actual_hours,
        difficulty=current.difficulty if difficulty is None else difficulty,
        notes=current.notes if notes is None else notes,
    )
    for name in clear:
        if name not in NULLABLE_FIELDS:
            raise ValueError(f"{name} cannot be cleared.")
        setattr(merged, name, None)
    return merged


class ProjectService:
    def __init__(self, repo: Optional[ProjectRepository] = None):
        self.repo = repo or ProjectRepository()

    def add_project(self, project: Project, log: LogContext) -> Project:
        validate_project(project)
        db_project = self.repo.insert_project(project)
        log.set_entity("PROJECT", str(db_project.project_id))
        log.set_after(db_project.to_dict())
        logger.info("project %s created", db_project.project_id)
        return db_project

    def fetch_all_projects(self) -> list[Project]:
        return self.repo.fetch_all_projects()

    def fetch_project_by_id(self, project_id: int) -> Project:
        project = self.repo.fetch_project_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def modify_project_details(self, project: Project, log: LogContext) -> Project:
        validate_project(project)
        log.set_entity("PROJECT", str(project.project_id))
        log.set_payload(project.scalars())
        if not self.repo.modify_project_details(project):
            raise ProjectNotFoundError(project.project_id)
        updated = self.fetch_project_by_id(project.project_id)
        log.set_after(updated.to_dict())
        logger.info("project %s updated", project.project_id)
        return updated

    def delete_project(self, project_id: int, log: LogContext) -> None:
        log.set_entity("PROJECT", str(project_id))
        if not self.repo.delete_project(project_id):
            raise ProjectNotFoundError(project_id)
        logger.info("project %s deleted", project_id)
