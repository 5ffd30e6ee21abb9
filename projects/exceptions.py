from __future__ import annotations


class DbError(Exception):
    """
    Store failure raised by the repository layer.

    Always raised ``from`` the underlying exception. When the rollback that
    followed the failure also failed, that error is kept in ``rollback_error``.
    """

    def __init__(self, message: str, rollback_error: Exception | None = None):
        super().__init__(message)
        self.rollback_error = rollback_error


class ProjectNotFoundError(LookupError):
    def __init__(self, project_id: int):
        super().__init__(f"Project with project ID={project_id} does not exist.")
        self.project_id = project_id
