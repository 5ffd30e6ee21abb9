from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from .domain.entities import Project
from .logs import LogContext
from .services.project_svc import MAX_DIFFICULTY, MIN_DIFFICULTY, ProjectService, merge_project

logger = logging.getLogger(__name__)

OPERATIONS = [
    "1) Add a project",
    "2) List projects",
    "3) Select a project",
    "4) Update project details",
    "5) Delete a project",
]


class ProjectsApp:
    """Text menu over ProjectService. Blank input at the menu prompt quits."""

    def __init__(
        self,
        service: Optional[ProjectService] = None,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ):
        self.service = service or ProjectService()
        self._input = input_fn
        self._print = output_fn
        self.cur_project: Optional[Project] = None

    def run(self) -> None:
        done = False
        while not done:
            try:
                operation = self._get_operation()
                if operation == -1:
                    done = self._exit_menu()
                elif operation == 1:
                    self.create_project()
                elif operation == 2:
                    self.list_projects()
                elif operation == 3:
                    self.select_project()
                elif operation == 4:
                    self.update_project_details()
                elif operation == 5:
                    self.delete_project()
                else:
                    self._print(f"\n{operation} is not a valid selection. Try again.")
            except EOFError:
                done = self._exit_menu()
            except Exception as e:
                logger.debug("menu operation failed", exc_info=True)
                self._print(f"\nError: {e} Try again!")

    # ---------- operations ----------

    def create_project(self) -> None:
        project = Project(
            project_name=self._get_string_input("Enter the project name: ") or "",
            estimated_hours=self._get_decimal_input("Enter the estimated hours: "),
            actual_hours=self._get_decimal_input("Enter the actual hours: "),
            difficulty=self._get_difficulty_input(f"Enter the project difficulty ({MIN_DIFFICULTY}-{MAX_DIFFICULTY}): "),
            notes=self._get_string_input("Enter the project notes: "),
        )
        log = LogContext("PROJECT_CREATE")
        log.set_payload(project.scalars())
        try:
            db_project = self.service.add_project(project, log)
            log.write("OK")
        except Exception as e:
            log.write_failure(str(e))
            raise
        self._print(f"\nYou have successfully created project: {db_project}")

    def list_projects(self) -> None:
        projects = self.service.fetch_all_projects()
        self._print("\nProjects:")
        for p in projects:
            self._print(f"   {p.project_id}: {p.project_name}")

    def select_project(self) -> None:
        self.list_projects()
        project_id = self._get_int_input("Enter a project ID to select a project: ")
        self.cur_project = None
        if project_id is None:
            self._print("\nInvalid project ID selected.")
            return
        self.cur_project = self.service.fetch_project_by_id(project_id)

    def update_project_details(self) -> None:
        if self.cur_project is None:
            self._print("\nPlease select a project.")
            return
        cur = self.cur_project
        project = merge_project(
            cur,
            project_name=self._get_string_input(f"Enter the project name [{cur.project_name}]: "),
            estimated_hours=self._get_decimal_input(f"Enter the estimated hours [{cur.estimated_hours}]: "),
            actual_hours=self._get_decimal_input(f"Enter the actual hours [{cur.actual_hours}]: "),
            difficulty=self._get_int_input(f"Enter the project difficulty ({MIN_DIFFICULTY}-{MAX_DIFFICULTY}) [{cur.difficulty}]: "),
            notes=self._get_string_input(f"Enter the project notes [{cur.notes}]: "),
        )
        log = LogContext("PROJECT_UPDATE")
        log.set_before(cur.to_dict())
        try:
            self.cur_project = self.service.modify_project_details(project, log)
            log.write("OK")
        except Exception as e:
            log.write_failure(str(e))
            raise
        self._print("\nProject updated successfully!")

    def delete_project(self) -> None:
        self.list_projects()
        project_id = self._get_int_input("Enter the ID of the project to delete: ")
        if project_id is None:
            self._print("\nInvalid project ID.")
            return
        log = LogContext("PROJECT_DELETE")
        try:
            self.service.delete_project(project_id, log)
            log.write("OK")
        except Exception as e:
            log.write_failure(str(e))
            raise
        self._print(f"\nProject {project_id} was deleted successfully.")

        if self.cur_project is not None and self.cur_project.project_id == project_id:
            self.cur_project = None

    # ---------- input helpers ----------

    def _get_operation(self) -> int:
        self._print_operations()
        op = self._get_int_input("\nEnter a menu selection (press Enter to quit): ")
        return -1 if op is None else op

    def _print_operations(self) -> None:
        self._print("\nThese are the available selections. Press the Enter key to quit:")
        for op in OPERATIONS:
            self._print(f"   {op}")
        if self.cur_project is None:
            self._print("\nYou are not working with a project.")
        else:
            self._print(f"\nYou are working with project: {self.cur_project}")

    def _exit_menu(self) -> bool:
        self._print("\nExiting the menu.")
        return True

    def _get_difficulty_input(self, prompt: str) -> int:
        while True:
            difficulty = self._get_int_input(prompt)
            if difficulty is not None and MIN_DIFFICULTY <= difficulty <= MAX_DIFFICULTY:
                return difficulty
            self._print(f"\nDifficulty must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}. Please try again.")

    def _get_decimal_input(self, prompt: str) -> Optional[Decimal]:
        text = self._get_string_input(prompt)
        if text is None:
            return None
        try:
            return Decimal(text).quantize(Decimal("0.01"))
        except InvalidOperation:
            raise ValueError(f"{text} is not a valid decimal number.") from None

    def _get_int_input(self, prompt: str) -> Optional[int]:
        text = self._get_string_input(prompt)
        if text is None:
            return None
        try:
            return int(text)
        except ValueError:
            raise ValueError(f"{text} is not a valid number.") from None

    def _get_string_input(self, prompt: str) -> Optional[str]:
        line = self._input(prompt)
        return None if not line.strip() else line.strip()
