from __future__ import annotations

from decimal import Decimal

from projects.shell import ProjectsApp


class _Console:
    def __init__(self, answers):
        self.answers = list(answers)
        self.out = []

    def input(self, prompt):
        self.out.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)

    def print(self, text):
        self.out.append(text)

    @property
    def text(self):
        return "\n".join(self.out)


def _app(answers):
    console = _Console(answers)
    return ProjectsApp(input_fn=console.input, output_fn=console.print), console


def test_add_select_update_delete_flow(tmp_db_path):
    app, console = _app([
        "1", "Paint the fence", "6", "", "9", "2", "two coats",  # difficulty 9 is re-prompted
        "2",
        "3", "",
    ])
    app.run()
    assert "Difficulty must be between 1 and 5" in console.text
    assert "You have successfully created project" in console.text
    assert ": Paint the fence" in console.text
    assert "Invalid project ID selected." in console.text

    project_id = app.service.fetch_all_projects()[0].project_id
    app2, console2 = _app([
        "3", str(project_id),
        "4", "", "", "7.25", "", "",
        "5", str(project_id),
        "",
    ])
    app2.run()
    assert "Project updated successfully!" in console2.text
    assert f"Project {project_id} was deleted successfully." in console2.text
    assert app2.cur_project is None
    assert app2.service.fetch_all_projects() == []


def test_update_keeps_blank_fields(tmp_db_path):
    app, _ = _app(["1", "Tile floor", "10", "", "3", "", ""])
    app.run()
    pid = app.service.fetch_all_projects()[0].project_id

    app2, _ = _app(["3", str(pid), "4", "", "", "11.5", "", "grout", ""])
    app2.run()
    p = app2.cur_project
    assert p.project_name == "Tile floor"
    assert p.estimated_hours == Decimal("10.00")
    assert p.actual_hours == Decimal("11.50")
    assert p.difficulty == 3
    assert p.notes == "grout"


def test_update_without_selection_asks_for_one(tmp_db_path):
    app, console = _app(["4", ""])
    app.run()
    assert "Please select a project." in console.text


def test_errors_are_reported_and_loop_continues(tmp_db_path):
    app, console = _app(["abc", "3", "999", "7", ""])
    app.run()
    assert "abc is not a valid number." in console.text
    assert "Project with project ID=999 does not exist." in console.text
    assert "7 is not a valid selection." in console.text
    assert console.text.rstrip().endswith("Exiting the menu.")


def test_audit_write_failure_keeps_original_error(tmp_db_path, monkeypatch):
    import sqlite3

    from projects.logs import LogContext

    def broken_write(self, result="OK", err=None):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(LogContext, "write", broken_write)
    app, console = _app(["5", "999", ""])
    app.run()
    assert "Error: Project with project ID=999 does not exist. Try again!" in console.text
    assert "database is locked" not in console.text
