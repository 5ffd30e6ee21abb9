from __future__ import annotations

from decimal import Decimal

import pytest

from projects.db import get_conn
from projects.domain.entities import Project
from projects.exceptions import ProjectNotFoundError
from projects.logs import LogContext, search_logs
from projects.services.project_svc import ProjectService, merge_project, validate_project


@pytest.fixture()
def svc(tmp_db_path):
    return ProjectService()


def _new(name="Build a shed", difficulty=4):
    return Project(
        project_name=name,
        estimated_hours=Decimal("20"),
        actual_hours=Decimal("0"),
        difficulty=difficulty,
        notes="Needs a permit",
    )


def test_add_project_validates_and_logs(svc):
    log = LogContext("PROJECT_CREATE")
    p = svc.add_project(_new(name="  Build a shed  "), log)
    log.write("OK")

    assert p.project_name == "Build a shed"
    assert p.estimated_hours == Decimal("20.00")
    assert log.entity_id == str(p.project_id)

    total, items = search_logs("PROJECT_CREATE", page=1, size=10)
    assert total == 1
    assert items[0]["entity_type"] == "PROJECT"
    assert items[0]["result"] == "OK"
    assert '"Build a shed"' in items[0]["after_json"]


@pytest.mark.parametrize("difficulty", [0, 6, -1])
def test_add_project_rejects_difficulty_out_of_range(svc, difficulty):
    with pytest.raises(ValueError):
        svc.add_project(_new(difficulty=difficulty), LogContext("PROJECT_CREATE"))
    assert svc.fetch_all_projects() == []


def test_add_project_rejects_blank_name(svc):
    with pytest.raises(ValueError):
        svc.add_project(_new(name="   "), LogContext("PROJECT_CREATE"))


def test_validate_rejects_negative_hours():
    p = _new()
    p.actual_hours = Decimal("-1")
    with pytest.raises(ValueError):
        validate_project(p)


def test_fetch_unknown_project_raises_not_found(svc):
    with pytest.raises(ProjectNotFoundError) as ei:
        svc.fetch_project_by_id(77)
    assert "project ID=77" in str(ei.value)


def test_modify_project_details_returns_reloaded_project(svc):
    p = svc.add_project(_new(), LogContext("PROJECT_CREATE"))
    merged = merge_project(p, actual_hours=Decimal("3.5"), notes="Permit granted")
    updated = svc.modify_project_details(merged, LogContext("PROJECT_UPDATE"))

    assert updated.project_id == p.project_id
    assert updated.project_name == "Build a shed"
    assert updated.actual_hours == Decimal("3.50")
    assert updated.notes == "Permit granted"


def test_modify_unknown_project_raises_not_found(svc):
    ghost = _new()
    ghost.project_id = 5150
    with pytest.raises(ProjectNotFoundError):
        svc.modify_project_details(ghost, LogContext("PROJECT_UPDATE"))


def test_delete_project_and_unknown_delete(svc):
    p = svc.add_project(_new(), LogContext("PROJECT_CREATE"))
    svc.delete_project(p.project_id, LogContext("PROJECT_DELETE"))
    with get_conn() as conn:
        assert conn.execute("SELECT 1 FROM project WHERE project_id=?", (p.project_id,)).fetchone() is None
    with pytest.raises(ProjectNotFoundError):
        svc.delete_project(p.project_id, LogContext("PROJECT_DELETE"))


def test_merge_keeps_existing_values_for_none():
    cur = Project(project_id=9, project_name="Old", estimated_hours=Decimal("1.00"),
                  actual_hours=Decimal("2.00"), difficulty=2, notes="n")
    merged = merge_project(cur, project_name="New", difficulty=5)
    assert merged.project_id == 9
    assert merged.project_name == "New"
    assert merged.difficulty == 5
    assert merged.estimated_hours == Decimal("1.00")
    assert merged.actual_hours == Decimal("2.00")
    assert merged.notes == "n"
    assert merged.steps == []


def test_merge_clear_sets_nullable_fields_to_none():
    cur = Project(project_id=9, project_name="Old", notes="n", difficulty=2)
    merged = merge_project(cur, clear=["notes", "difficulty"])
    assert merged.notes is None
    assert merged.difficulty is None
    assert merged.project_name == "Old"

    with pytest.raises(ValueError):
        merge_project(cur, clear=["project_name"])


def test_write_failure_does_not_raise_when_log_store_fails(monkeypatch, caplog):
    import sqlite3

    def broken_write(self, result="OK", err=None):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(LogContext, "write", broken_write)
    log = LogContext("PROJECT_DELETE")
    with caplog.at_level("ERROR", logger="projects.logs"):
        log.write_failure("Project with project ID=1 does not exist.")
    assert "could not record PROJECT_DELETE failure" in caplog.text


def test_search_logs_filters_by_entity(svc):
    a = svc.add_project(_new(name="A"), LogContext("PROJECT_CREATE"))
    for p in (a, svc.add_project(_new(name="B"), LogContext("PROJECT_CREATE"))):
        log = LogContext("PROJECT_CREATE")
        log.set_entity("PROJECT", str(p.project_id))
        log.write("OK")

    total, items = search_logs(entity_id=str(a.project_id))
    assert total == 1
    assert items[0]["entity_id"] == str(a.project_id)
    assert items[0]["latency_ms"] >= 0
