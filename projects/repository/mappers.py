from __future__ import annotations

from dataclasses import dataclass
from sqlite3 import Row
from typing import Callable

from ..domain.entities import Category, Material, Project, Step


def project_from_row(r: Row) -> Project:
    return Project(
        project_id=r["project_id"],
        project_name=r["project_name"],
        estimated_hours=r["estimated_hours"],
        actual_hours=r["actual_hours"],
        difficulty=r["difficulty"],
        notes=r["notes"],
    )


def material_from_row(r: Row) -> Material:
    return Material(
        material_id=r["material_id"],
        project_id=r["project_id"],
        material_name=r["material_name"],
        num_required=r["num_required"],
        cost=r["cost"],
    )


def step_from_row(r: Row) -> Step:
    return Step(
        step_id=r["step_id"],
        project_id=r["project_id"],
        step_text=r["step_text"],
        step_order=r["step_order"],
    )


def category_from_row(r: Row) -> Category:
    return Category(category_id=r["category_id"], category_name=r["category_name"])


@dataclass
class RowExtractors:
    """One mapping function per entity type; swap any of them in tests."""
    project: Callable[[Row], Project] = project_from_row
    material: Callable[[Row], Material] = material_from_row
    step: Callable[[Row], Step] = step_from_row
    category: Callable[[Row], Category] = category_from_row
