from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional


@dataclass
class Material:
    material_id: Optional[int]
    project_id: Optional[int]
    material_name: str
    num_required: Optional[int] = None
    cost: Optional[Decimal] = None

    def __str__(self) -> str:
        return f"ID={self.material_id}, materialName={self.material_name}, numRequired={self.num_required}, cost={self.cost}"


@dataclass
class Step:
    step_id: Optional[int]
    project_id: Optional[int]
    step_text: str
    step_order: int

    def __str__(self) -> str:
        return f"ID={self.step_id}, stepOrder={self.step_order}, stepText={self.step_text}"


@dataclass
class Category:
    category_id: Optional[int]
    category_name: str

    def __str__(self) -> str:
        return f"ID={self.category_id}, categoryName={self.category_name}"


@dataclass
class Project:
    """
    Project aggregate root.

    Child lists are empty after ``fetch_all_projects`` and filled exactly once
    by ``fetch_project_by_id`` (materials, then steps, then categories).
    """
    project_id: Optional[int] = None
    project_name: str = ""
    estimated_hours: Optional[Decimal] = None
    actual_hours: Optional[Decimal] = None
    difficulty: Optional[int] = None
    notes: Optional[str] = None
    materials: list[Material] = field(default_factory=list)
    steps: list[Step] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)

    def scalars(self) -> dict:
        return {
            "project_name": self.project_name,
            "estimated_hours": self.estimated_hours,
            "actual_hours": self.actual_hours,
            "difficulty": self.difficulty,
            "notes": self.notes,
        }

    def to_dict(self) -> dict:
        """JSON-friendly view (decimals as strings), used by the API and the operation log."""
        def dec(v: Optional[Decimal]) -> Optional[str]:
            return None if v is None else str(v)

        return {
            "project_id": self.project_id,
            "project_name": self.project_name,
            "estimated_hours": dec(self.estimated_hours),
            "actual_hours": dec(self.actual_hours),
            "difficulty": self.difficulty,
            "notes": self.notes,
            "materials": [
                {
                    "material_id": m.material_id,
                    "material_name": m.material_name,
                    "num_required": m.num_required,
                    "cost": dec(m.cost),
                }
                for m in self.materials
            ],
            "steps": [
                {"step_id": s.step_id, "step_order": s.step_order, "step_text": s.step_text}
                for s in self.steps
            ],
            "categories": [
                {"category_id": c.category_id, "category_name": c.category_name}
                for c in self.categories
            ],
        }

    def __str__(self) -> str:
        lines = [
            "",
            f"   ID={self.project_id}",
            f"   name={self.project_name}",
            f"   estimatedHours={self.estimated_hours}",
            f"   actualHours={self.actual_hours}",
            f"   difficulty={self.difficulty}",
            f"   notes={self.notes}",
            "   Materials:",
        ]
        lines += [f"      {m}" for m in self.materials]
        lines.append("   Steps:")
        lines += [f"      {s}" for s in self.steps]
        lines.append("   Categories:")
        lines += [f"      {c}" for c in self.categories]
        return "\n".join(lines)
