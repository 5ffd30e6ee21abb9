from __future__ import annotations

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..domain.entities import Project
from ..exceptions import DbError, ProjectNotFoundError
from ..logs import LogContext
from ..services.project_svc import ProjectService, merge_project

router = APIRouter()
service = ProjectService()


class ProjectCreate(BaseModel):
    project_name: str = Field(..., min_length=1)
    estimated_hours: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    actual_hours: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    difficulty: int = Field(..., ge=1, le=5)
    notes: Optional[str] = None


class ProjectUpdate(BaseModel):
    """Omitted fields keep their stored value; an explicit null clears a nullable one."""
    project_name: Optional[str] = Field(None, min_length=1)
    estimated_hours: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    actual_hours: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    difficulty: Optional[int] = Field(None, ge=1, le=5)
    notes: Optional[str] = None


@router.get("/api/projects")
def api_projects_list():
    try:
        items = service.fetch_all_projects()
        return {"items": [{"project_id": p.project_id, "project_name": p.project_name} for p in items]}
    except DbError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/api/projects/{project_id}")
def api_project_get(project_id: int):
    try:
        return service.fetch_project_by_id(project_id).to_dict()
    except ProjectNotFoundError as nf:
        raise HTTPException(status_code=404, detail=str(nf))
    except DbError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/projects", status_code=201)
def api_project_create(body: ProjectCreate):
    log = LogContext("PROJECT_CREATE")
    log.set_payload(body.model_dump(mode="json"))
    try:
        project = service.add_project(Project(**body.model_dump()), log)
        log.write("OK")
        return project.to_dict()
    except ValueError as ve:
        log.write_failure(str(ve))
        raise HTTPException(status_code=400, detail=str(ve))
    except DbError as e:
        log.write_failure(str(e))
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/api/projects/{project_id}")
def api_project_update(project_id: int, body: ProjectUpdate):
    log = LogContext("PROJECT_UPDATE")
    try:
        current = service.fetch_project_by_id(project_id)
        log.set_before(current.to_dict())
        fields = body.model_dump(exclude_unset=True)
        merged = merge_project(
            current,
            clear=[k for k, v in fields.items() if v is None],
            **{k: v for k, v in fields.items() if v is not None},
        )
        updated = service.modify_project_details(merged, log)
        log.write("OK")
        return updated.to_dict()
    except ProjectNotFoundError as nf:
        log.write_failure(str(nf))
        raise HTTPException(status_code=404, detail=str(nf))
    except ValueError as ve:
        log.write_failure(str(ve))
        raise HTTPException(status_code=400, detail=str(ve))
    except DbError as e:
        log.write_failure(str(e))
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/api/projects/{project_id}")
def api_project_delete(project_id: int):
    log = LogContext("PROJECT_DELETE")
    try:
        service.delete_project(project_id, log)
        log.write("OK")
        return {"message": "ok"}
    except ProjectNotFoundError as nf:
        log.write_failure(str(nf))
        raise HTTPException(status_code=404, detail=str(nf))
    except DbError as e:
        log.write_failure(str(e))
        raise HTTPException(status_code=500, detail=str(e))
