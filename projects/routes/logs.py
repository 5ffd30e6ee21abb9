from __future__ import annotations

from fastapi import APIRouter

from ..logs import search_logs

router = APIRouter()


@router.get("/api/logs/search")
def api_logs_search(
    page: int = 1,
    size: int = 20,
    action: str | None = None,
    entity_id: str | None = None,
):
    total, items = search_logs(action, entity_id, page, size)
    return {"total": total, "items": items}
