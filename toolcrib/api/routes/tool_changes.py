"""Tool-change history endpoints."""

from fastapi import APIRouter, Depends, Query

from toolcrib.api.dependencies import get_catalog_store, get_recorder
from toolcrib.application.dto.responses import (
    ErrorResponse,
    ToolChangeListResponse,
    ToolChangeRecordResponse,
)
from toolcrib.core.entities.catalog import normalize_equipment_number
from toolcrib.core.exceptions import EquipmentNotFoundError
from toolcrib.core.interfaces import ICatalogStore
from toolcrib.core.services import ToolChangeRecorder

router = APIRouter(prefix="/api/tool-changes", tags=["tool-changes"])


@router.get(
    "",
    response_model=ToolChangeListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_tool_changes(
    equipment_number: str | None = Query(default=None, alias="equipmentNumber"),
    factory_id: str | None = Query(default=None, alias="factoryId"),
    limit: int = Query(default=100, ge=1, le=1000),
    recorder: ToolChangeRecorder = Depends(get_recorder),
    catalog: ICatalogStore = Depends(get_catalog_store),
) -> ToolChangeListResponse:
    """Tool-change history, newest first, optionally for one machine."""
    equipment_id = None
    if equipment_number:
        number = normalize_equipment_number(equipment_number)
        equipment = (
            await catalog.get_equipment_by_number(number, factory_id)
            if number is not None
            else None
        )
        if equipment is None:
            raise EquipmentNotFoundError(equipment_number)
        equipment_id = equipment.id

    records = await recorder.list_history(equipment_id=equipment_id, limit=limit)
    return ToolChangeListResponse(
        records=[ToolChangeRecordResponse.from_entity(r) for r in records]
    )
