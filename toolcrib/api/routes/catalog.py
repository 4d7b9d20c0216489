"""Tool type and equipment catalog endpoints."""

from fastapi import APIRouter, Depends, status

from toolcrib.api.dependencies import get_catalog_store
from toolcrib.application.dto.requests import EquipmentCreateRequest, ToolTypeCreateRequest
from toolcrib.application.dto.responses import (
    EquipmentResponse,
    ErrorResponse,
    ToolTypeResponse,
)
from toolcrib.core.entities.catalog import Equipment, ToolType, normalize_equipment_number
from toolcrib.core.exceptions import ToolTypeNotFoundError, ValidationError
from toolcrib.core.interfaces import ICatalogStore

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


@router.post(
    "/tool-types",
    response_model=ToolTypeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_tool_type(
    request: ToolTypeCreateRequest,
    catalog: ICatalogStore = Depends(get_catalog_store),
) -> ToolTypeResponse:
    code = request.code.strip()
    if not code:
        raise ValidationError("code", "is required", request.code)
    tool_type = await catalog.add_tool_type(
        ToolType(code=code, name=request.name, unit_cost=request.unit_cost)
    )
    return ToolTypeResponse.from_entity(tool_type)


@router.get(
    "/tool-types/{code}",
    response_model=ToolTypeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_tool_type(
    code: str,
    catalog: ICatalogStore = Depends(get_catalog_store),
) -> ToolTypeResponse:
    tool_type = await catalog.get_tool_type_by_code(code)
    if tool_type is None:
        raise ToolTypeNotFoundError(code)
    return ToolTypeResponse.from_entity(tool_type)


@router.post(
    "/equipment",
    response_model=EquipmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_equipment(
    request: EquipmentCreateRequest,
    catalog: ICatalogStore = Depends(get_catalog_store),
) -> EquipmentResponse:
    """Register a machine; 'C007' and 7 name the same machine."""
    number = normalize_equipment_number(request.equipment_number)
    if number is None:
        raise ValidationError(
            "equipment_number", "must be a number with an optional letter prefix",
            request.equipment_number,
        )
    equipment = await catalog.add_equipment(
        Equipment(
            equipment_number=number,
            location=request.location,
            factory_id=request.factory_id,
        )
    )
    return EquipmentResponse.from_entity(equipment)
