from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.core.pagination import PaginationParams
from app.dependencies import get_zone_service
from app.models.zone import ZoneStatus, ZoneType
from app.repositories.base import ZoneListOptions, ZoneRecord
from app.schemas.common import ErrorResponse, PaginatedResponse
from app.schemas.zone import ZoneConfig, ZoneCreate, ZoneResponse, ZoneUpdate
from app.services.zone_service import ZoneService

router = APIRouter(
    prefix="/zones",
    tags=["zones"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid name or zone type"},
        404: {"model": ErrorResponse, "description": "Zone not found"},
        409: {"model": ErrorResponse, "description": "Zone still referenced by qubes"},
    },
)


def _to_response(record: ZoneRecord) -> ZoneResponse:
    return ZoneResponse(
        id=record.id,
        name=record.name,
        type=record.type,
        status=record.status,
        config=ZoneConfig.model_validate(record.config),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


@router.post(
    "",
    response_model=ZoneResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new zone",
)
async def create_zone(
    payload: ZoneCreate,
    service: Annotated[ZoneService, Depends(get_zone_service)],
) -> ZoneResponse:
    record = await service.create(payload)
    return _to_response(record)


@router.get(
    "",
    response_model=PaginatedResponse[ZoneResponse],
    summary="List zones, newest first (paginated)",
)
async def list_zones(
    pagination: Annotated[PaginationParams, Depends()],
    service: Annotated[ZoneService, Depends(get_zone_service)],
    zone_status: Annotated[ZoneStatus | None, Query(alias="status")] = None,
    zone_type: Annotated[ZoneType | None, Query(alias="type")] = None,
) -> PaginatedResponse[ZoneResponse]:
    opts = ZoneListOptions(
        status=zone_status,
        type=zone_type,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    records, total = await service.list(opts)
    items = [_to_response(r) for r in records]
    return PaginatedResponse.build(
        items=items, total=total, limit=pagination.limit, offset=pagination.offset
    )


@router.get(
    "/{zone_id}",
    response_model=ZoneResponse,
    summary="Get a zone by ID",
)
async def get_zone(
    zone_id: str,
    service: Annotated[ZoneService, Depends(get_zone_service)],
) -> ZoneResponse:
    record = await service.get(zone_id)
    return _to_response(record)


@router.patch(
    "/{zone_id}",
    response_model=ZoneResponse,
    summary="Update zone name and/or config",
)
async def update_zone(
    zone_id: str,
    payload: ZoneUpdate,
    service: Annotated[ZoneService, Depends(get_zone_service)],
) -> ZoneResponse:
    record = await service.update(zone_id, payload)
    return _to_response(record)


@router.delete(
    "/{zone_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a zone that no qube references",
)
async def delete_zone(
    zone_id: str,
    service: Annotated[ZoneService, Depends(get_zone_service)],
) -> None:
    await service.delete(zone_id)


@router.post(
    "/{zone_id}/connect",
    response_model=ZoneResponse,
    summary="Mark a zone as connected",
)
async def connect_zone(
    zone_id: str,
    service: Annotated[ZoneService, Depends(get_zone_service)],
) -> ZoneResponse:
    record = await service.connect(zone_id)
    return _to_response(record)


@router.post(
    "/{zone_id}/disconnect",
    response_model=ZoneResponse,
    summary="Mark a zone as disconnected",
)
async def disconnect_zone(
    zone_id: str,
    service: Annotated[ZoneService, Depends(get_zone_service)],
) -> ZoneResponse:
    record = await service.disconnect(zone_id)
    return _to_response(record)
